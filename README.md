# chessinfra

Supporting parts of a UCI chess engine as a Python library with no runtime
dependencies.

## Modules

- `chessinfra.types`: core chess types. The enums `Color`, `PieceType`,
  `MoveType`, `Bound` and `CastlingRight`, plus helpers for:
  - 16-bit moves: `make_move`, `make_promotion`, `make_enpassant`,
    `make_castling`, `from_sq`, `to_sq`, `type_of_move`, `promotion_type`,
    `reverse_move`, `move_is_ok`
  - squares and pieces: `make_square`, `file_of`, `rank_of`,
    `relative_square`, `relative_rank`, `make_piece`, `type_of_piece`,
    `color_of`, `opposite_colors`
  - packed middlegame/endgame scores: `make_score`, `mg_value`, `eg_value`,
    `score_divide`
  - mate values: `mate_in`, `mated_in`
  - `make_key`, one step of a 64-bit linear congruential generator.
- `chessinfra.timeman`: `TimeManager.init` turns a `Limits` record (clock
  times, increments, moves to go, move overhead, slow-mover percentage,
  nodes-as-time and ponder settings) into `optimum_time` and `maximum_time`
  for the current move. `TimeManager.elapsed` reports time used, or nodes
  searched in nodes-as-time mode.
- `chessinfra.tt`: a clustered transposition table with generation-based
  replacement. `TranspositionTable` has `probe`, `new_search`, `hashfull`,
  `clear` and `resize`, and writes entries to a file and merges them back with
  `serialize` and `deserialize`. `TTEntry.save` stores a result unless a more
  valuable one is already there; `pack_entry` and `unpack_entry` convert an
  entry to and from its 16-byte record.
- `chessinfra.options`: the engine's option set. `Options.set_by_name` applies
  a textual value (names are case-insensitive), `Options.on_change` registers
  a listener, and `Options.format_options` produces the
  `option name ... type ...` lines.
- `chessinfra.uci`: protocol text. `parse_position`, `parse_go` and
  `parse_setoption` parse command arguments; `apply_setoption` applies a
  `setoption` command to an `Options` object and raises `KeyError` for an
  unknown option. `format_value` (`cp` / `mate`), `format_square` and
  `format_move` render scores, squares and moves.
- `chessinfra.tbpairs`: decompression of pair-encoded tablebase data.
  `setup_pairs` reads a compressed table's decoding header, and
  `PairsData.decompress` returns the stored entry for a position index once the
  index, size and data offsets are set.

## What it does not do

- There is no engine: no board representation, move generation, search or
  evaluation, and no command loop or command-line program. `parse_position`
  returns the FEN and move strings without checking them against a position.
- Tablebase support stops at block decompression. The package does not find
  tablebase files, compute a position's index within a table or probe
  win/draw/loss, distance-to-mate or distance-to-zero values.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from chessinfra.types import make_move, make_square
from chessinfra.uci import format_move, format_value, parse_go

move = make_move(make_square(4, 1), make_square(4, 3))
print(format_move(move, False))      # e2e4
print(format_value(208))             # cp 100

go = parse_go("wtime 60000 btime 60000 winc 1000 binc 1000")
print(go.limits.time)                # [60000, 60000]
```

```python
from chessinfra.options import Options

options = Options()
options.set_by_name("Hash", "64")
print(options.value("Hash"))         # 64
print(options.format_options())
```

```python
from chessinfra.tt import TranspositionTable
from chessinfra.types import Bound

table = TranspositionTable(1)
entry, found = table.probe(0x1234)
entry.save(0x1234, 35, False, Bound.EXACT, 10, 0, 20, table.generation8)
entry, found = table.probe(0x1234)
print(found, entry.depth, entry.value)   # True 10 35
```