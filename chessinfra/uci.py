"""Parsing and formatting of the text protocol spoken with a chess GUI."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .options import Options
from .timeman import Limits
from .types import (
    FILE_C,
    FILE_G,
    MOVE_NULL,
    PAWN_VALUE_EG,
    VALUE_MATE,
    VALUE_MATE_IN_MAX_PLY,
    Color,
    MoveType,
    file_of,
    from_sq,
    make_square,
    promotion_type,
    rank_of,
    to_sq,
    type_of_move,
)

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
EMPTY_VALUE = "<empty>"

_FEN_LIMIT = 127
_BLANKS = " \t"
_SPLIT = re.compile(r"[ \t]+")
_INT_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")
_UINT_PREFIX = re.compile(r"[ \t\n\v\f\r]*\+?(\d+)")


def _tokens(text: str) -> list[str]:
    return [tok for tok in _SPLIT.split(text) if tok]


def _atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _atou(text: str) -> int:
    match = _UINT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _normalize_move(text: str) -> str:
    # Some interfaces send the promotion piece in upper case.
    return text[:4] + text[4].lower() if len(text) == 5 else text


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def format_value(v: int) -> str:
    """Render a score as ``cp <centipawns>`` or ``mate <moves>``."""
    if abs(v) < VALUE_MATE_IN_MAX_PLY:
        return f"cp {_trunc_div(v * 100, PAWN_VALUE_EG)}"
    plies = VALUE_MATE - v + 1 if v > 0 else -VALUE_MATE - v
    return f"mate {_trunc_div(plies, 2)}"


def format_square(s: int) -> str:
    """Algebraic name of a square, such as ``g1``."""
    return chr(ord("a") + file_of(s)) + chr(ord("1") + rank_of(s))


def format_move(m: int, chess960: bool = False) -> str:
    """Coordinate notation of a move, such as ``g1f3`` or ``a7a8q``.

    Castling is stored as king-takes-rook; outside Chess960 it is shown as
    the king's two-square step.
    """
    if m == 0:
        return "(none)"
    if m == MOVE_NULL:
        return "0000"
    origin = from_sq(m)
    target = to_sq(m)
    kind = type_of_move(m)
    if kind is MoveType.CASTLING and not chess960:
        target = make_square(FILE_G if target > origin else FILE_C, rank_of(origin))
    text = format_square(origin) + format_square(target)
    if kind is MoveType.PROMOTION:
        text += " pnbrqk"[promotion_type(m)]
    return text


@dataclass
class PositionCommand:
    """A position given by FEN followed by moves in coordinate notation."""

    fen: str
    moves: list[str] = field(default_factory=list)


@dataclass
class GoCommand:
    """The search request carried by a ``go`` command."""

    limits: Limits = field(default_factory=Limits)
    searchmoves: list[str] = field(default_factory=list)
    ponder: bool = False
    perft: Optional[int] = None


def parse_position(text: str) -> Optional[PositionCommand]:
    """Parse the arguments of ``position``; None if neither fen nor startpos."""
    moves_text: Optional[str] = None
    head = text
    idx = text.find("moves")
    if idx >= 0:
        if idx > 0:
            head = text[: idx - 1]
        moves_text = text[idx + 5 :]

    if head.startswith("fen"):
        fen = head[4:][:_FEN_LIMIT]
    elif head.startswith("startpos"):
        fen = START_FEN
    else:
        return None

    moves = [_normalize_move(tok) for tok in _tokens(moves_text)] if moves_text else []
    return PositionCommand(fen, moves)


def _argument(tokens: Iterator[str], keyword: str) -> str:
    value = next(tokens, None)
    if value is None:
        raise ValueError(f"missing value after '{keyword}'")
    return value


def parse_go(text: str) -> GoCommand:
    """Parse the arguments of ``go`` into search limits."""
    cmd = GoCommand()
    limits = cmd.limits
    limits.start_time = int(time.monotonic() * 1000)
    tokens = iter(_tokens(text))
    int_fields = {
        "movestogo": "movestogo",
        "depth": "depth",
        "movetime": "movetime",
        "mate": "mate",
    }
    for tok in tokens:
        if tok == "searchmoves":
            cmd.searchmoves.extend(_normalize_move(t) for t in tokens)
        elif tok == "wtime":
            limits.time[Color.WHITE] = _atoi(_argument(tokens, tok))
        elif tok == "btime":
            limits.time[Color.BLACK] = _atoi(_argument(tokens, tok))
        elif tok == "winc":
            limits.inc[Color.WHITE] = _atoi(_argument(tokens, tok))
        elif tok == "binc":
            limits.inc[Color.BLACK] = _atoi(_argument(tokens, tok))
        elif tok in int_fields:
            setattr(limits, int_fields[tok], _atoi(_argument(tokens, tok)))
        elif tok == "nodes":
            limits.nodes = _atou(_argument(tokens, tok))
        elif tok == "infinite":
            limits.infinite = True
        elif tok == "ponder":
            cmd.ponder = True
        elif tok == "perft":
            cmd.perft = _atoi(_argument(tokens, tok))
            return cmd
    return cmd


def parse_setoption(text: str) -> tuple[str, str]:
    """Split the arguments of ``setoption`` into option name and value.

    A missing or empty value becomes ``<empty>``.
    """
    idx = text.find("name")
    if idx < 0:
        raise ValueError("No such option: ")
    name = text[idx + 4 :].lstrip(_BLANKS)
    value: Optional[str] = None
    vidx = name.find("value")
    if vidx >= 0:
        value = name[vidx + 5 :].lstrip(_BLANKS)
        name = name[:vidx].rstrip(_BLANKS)
    if not value:
        value = EMPTY_VALUE
    return name, value


def apply_setoption(options: Options, text: str) -> None:
    """Apply a ``setoption`` command; unknown options raise KeyError."""
    name, value = parse_setoption(text)
    if not options.set_by_name(name, value):
        raise KeyError(f"No such option: {name}")