import pytest

from chessinfra.tt import (
    ENTRY_SIZE,
    HEADER_SIZE,
    TranspositionTable,
    TTEntry,
    pack_entry,
    unpack_entry,
)
from chessinfra.types import DEPTH_OFFSET, Bound


def _cluster_key(cluster: int, table: TranspositionTable) -> int:
    # Keys whose high bits select a given cluster.
    return (cluster << 64) // table.cluster_count + 1


def test_pack_round_trip():
    entry = TTEntry(key=0x0123456789ABCDEF, depth8=12, gen_bound8=0x2B,
                    move16=0x1234, value16=-300, eval16=55)
    data = pack_entry(entry)
    assert len(data) == ENTRY_SIZE
    assert unpack_entry(data) == entry


def test_pack_key_is_little_endian():
    data = pack_entry(TTEntry(key=1))
    assert data[:8] == b"\x01" + bytes(7)


def test_unpack_wrong_length():
    with pytest.raises(ValueError):
        unpack_entry(b"\x00" * 10)


def test_save_sets_fields():
    e = TTEntry()
    e.save(42, -150, True, Bound.LOWER, 3, 777, 20, generation=16)
    assert e.key == 42
    assert e.depth == 3
    assert e.depth8 == 3 - DEPTH_OFFSET
    assert e.value == -150
    assert e.static_eval == 20
    assert e.move == 777
    assert e.is_pv
    assert e.bound == Bound.LOWER
    assert e.gen_bound8 & 0xF8 == 16


def test_save_preserves_move_for_same_key():
    e = TTEntry()
    e.save(42, 10, False, Bound.UPPER, 5, 777, 0)
    e.save(42, 20, False, Bound.EXACT, 6, 0, 0)
    assert e.move == 777
    assert e.value == 20


def test_save_does_not_overwrite_deeper_entry():
    e = TTEntry()
    e.save(42, 10, False, Bound.LOWER, 20, 1, 0)
    e.save(42, 99, False, Bound.LOWER, 2, 0, 0)
    assert e.value == 10
    assert e.depth == 20


def test_save_rejects_bad_depth():
    with pytest.raises(ValueError):
        TTEntry().save(1, 0, False, Bound.EXACT, DEPTH_OFFSET, 0, 0)


def test_probe_finds_saved_entry():
    tt = TranspositionTable(1)
    tte, found = tt.probe(12345)
    assert not found
    tte.save(12345, 5, False, Bound.EXACT, 4, 100, 0, tt.generation8)
    again, found = tt.probe(12345)
    assert found
    assert again is tte
    assert again.move == 100


def test_probe_replaces_shallowest():
    tt = TranspositionTable(1)
    k1 = _cluster_key(7, tt)
    k2, k3 = k1 + 1, k1 + 2
    a, _ = tt.probe(k1)
    a.save(k1, 0, False, Bound.EXACT, 10, 0, 0)
    b, _ = tt.probe(k2)
    b.save(k2, 0, False, Bound.EXACT, 5, 0, 0)
    replace, found = tt.probe(k3)
    assert not found
    assert replace is b


def test_new_search_wraps_generation():
    tt = TranspositionTable(1)
    for _ in range(32):
        tt.new_search()
    assert tt.generation8 == 0
    tt.new_search()
    assert tt.generation8 == 8


def test_hashfull_and_generation():
    tt = TranspositionTable(1)
    assert tt.hashfull() == 0
    for c in range(500):
        key = _cluster_key(c, tt)
        tte, _ = tt.probe(key)
        tte.save(key, 0, False, Bound.EXACT, 1, 0, 0, tt.generation8)
    full = tt.hashfull()
    assert 0 < full <= 1000
    tt.new_search()
    assert tt.hashfull() == 0


def test_clear_empties_table():
    tt = TranspositionTable(1)
    tte, _ = tt.probe(99)
    tte.save(99, 0, False, Bound.EXACT, 3, 0, 0)
    tt.clear()
    assert tt.probe(99)[1] is False


def test_resize_keeps_entries():
    tt = TranspositionTable(1)
    keys = [_cluster_key(c, tt) for c in (1, 100, 3000)]
    for k in keys:
        tte, _ = tt.probe(k)
        tte.save(k, 7, False, Bound.EXACT, 6, 11, 0)
    tt.resize(2)
    assert tt.cluster_count == 2 * TranspositionTable(1).cluster_count
    for k in keys:
        tte, found = tt.probe(k)
        assert found
        assert tte.value == 7


def test_resize_rejects_zero():
    with pytest.raises(ValueError):
        TranspositionTable(0)


def test_serialize_round_trip(tmp_path):
    tt = TranspositionTable(1)
    keys = [_cluster_key(c, tt) for c in (2, 50, 900)]
    depths = [1, 6, 12]
    for k, d in zip(keys, depths):
        tte, _ = tt.probe(k)
        tte.save(k, d * 10, False, Bound.EXACT, d, d, 0)
    path = tmp_path / "tt.ptt"
    written = tt.serialize(path, 4)
    assert written == 2
    data = path.read_bytes()
    assert data[:5] == b"SFTT\x00"
    assert data[105] == 4
    assert len(data) == HEADER_SIZE + written * ENTRY_SIZE

    other = TranspositionTable(1)
    assert other.deserialize(path) == 2
    assert other.probe(keys[0])[1] is False
    for k, d in zip(keys[1:], depths[1:]):
        tte, found = other.probe(k)
        assert found
        assert tte.value == d * 10


def test_deserialize_bad_magic(tmp_path):
    path = tmp_path / "bad.ptt"
    path.write_bytes(b"XXXX" + bytes(200))
    with pytest.raises(ValueError):
        TranspositionTable(1).deserialize(path)


def test_deserialize_short_header(tmp_path):
    path = tmp_path / "short.ptt"
    path.write_bytes(b"SFTT" + bytes(10))
    with pytest.raises(ValueError):
        TranspositionTable(1).deserialize(path)


def test_deserialize_tiny_file(tmp_path):
    path = tmp_path / "tiny.ptt"
    path.write_bytes(b"SF")
    assert TranspositionTable(1).deserialize(path) == 0


def test_serialize_rejects_bad_min_depth(tmp_path):
    with pytest.raises(ValueError):
        TranspositionTable(1).serialize(tmp_path / "x.ptt", 256)