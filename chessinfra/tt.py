"""Transposition table: clustered hash of search results with persistence."""

from __future__ import annotations

import struct
from dataclasses import dataclass, fields
from os import PathLike
from typing import Union

from .types import DEPTH_OFFSET, Bound

CLUSTER_SIZE = 2
ENTRY_SIZE = 16
CLUSTER_BYTES = CLUSTER_SIZE * ENTRY_SIZE
MAGIC = b"SFTT"
HEADER_SIZE = 128
_FEN_SIZE = 91
_RESERVED_SIZE = 22

_ENTRY = struct.Struct("<QBBHhh")
_ENTRY_PADDING = ENTRY_SIZE - _ENTRY.size
_MASK64 = 0xFFFFFFFFFFFFFFFF

PathType = Union[str, "PathLike[str]"]


def _int16(x: int) -> int:
    return ((int(x) + 0x8000) & 0xFFFF) - 0x8000


@dataclass
class TTEntry:
    """One slot of the table: key, depth, generation/pv/bound, move and scores."""

    key: int = 0
    depth8: int = 0
    gen_bound8: int = 0
    move16: int = 0
    value16: int = 0
    eval16: int = 0

    def save(
        self,
        key: int,
        value: int,
        pv: bool,
        bound: int,
        depth: int,
        move: int,
        eval_: int,
        generation: int = 0,
    ) -> None:
        """Store a search result unless a more valuable one is already here."""
        key &= _MASK64
        # Keep an existing move for the same position.
        if move or key != self.key:
            self.move16 = move & 0xFFFF

        if key != self.key or depth - DEPTH_OFFSET > self.depth8 - 4 or bound == Bound.EXACT:
            if not DEPTH_OFFSET < depth < 256 + DEPTH_OFFSET:
                raise ValueError(f"depth {depth} out of range")
            self.key = key
            self.depth8 = (depth - DEPTH_OFFSET) & 0xFF
            self.gen_bound8 = (generation | (int(bool(pv)) << 2) | int(bound)) & 0xFF
            self.value16 = _int16(value)
            self.eval16 = _int16(eval_)

    @property
    def move(self) -> int:
        return self.move16

    @property
    def value(self) -> int:
        return self.value16

    @property
    def static_eval(self) -> int:
        return self.eval16

    @property
    def depth(self) -> int:
        return self.depth8 + DEPTH_OFFSET

    @property
    def is_pv(self) -> bool:
        return bool(self.gen_bound8 & 0x4)

    @property
    def bound(self) -> Bound:
        return Bound(self.gen_bound8 & 0x3)

    def _copy_from(self, other: TTEntry) -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(other, f.name))


def pack_entry(entry: TTEntry) -> bytes:
    """Encode an entry as its 16-byte little-endian record."""
    return _ENTRY.pack(
        entry.key & _MASK64,
        entry.depth8 & 0xFF,
        entry.gen_bound8 & 0xFF,
        entry.move16 & 0xFFFF,
        _int16(entry.value16),
        _int16(entry.eval16),
    ) + bytes(_ENTRY_PADDING)


def unpack_entry(data: bytes) -> TTEntry:
    """Decode a 16-byte record into an entry."""
    if len(data) != ENTRY_SIZE:
        raise ValueError(f"entry record must be {ENTRY_SIZE} bytes, got {len(data)}")
    key, depth8, gen_bound8, move16, value16, eval16 = _ENTRY.unpack_from(data)
    return TTEntry(key, depth8, gen_bound8, move16, value16, eval16)


class TranspositionTable:
    """A table of clusters of entries, indexed by the high bits of key * size."""

    def __init__(self, mb_size: int = 16) -> None:
        self.cluster_count = 0
        self.generation8 = 0
        self._slots: dict[int, TTEntry] = {}
        self.resize(mb_size)

    def _entry(self, slot: int) -> TTEntry:
        entry = self._slots.get(slot)
        if entry is None:
            entry = TTEntry()
            self._slots[slot] = entry
        return entry

    def _cluster(self, key: int) -> list[TTEntry]:
        index = ((key & _MASK64) * self.cluster_count) >> 64
        base = index * CLUSTER_SIZE
        return [self._entry(base + j) for j in range(CLUSTER_SIZE)]

    def resize(self, mb_size: int) -> None:
        """Change the size to ``mb_size`` megabytes, keeping stored entries."""
        if mb_size < 1:
            raise ValueError(f"cannot allocate {mb_size}MB for transposition table")
        old = self._slots
        self.cluster_count = mb_size * 1024 * 1024 // CLUSTER_BYTES
        self._slots = {}
        for slot in sorted(old):
            source = old[slot]
            if source.depth8:
                tte, _ = self.probe(source.key)
                if source.depth8 > tte.depth8:
                    tte._copy_from(source)

    def clear(self) -> None:
        """Empty every entry."""
        self._slots.clear()

    def new_search(self) -> None:
        """Advance the generation; the lower three bits hold pv and bound."""
        self.generation8 = (self.generation8 + 8) & 0xFF

    def probe(self, key: int) -> tuple[TTEntry, bool]:
        """Find the entry for ``key``, or the least valuable one to replace."""
        key &= _MASK64
        cluster = self._cluster(key)
        for tte in cluster:
            if tte.key == key or not tte.depth8:
                tte.gen_bound8 = (self.generation8 | (tte.gen_bound8 & 0x7)) & 0xFF
                return tte, bool(tte.depth8)

        def worth(e: TTEntry) -> int:
            # 263 = 256 (cycle) + 7 (keeps pv/bound bits out of the age).
            return e.depth8 - ((263 + self.generation8 - e.gen_bound8) & 0xF8)

        replace = cluster[0]
        for tte in cluster[1:]:
            if worth(replace) > worth(tte):
                replace = tte
        return replace, False

    def hashfull(self) -> int:
        """Approximate permille of entries filled in the current generation."""
        samples = 1000 // CLUSTER_SIZE
        count = 0
        for index in range(min(samples, self.cluster_count)):
            for j in range(CLUSTER_SIZE):
                tte = self._slots.get(index * CLUSTER_SIZE + j)
                if tte and tte.depth8 and (tte.gen_bound8 & 0xF8) == self.generation8:
                    count += 1
        return count * 1000 // (CLUSTER_SIZE * samples)

    def serialize(self, path: PathType, min_depth: int) -> int:
        """Write entries of at least ``min_depth`` to ``path``; return their number."""
        if not 0 <= min_depth < 256:
            raise ValueError(f"min_depth {min_depth} out of range")
        header = (
            MAGIC
            + b"\0"  # version
            + bytes(_FEN_SIZE)
            + bytes(8)  # nodes
            + b"\0"  # root depth
            + bytes([min_depth])
            + bytes(_RESERVED_SIZE)
        )
        written = 0
        with open(path, "wb") as f:
            f.write(header)
            for slot in sorted(self._slots):
                tte = self._slots[slot]
                if tte.depth8 and tte.depth8 + DEPTH_OFFSET >= min_depth:
                    f.write(pack_entry(tte))
                    written += 1
        return written

    def deserialize(self, path: PathType) -> int:
        """Merge entries from ``path`` into the table; return how many were taken."""
        taken = 0
        with open(path, "rb") as f:
            magic = f.read(len(MAGIC))
            if len(magic) != len(MAGIC):
                return 0
            if magic != MAGIC:
                raise ValueError("invalid magic")
            if len(f.read(HEADER_SIZE - len(MAGIC))) != HEADER_SIZE - len(MAGIC):
                raise ValueError("invalid header")
            while len(record := f.read(ENTRY_SIZE)) == ENTRY_SIZE:
                entry = unpack_entry(record)
                tte, _ = self.probe(entry.key)
                if entry.depth8 > tte.depth8:
                    tte._copy_from(entry)
                    taken += 1
        return taken