"""Decompression of the pair-encoded (Huffman plus symbol pairs) tablebase data.

A compressed (sub)table starts with a small header describing a canonical
Huffman code whose symbols are either single values or pairs of other
symbols.  The values themselves are stored in fixed-size blocks; an index
table and a block-size table locate the block holding any given position.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

Buffer = Union[bytes, bytearray, memoryview]

_MASK64 = 0xFFFFFFFFFFFFFFFF
_LEAF = 0x0FFF
_WDL = 0

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U32_BE = struct.Struct(">I")
_U64_BE = struct.Struct(">Q")


def _need(data: Buffer, end: int) -> None:
    if end > len(data):
        raise ValueError(f"table data truncated: need {end} bytes, have {len(data)}")


def _symbol_children(sym_pat: Sequence[int], s: int) -> tuple[int, int]:
    w0, w1, w2 = sym_pat[3 * s], sym_pat[3 * s + 1], sym_pat[3 * s + 2]
    return ((w1 & 0x0F) << 8) | w0, (w2 << 4) | (w1 >> 4)


def _symbol_lengths(sym_pat: bytes, num_syms: int) -> list[int]:
    """Number of values minus one that each symbol expands to."""
    sym_len = [0] * num_syms
    done = [False] * num_syms
    for start in range(num_syms):
        if done[start]:
            continue
        stack = [start]
        on_stack = {start}
        while stack:
            cur = stack[-1]
            s1, s2 = _symbol_children(sym_pat, cur)
            if s2 == _LEAF:
                sym_len[cur] = 0
            else:
                if s1 >= num_syms or s2 >= num_syms:
                    raise ValueError(f"symbol {cur} refers to a missing symbol")
                pending = [s for s in (s1, s2) if not done[s]]
                if pending:
                    for s in pending:
                        if s in on_stack:
                            raise ValueError(f"symbol {cur} expands to itself")
                        stack.append(s)
                        on_stack.add(s)
                    continue
                sym_len[cur] = (sym_len[s1] + sym_len[s2] + 1) & 0xFF
            done[cur] = True
            stack.pop()
            on_stack.discard(cur)
    return sym_len


@dataclass
class PairsData:
    """Decoding tables of one compressed (sub)table.

    ``sizes`` gives the byte lengths of the index table, the block-size table
    and the block data that follow the headers; ``index_table``,
    ``size_table`` and ``data`` are their offsets in ``buffer`` and are set
    once the whole file layout is known.
    """

    buffer: Buffer
    flags: int
    idx_bits: int = 0
    block_size: int = 0
    min_len: int = 0
    offsets: tuple[int, ...] = ()
    base: tuple[int, ...] = ()
    sym_len: tuple[int, ...] = ()
    sym_pat: bytes = b""
    const_value: tuple[int, int] = (0, 0)
    sizes: tuple[int, int, int] = (0, 0, 0)
    index_table: Optional[int] = field(default=None)
    size_table: Optional[int] = field(default=None)
    data: Optional[int] = field(default=None)

    def _block_entries(self, block: int) -> int:
        assert self.size_table is not None
        return _U16.unpack_from(self.buffer, self.size_table + 2 * block)[0]

    def decompress(self, idx: int) -> bytes:
        """Return the stored entry for position ``idx``.

        For a constant table this is the two-byte constant; otherwise it is
        the three-byte pattern of the leaf symbol found.
        """
        if not self.idx_bits:
            return bytes(self.const_value)
        if self.index_table is None or self.size_table is None or self.data is None:
            raise ValueError("table offsets have not been set")

        buf = self.buffer
        main_idx = idx >> self.idx_bits
        lit_idx = (idx & ((1 << self.idx_bits) - 1)) - (1 << (self.idx_bits - 1))
        entry = self.index_table + 6 * main_idx
        block = _U32.unpack_from(buf, entry)[0]
        lit_idx += _U16.unpack_from(buf, entry + 4)[0]

        if lit_idx < 0:
            while lit_idx < 0:
                block -= 1
                lit_idx += self._block_entries(block) + 1
        else:
            while lit_idx > self._block_entries(block):
                lit_idx -= self._block_entries(block) + 1
                block += 1

        ptr = self.data + (block << self.block_size)
        m = self.min_len
        code = _U64_BE.unpack_from(buf, ptr)[0]
        ptr += 8
        bit_cnt = 0  # number of consumed bits not yet refilled
        while True:
            l = m
            while code < self.base[l - m]:
                l += 1
            sym = self.offsets[l - m] + ((code - self.base[l - m]) >> (64 - l))
            if lit_idx < self.sym_len[sym] + 1:
                break
            lit_idx -= self.sym_len[sym] + 1
            code = (code << l) & _MASK64
            bit_cnt += l
            if bit_cnt >= 32:
                bit_cnt -= 32
                code |= _U32_BE.unpack_from(buf, ptr)[0] << bit_cnt
                ptr += 4

        while self.sym_len[sym] != 0:
            s1, s2 = _symbol_children(self.sym_pat, sym)
            if lit_idx < self.sym_len[s1] + 1:
                sym = s1
            else:
                lit_idx -= self.sym_len[s1] + 1
                sym = s2

        return self.sym_pat[3 * sym : 3 * sym + 3]


def setup_pairs(
    data: Buffer, offset: int, tb_size: int, table_type: int
) -> tuple[PairsData, int]:
    """Read the decoding header at ``offset``.

    Returns the decoding tables and the offset just past the header.
    ``table_type`` 0 marks a WDL table, whose constant tables keep their value.
    """
    _need(data, offset + 1)
    flags = data[offset]
    if flags & 0x80:
        _need(data, offset + 2)
        const = data[offset + 1] if table_type == _WDL else 0
        pd = PairsData(buffer=data, flags=flags, const_value=(const, 0))
        return pd, offset + 2

    _need(data, offset + 12)
    block_size = data[offset + 1]
    idx_bits = data[offset + 2]
    if idx_bits == 0:
        raise ValueError("index bits must be positive in a compressed table")
    real_num_blocks = _U32.unpack_from(data, offset + 4)[0]
    num_blocks = real_num_blocks + data[offset + 3]
    max_len = data[offset + 8]
    min_len = data[offset + 9]
    h = max_len - min_len + 1
    if min_len < 1 or h < 1 or max_len > 64:
        raise ValueError(f"invalid code lengths {min_len}..{max_len}")
    _need(data, offset + 12 + 2 * h)
    offsets = tuple(
        _U16.unpack_from(data, offset + 10 + 2 * i)[0] for i in range(h)
    )
    num_syms = _U16.unpack_from(data, offset + 10 + 2 * h)[0]
    pat_start = offset + 12 + 2 * h
    pat_end = pat_start + 3 * num_syms
    _need(data, pat_end)
    sym_pat = bytes(data[pat_start:pat_end])
    next_offset = pat_end + (num_syms & 1)

    num_indices = (tb_size + (1 << idx_bits) - 1) >> idx_bits
    sizes = (6 * num_indices, 2 * num_blocks, real_num_blocks << block_size)

    sym_len = _symbol_lengths(sym_pat, num_syms)

    base = [0] * h
    for i in range(h - 2, -1, -1):
        base[i] = ((base[i + 1] + offsets[i] - offsets[i + 1]) & _MASK64) // 2
    base = [(b << (64 - (min_len + i))) & _MASK64 for i, b in enumerate(base)]

    pd = PairsData(
        buffer=data,
        flags=flags,
        idx_bits=idx_bits,
        block_size=block_size,
        min_len=min_len,
        offsets=offsets,
        base=tuple(base),
        sym_len=tuple(sym_len),
        sym_pat=sym_pat,
        sizes=sizes,
    )
    return pd, next_offset