"""Core chess types: colours, pieces, squares, moves, scores and value bounds."""

from __future__ import annotations

from enum import IntEnum, IntFlag

MAX_MOVES = 256
MAX_PLY = 246
# Mate distances are limited to the search horizon.
MAX_MATE_PLY = MAX_PLY

MOVE_NONE = 0
MOVE_NULL = 65

KING_SIDE = 0
QUEEN_SIDE = 1

PHASE_ENDGAME = 0
PHASE_MIDGAME = 128
MG = 0
EG = 1

SCALE_FACTOR_DRAW = 0
SCALE_FACTOR_NORMAL = 64
SCALE_FACTOR_MAX = 128
SCALE_FACTOR_NONE = 255

VALUE_ZERO = 0
VALUE_DRAW = 0
VALUE_KNOWN_WIN = 10000
VALUE_MATE = 32000
VALUE_INFINITE = 32001
VALUE_NONE = 32002

VALUE_TB_WIN_IN_MAX_PLY = VALUE_MATE - 2 * MAX_PLY
VALUE_TB_LOSS_IN_MAX_PLY = -VALUE_MATE + 2 * MAX_PLY
VALUE_MATE_IN_MAX_PLY = VALUE_MATE - MAX_PLY
VALUE_MATED_IN_MAX_PLY = -VALUE_MATE + MAX_PLY

PAWN_VALUE_MG, PAWN_VALUE_EG = 126, 208
KNIGHT_VALUE_MG, KNIGHT_VALUE_EG = 781, 854
BISHOP_VALUE_MG, BISHOP_VALUE_EG = 825, 915
ROOK_VALUE_MG, ROOK_VALUE_EG = 1276, 1380
QUEEN_VALUE_MG, QUEEN_VALUE_EG = 2538, 2682
MIDGAME_LIMIT = 15258
ENDGAME_LIMIT = 3915

W_PAWN, W_KNIGHT, W_BISHOP, W_ROOK, W_QUEEN, W_KING = range(1, 7)
B_PAWN, B_KNIGHT, B_BISHOP, B_ROOK, B_QUEEN, B_KING = range(9, 15)

DEPTH_QS_CHECKS = 0
DEPTH_QS_NO_CHECKS = -1
DEPTH_QS_RECAPTURES = -5
DEPTH_NONE = -6
DEPTH_OFFSET = -7

FILE_A, FILE_B, FILE_C, FILE_D, FILE_E, FILE_F, FILE_G, FILE_H = range(8)
RANK_1, RANK_2, RANK_3, RANK_4, RANK_5, RANK_6, RANK_7, RANK_8 = range(8)

SQ_A1 = 0
SQ_H1 = 7
SQ_A8 = 56
SQ_H8 = 63
SQ_NONE = 64

NORTH = 8
EAST = 1
SOUTH = -8
WEST = -1
NORTH_EAST = NORTH + EAST
SOUTH_EAST = SOUTH + EAST
NORTH_WEST = NORTH + WEST
SOUTH_WEST = SOUTH + WEST

SCORE_ZERO = 0

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF


class Color(IntEnum):
    WHITE = 0
    BLACK = 1


class PieceType(IntEnum):
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


class MoveType(IntEnum):
    NORMAL = 0
    PROMOTION = 1
    ENPASSANT = 2
    CASTLING = 3


class Bound(IntEnum):
    NONE = 0
    UPPER = 1
    LOWER = 2
    EXACT = 3


class CastlingRight(IntFlag):
    NO_CASTLING = 0
    WHITE_OO = 1
    WHITE_OOO = 2
    BLACK_OO = 4
    BLACK_OOO = 8
    ANY_CASTLING = 15


def _int16(x: int) -> int:
    return ((x + 0x8000) & 0xFFFF) - 0x8000


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def make_score(mg: int, eg: int) -> int:
    """Pack a middlegame and an endgame value into one 32-bit score."""
    return (((eg & _MASK32) << 16) + mg) & _MASK32


def mg_value(s: int) -> int:
    """Middlegame half of a packed score."""
    return _int16(s)


def eg_value(s: int) -> int:
    """Endgame half of a packed score."""
    return _int16(((s + 0x8000) & _MASK32) >> 16)


def score_divide(s: int, i: int) -> int:
    """Divide both halves of a score, truncating toward zero."""
    return make_score(_trunc_div(mg_value(s), i), _trunc_div(eg_value(s), i))


def make_square(f: int, r: int) -> int:
    return (r << 3) + f


def file_of(s: int) -> int:
    return s & 7


def rank_of(s: int) -> int:
    return s >> 3


def relative_square(c: int, s: int) -> int:
    return s ^ (int(c) * 56)


def relative_rank(c: int, r: int) -> int:
    return r ^ (int(c) * 7)


def make_piece(c: int, pt: int) -> int:
    return (int(c) << 3) + int(pt)


def type_of_piece(p: int) -> int:
    return p & 7


def color_of(p: int) -> Color:
    return Color(p >> 3)


def from_sq(m: int) -> int:
    return (m >> 6) & 0x3F


def to_sq(m: int) -> int:
    return m & 0x3F


def from_to(m: int) -> int:
    return m & 0xFFF


def type_of_move(m: int) -> MoveType:
    return MoveType(m >> 14)


def promotion_type(m: int) -> PieceType:
    return PieceType(((m >> 12) & 3) + PieceType.KNIGHT)


def make_move(from_: int, to: int) -> int:
    return to | (from_ << 6)


def make_promotion(from_: int, to: int, pt: int) -> int:
    return (
        to
        | (from_ << 6)
        | (MoveType.PROMOTION << 14)
        | ((int(pt) - PieceType.KNIGHT) << 12)
    )


def make_enpassant(from_: int, to: int) -> int:
    return to | (from_ << 6) | (MoveType.ENPASSANT << 14)


def make_castling(from_: int, to: int) -> int:
    return to | (from_ << 6) | (MoveType.CASTLING << 14)


def reverse_move(m: int) -> int:
    return make_move(to_sq(m), from_sq(m))


def move_is_ok(m: int) -> bool:
    return from_sq(m) != to_sq(m)


def opposite_colors(s1: int, s2: int) -> bool:
    s = s1 ^ s2
    return bool(((s >> 3) ^ s) & 1)


def make_key(seed: int) -> int:
    """One step of a 64-bit linear congruential generator."""
    return (seed * 6364136223846793005 + 1442695040888963407) & _MASK64


def mate_in(ply: int) -> int:
    return VALUE_MATE - ply


def mated_in(ply: int) -> int:
    return -VALUE_MATE + ply


def make_castling_right(c: int, s: int) -> CastlingRight:
    if c == Color.WHITE:
        return CastlingRight.WHITE_OOO if s == QUEEN_SIDE else CastlingRight.WHITE_OO
    return CastlingRight.BLACK_OOO if s == QUEEN_SIDE else CastlingRight.BLACK_OO