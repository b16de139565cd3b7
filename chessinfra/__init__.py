"""Chess engine building blocks: types, time management, hashing, options, UCI text and tablebase decompression."""

__version__ = "0.1.0"

__all__ = ["options", "tbpairs", "timeman", "tt", "types", "uci"]