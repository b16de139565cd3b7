"""Engine options as announced to and set by the controlling interface."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional

MAX_THREADS = 512
_IS_64BIT = sys.maxsize > 2**32


class OptionType(Enum):
    CHECK = "check"
    SPIN = "spin"
    BUTTON = "button"
    STRING = "string"
    COMBO = "combo"
    DISABLED = "disabled"


@dataclass
class Option:
    """One option with its default, limits and current value."""

    name: str
    kind: OptionType
    default: int = 0
    min_value: int = 0
    max_value: int = 0
    default_string: Optional[str] = None
    value: int = 0
    string_value: Optional[str] = None


OnChange = Callable[[Option], None]

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _default_options(nnue: bool) -> list[Option]:
    max_hash = 33554432 if _IS_64BIT else 2048
    probe_limit = 7 if _IS_64BIT else 5
    T = OptionType
    opts = [
        Option("PersistentTTMinDepth", T.SPIN, 4, 0, 255),
        Option("PersistentTTFileName", T.STRING, default_string="tt.ptt"),
        Option("PersistentTTSerialize", T.BUTTON),
        Option("PersistentTTDeserialize", T.BUTTON),
        Option("Threads", T.SPIN, 1, 1, MAX_THREADS),
        Option("Hash", T.SPIN, 16, 1, max_hash),
        Option("Clear Hash", T.BUTTON),
        Option("Ponder", T.CHECK, 0),
        Option("Anarchy", T.CHECK, 0),
        Option("MultiPV", T.SPIN, 1, 1, 500),
        Option("Skill Level", T.DISABLED, 20, 0, 20),
        Option("Move Overhead", T.SPIN, 10, 0, 5000),
        Option("Slow Mover", T.SPIN, 100, 10, 1000),
        Option("nodestime", T.SPIN, 0, 0, 10000),
        Option("UCI_AnalyseMode", T.CHECK, 0),
        Option("UCI_Chess960", T.CHECK, 0),
        Option("SyzygyPath", T.STRING, default_string="<empty>"),
        Option("SyzygyProbeDepth", T.SPIN, 1, 1, 100),
        Option("Syzygy50MoveRule", T.CHECK, 1),
        Option("SyzygyProbeLimit", T.SPIN, probe_limit, 0, probe_limit),
        Option("SyzygyUseDTM", T.CHECK, 1),
        Option("BookFile", T.STRING, default_string="<empty>"),
        Option("BookFile2", T.STRING, default_string="<empty>"),
        Option("BestBookMove", T.CHECK, 1),
        Option("BookDepth", T.SPIN, 255, 1, 255),
    ]
    if nnue:
        opts.append(
            Option("Use NNUE", T.COMBO,
                   default_string="Hybrid var Hybrid var Pure var Classical")
        )
    opts.append(Option("LargePages", T.CHECK, 1))
    opts.append(Option("NUMA", T.DISABLED, default_string="all"))
    return opts


class Options:
    """The ordered set of engine options, looked up by case-insensitive name."""

    def __init__(self, nnue: bool = False) -> None:
        self._options = {opt.name.lower(): opt for opt in _default_options(nnue)}
        self._callbacks: dict[str, OnChange] = {}
        for opt in self._options.values():
            if opt.kind in (OptionType.CHECK, OptionType.SPIN):
                opt.value = opt.default
            elif opt.kind is OptionType.STRING:
                opt.string_value = opt.default_string
            elif opt.kind is OptionType.COMBO:
                assert opt.default_string is not None
                opt.string_value = opt.default_string.split(" var", 1)[0].lower()

    def __getitem__(self, name: str) -> Option:
        try:
            return self._options[name.lower()]
        except KeyError:
            raise KeyError(f"No such option: {name}") from None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._options

    def __iter__(self) -> Iterator[Option]:
        return iter(self._options.values())

    def _changed(self, opt: Option) -> None:
        callback = self._callbacks.get(opt.name.lower())
        if callback is not None:
            callback(opt)

    def value(self, name: str) -> int:
        return self[name].value

    def string_value(self, name: str) -> Optional[str]:
        return self[name].string_value

    def default_string(self, name: str) -> Optional[str]:
        return self[name].default_string

    def set_value(self, name: str, value: int) -> None:
        """Set an option's integer value directly and notify its listener."""
        opt = self[name]
        opt.value = value
        self._changed(opt)

    def set_by_name(self, name: str, value: str) -> bool:
        """Apply a textual value; return False if no enabled option has that name.

        Values that are invalid for the option are ignored, but the option
        still counts as found.
        """
        opt = self._options.get(name.lower())
        if opt is None or opt.kind is OptionType.DISABLED:
            return False
        if opt.kind is OptionType.CHECK:
            if value == "true":
                opt.value = 1
            elif value == "false":
                opt.value = 0
            else:
                return True
        elif opt.kind is OptionType.SPIN:
            val = _atoi(value)
            if not opt.min_value <= val <= opt.max_value:
                return True
            opt.value = val
        elif opt.kind is OptionType.STRING:
            opt.string_value = value
        elif opt.kind is OptionType.COMBO:
            opt.string_value = value.lower()
        self._changed(opt)
        return True

    def on_change(self, name: str, callback: OnChange) -> None:
        """Register the listener called whenever the named option changes."""
        opt = self[name]
        self._callbacks[opt.name.lower()] = callback

    def format_options(self) -> str:
        """All enabled options, one protocol line each."""
        lines = []
        for opt in self:
            if opt.kind is OptionType.DISABLED:
                continue
            line = f"option name {opt.name} type {opt.kind.value}"
            if opt.kind is OptionType.CHECK:
                line += f" default {'true' if opt.default else 'false'}"
            elif opt.kind is OptionType.SPIN:
                line += f" default {opt.default} min {opt.min_value} max {opt.max_value}"
            elif opt.kind in (OptionType.STRING, OptionType.COMBO):
                line += f" default {opt.default_string}"
            lines.append(line + "\n")
        return "".join(lines)