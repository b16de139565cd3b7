"""Time allocation for a single move from the game clock."""

from __future__ import annotations

from dataclasses import dataclass, field

from .types import Color


@dataclass
class Limits:
    """Search limits as received from the controlling interface."""

    time: list[int] = field(default_factory=lambda: [0, 0])
    inc: list[int] = field(default_factory=lambda: [0, 0])
    movestogo: int = 0
    depth: int = 0
    nodes: int = 0
    movetime: int = 0
    mate: int = 0
    infinite: bool = False
    npmsec: int = 0
    start_time: int = 0
    searchmoves: list[int] = field(default_factory=list)


def _trunc(x: float) -> int:
    return int(x)


@dataclass
class TimeManager:
    """Computes the optimum and maximum thinking time for a move."""

    start_time: int = 0
    optimum_time: int = 0
    maximum_time: int = 0
    available_nodes: int = 0
    npmsec: int = 0

    def init(
        self,
        us: Color,
        ply: int,
        limits: Limits,
        move_overhead: int = 10,
        slow_mover: int = 100,
        nodes_time: int = 0,
        ponder: bool = False,
    ) -> None:
        """Set the time bounds for the current ply; may adjust ``limits``."""
        us = int(us)

        # In "nodes as time" mode clock values are converted to node counts.
        if nodes_time:
            if not self.available_nodes:
                self.available_nodes = nodes_time * limits.time[us]
            limits.time[us] = int(self.available_nodes)
            limits.inc[us] *= nodes_time
            limits.npmsec = nodes_time
        self.npmsec = limits.npmsec

        self.start_time = limits.start_time

        mtg = min(limits.movestogo, 50) if limits.movestogo else 50

        time_left = max(
            1,
            limits.time[us]
            + limits.inc[us] * (mtg - 1)
            - move_overhead * (2 + mtg),
        )
        time_left = slow_mover * time_left // 100

        if limits.movestogo == 0:
            opt_scale = min(
                0.0084 + (ply + 3.0) ** 0.5 * 0.0042,
                0.2 * limits.time[us] / time_left,
            )
            max_scale = min(7.0, 4.0 + ply / 12.0)
        else:
            opt_scale = min(
                (0.8 + ply / 120.0) / mtg,
                0.8 * limits.time[us] / time_left,
            )
            max_scale = min(6.3, 1.5 + 0.11 * mtg)

        self.optimum_time = _trunc(opt_scale * time_left)
        self.maximum_time = _trunc(
            min(0.8 * limits.time[us] - move_overhead, max_scale * self.optimum_time)
        )

        if ponder:
            self.optimum_time += _trunc(self.optimum_time / 4)

    def elapsed(self, now: int, nodes_searched: int) -> int:
        """Time spent so far, or nodes searched in nodes-as-time mode."""
        if self.npmsec:
            return nodes_searched
        return now - self.start_time