"""Spawn placement for a round's shapes."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import List, Protocol, Tuple

# Extra clickable radius around a shape, shared with hit testing.
HIT_PADDING = 10
# Gap between the arena edge and the first grid cell, on top of the shape size.
EDGE_PADDING = 20

Point = Tuple[float, float]


class PlacementStrategy(Protocol):
    def minimum_arena(self, count: int) -> Tuple[int, int]:
        ...

    def place(self, count: int, width: float, height: float, rng: random.Random) -> List[Point]:
        ...


@dataclass(frozen=True)
class GridJitterLayout:
    """Spreads shapes over a grid and nudges each one randomly inside its cell.

    The nudge is capped so that neighbouring hit circles (radius
    ``shape_size + HIT_PADDING``) never overlap. ``jitter=0`` gives a fixed
    grid.
    """

    columns: int = 4
    shape_size: int = 35
    jitter: float = 0.5

    @property
    def hit_radius(self) -> float:
        return self.shape_size + HIT_PADDING

    @property
    def margin(self) -> float:
        return self.shape_size + EDGE_PADDING

    def grid(self, count: int) -> Tuple[int, int]:
        cols = max(1, min(self.columns, count))
        rows = max(1, math.ceil(count / cols))
        return cols, rows

    def minimum_arena(self, count: int) -> Tuple[int, int]:
        """Smallest (width, height) where *count* shapes fit without overlapping."""
        cols, rows = self.grid(count)
        cell = 2 * self.hit_radius
        return (
            int(math.ceil(2 * self.margin + cols * cell)),
            int(math.ceil(2 * self.margin + rows * cell)),
        )

    def place(self, count: int, width: float, height: float, rng: random.Random) -> List[Point]:
        if count <= 0:
            return []
        min_w, min_h = self.minimum_arena(count)
        if width < min_w or height < min_h:
            raise ValueError(f"arena {width}x{height} cannot hold {count} shapes (need {min_w}x{min_h})")
        cols, rows = self.grid(count)
        cell_w = (width - 2 * self.margin) / cols
        cell_h = (height - 2 * self.margin) / rows
        reach_x = min(self.jitter * cell_w / 2, (cell_w - 2 * self.hit_radius) / 2)
        reach_y = min(self.jitter * cell_h / 2, (cell_h - 2 * self.hit_radius) / 2)

        points: List[Point] = []
        for i in range(count):
            col = i % cols
            row = i // cols
            x = self.margin + col * cell_w + cell_w / 2 + rng.uniform(-reach_x, reach_x)
            y = self.margin + row * cell_h + cell_h / 2 + rng.uniform(-reach_y, reach_y)
            points.append((x, y))
        return points
