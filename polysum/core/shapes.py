"""Polygon naming, geometry and hit testing."""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from polysum.core.layout import HIT_PADDING
from polysum.core.motion import Body

SHAPE_NAMES: Dict[int, str] = {
    3: "Triangle",
    4: "Square",
    5: "Pentagon",
    6: "Hexagon",
    7: "Heptagon",
    8: "Octagon",
    9: "Nonagon",
    10: "Decagon",
}

MIN_SIDES = 3

# Goal badges are drawn with at most this many sides; the number carries the rest.
MAX_DRAWN_SIDES = 10


def shape_name(sides: int) -> str:
    return SHAPE_NAMES.get(sides, f"{sides}-gon")


def polygon_points(sides: int, radius: float, rotation: float = 0.0) -> List[Tuple[float, float]]:
    """Vertices of a regular polygon centred on the origin, first vertex pointing up."""
    if sides < MIN_SIDES:
        raise ValueError(f"a polygon needs at least {MIN_SIDES} sides, got {sides}")
    points = []
    for i in range(sides):
        angle = rotation + i * 2 * math.pi / sides - math.pi / 2
        points.append((math.cos(angle) * radius, math.sin(angle) * radius))
    return points


def contains_point(body: Body, x: float, y: float) -> bool:
    return math.hypot(x - body.x, y - body.y) <= body.radius + HIT_PADDING


def entity_at(bodies: Mapping[int, Body], order: Iterable[int], x: float, y: float) -> Optional[int]:
    """Id of the first entity in *order* whose hit circle contains (x, y)."""
    for entity_id in order:
        body = bodies.get(entity_id)
        if body is not None and contains_point(body, x, y):
            return entity_id
    return None
