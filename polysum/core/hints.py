from __future__ import annotations

from typing import Optional, Sequence, Tuple

from polysum.core.rounds import Entity


def find_hint(entities: Sequence[Entity], goal: int) -> Optional[Tuple[Entity, Entity]]:
    """Return the first pair ``(entities[i], entities[j])``, ``i < j``, whose values sum to *goal*."""
    for i, first in enumerate(entities):
        for second in entities[i + 1:]:
            if first.value + second.value == goal:
                return first, second
    return None
