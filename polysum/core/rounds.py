"""Round construction: a goal plus a shuffled set of shapes that can always reach it."""

from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from polysum.core.config import ConfigError
from polysum.core.goals import GoalGenerator

logger = logging.getLogger(__name__)


class InfeasibleGoal(Exception):
    """No two values in the configured range add up to the requested goal."""

    def __init__(self, goal: int, value_range: Tuple[int, int]) -> None:
        super().__init__(f"goal {goal} cannot be made from two values in {list(value_range)}")
        self.goal = goal
        self.value_range = value_range


@dataclass(eq=False)
class Entity:
    """One selectable polygon. Compared by identity so two equal-valued shapes stay distinct."""

    id: int
    value: int
    selected: bool = False
    hinted: bool = False


@dataclass
class Round:
    goal: int
    entities: List[Entity] = field(default_factory=list)

    def get(self, entity_id: int) -> Optional[Entity]:
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None

    def is_solvable(self) -> bool:
        return any(a.value + b.value == self.goal for a, b in itertools.combinations(self.entities, 2))


def solving_pairs(goal: int, value_range: Tuple[int, int]) -> List[Tuple[int, int]]:
    """All unordered value pairs ``(i, j)`` with ``i <= j`` inside *value_range* summing to *goal*."""
    min_value, max_value = value_range
    pairs: List[Tuple[int, int]] = []
    for i in range(min_value, max_value + 1):
        j = goal - i
        if j < i:
            break
        if j <= max_value:
            pairs.append((i, j))
    return pairs


class RoundBuilder:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        # ids keep counting across rounds so a stale id never matches a new shape
        self._ids: Iterator[int] = itertools.count(1)

    def build(self, goal: int, shape_count: int, value_range: Tuple[int, int]) -> List[Entity]:
        """Return *shape_count* shuffled entities containing at least one pair that sums to *goal*.

        Raises InfeasibleGoal when no such pair exists in *value_range*.
        """
        if shape_count < 2:
            raise ValueError(f"shape_count must be at least 2, got {shape_count}")
        pairs = solving_pairs(goal, value_range)
        if not pairs:
            raise InfeasibleGoal(goal, value_range)

        min_value, max_value = value_range
        values = list(self._rng.choice(pairs))
        while len(values) < shape_count:
            values.append(self._rng.randint(min_value, max_value))
        self._rng.shuffle(values)

        return [Entity(id=next(self._ids), value=v) for v in values]


def next_round(
    generator: GoalGenerator,
    builder: RoundBuilder,
    shape_count: int,
    value_range: Tuple[int, int],
    max_retries: int,
) -> Round:
    """Draw goals until one can be built.

    After *max_retries* misses the goal is drawn directly from the reachable
    part of the goal range, so a config that has any reachable goal always
    yields a round. ConfigError means no goal in the range is reachable.
    """
    for _ in range(max_retries):
        goal = generator.generate()
        try:
            entities = builder.build(goal, shape_count, value_range)
        except InfeasibleGoal as e:
            logger.debug("Redrawing goal: %s", e)
            continue
        return Round(goal=goal, entities=entities)

    min_value, max_value = value_range
    try:
        goal = generator.generate_within(2 * min_value, 2 * max_value)
    except ValueError as e:
        raise ConfigError(
            f"no goal in {list(generator.bounds)} can be made from two values in {list(value_range)}"
        ) from e
    logger.info("No reachable goal after %d draws; picked %d from the reachable range", max_retries, goal)
    return Round(goal=goal, entities=builder.build(goal, shape_count, value_range))
