from __future__ import annotations

import random
from typing import Optional


class GoalGenerator:
    """Picks the target sum for a round, uniformly within ``[min_goal, max_goal]``."""

    def __init__(self, min_goal: int, max_goal: int, rng: Optional[random.Random] = None) -> None:
        if min_goal > max_goal:
            raise ValueError(f"min_goal ({min_goal}) is greater than max_goal ({max_goal})")
        self._min_goal = min_goal
        self._max_goal = max_goal
        self._rng = rng or random.Random()

    @property
    def bounds(self) -> tuple[int, int]:
        return (self._min_goal, self._max_goal)

    def generate(self) -> int:
        return self._rng.randint(self._min_goal, self._max_goal)

    def generate_within(self, low: int, high: int) -> int:
        """Uniform goal from the part of ``[min_goal, max_goal]`` that lies inside ``[low, high]``."""
        low = max(low, self._min_goal)
        high = min(high, self._max_goal)
        if low > high:
            raise ValueError(f"no goal of {list(self.bounds)} lies within [{low}, {high}]")
        return self._rng.randint(low, high)
