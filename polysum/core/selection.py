from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Tuple

from polysum.core.rounds import Entity


class SelectionError(RuntimeError):
    """Raised when the selection is used outside its contract."""


class SelectionState(Enum):
    EMPTY = auto()
    ONE_CHOSEN = auto()
    TWO_CHOSEN = auto()


class PickResult(Enum):
    SELECTED = auto()
    DESELECTED = auto()
    PAIR_READY = auto()
    LOCKED = auto()


class Outcome(Enum):
    MATCH = auto()
    NO_MATCH = auto()


@dataclass(frozen=True)
class Evaluation:
    """Result of checking a full selection against the goal."""

    outcome: Outcome
    total: int
    pair: Tuple[Entity, Entity]

    @property
    def is_match(self) -> bool:
        return self.outcome is Outcome.MATCH


class SelectionTracker:
    """Holds up to two picked entities for the current goal.

    Picking a held entity always toggles it off. Once two entities are held,
    picks on any other entity are ignored until one is toggled off or
    :meth:`clear` runs.
    """

    MAX_SIZE = 2

    def __init__(self, goal: int) -> None:
        self._goal = goal
        self._selection: List[Entity] = []

    @property
    def goal(self) -> int:
        return self._goal

    @property
    def selection(self) -> Tuple[Entity, ...]:
        return tuple(self._selection)

    @property
    def values(self) -> List[int]:
        return [e.value for e in self._selection]

    @property
    def running_total(self) -> int:
        return sum(e.value for e in self._selection)

    @property
    def state(self) -> SelectionState:
        size = len(self._selection)
        if size == 0:
            return SelectionState.EMPTY
        if size == 1:
            return SelectionState.ONE_CHOSEN
        return SelectionState.TWO_CHOSEN

    def is_locked(self) -> bool:
        return len(self._selection) >= self.MAX_SIZE

    def pick(self, entity: Entity) -> PickResult:
        if entity in self._selection:
            self._selection.remove(entity)
            entity.selected = False
            return PickResult.DESELECTED
        if self.is_locked():
            return PickResult.LOCKED
        entity.selected = True
        self._selection.append(entity)
        if len(self._selection) == self.MAX_SIZE:
            return PickResult.PAIR_READY
        return PickResult.SELECTED

    def evaluate(self) -> Evaluation:
        if len(self._selection) != self.MAX_SIZE:
            raise SelectionError(f"evaluate() needs exactly 2 selected entities, have {len(self._selection)}")
        first, second = self._selection
        total = first.value + second.value
        outcome = Outcome.MATCH if total == self._goal else Outcome.NO_MATCH
        return Evaluation(outcome=outcome, total=total, pair=(first, second))

    def clear(self) -> None:
        for entity in self._selection:
            entity.selected = False
        self._selection = []

    def reset(self, goal: int) -> None:
        """Clear the selection and retarget it at a new round's goal."""
        self.clear()
        self._goal = goal
