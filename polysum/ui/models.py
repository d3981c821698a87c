"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from polysum.core.shapes import shape_name


@dataclass(frozen=True)
class SelectionView:
    """Text for the "first + second = sum" strip under the goal."""

    first: str
    second: str
    total: str
    complete: bool = False

    @classmethod
    def from_values(cls, values: Sequence[int]) -> "SelectionView":
        if len(values) >= 2:
            a, b = values[0], values[1]
            return cls(first=str(a), second=str(b), total=str(a + b), complete=True)
        if len(values) == 1:
            return cls(first=str(values[0]), second="?", total=f"{values[0]} + ?")
        return cls(first="?", second="?", total="?")


@dataclass
class FeedbackMessage:
    text: str
    positive: bool

    @classmethod
    def for_match(cls, total: int) -> "FeedbackMessage":
        return cls(text=f"Correct! {total} sides", positive=True)

    @classmethod
    def for_mismatch(cls, total: int) -> "FeedbackMessage":
        return cls(text=f"{total} sides. Try again!", positive=False)


def goal_caption(goal: int) -> str:
    """Label under the goal badge, e.g. ``"10 sides (Decagon)"``."""
    return f"{goal} sides ({shape_name(goal)})"
