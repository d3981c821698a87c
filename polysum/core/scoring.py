from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class Score:
    current: int = 0
    best: int = 0

    def record_match(self) -> bool:
        """Count a match; return True if it set a new best."""
        self.current += 1
        if self.current > self.best:
            self.best = self.current
            return True
        return False

    def reset(self) -> None:
        self.current = 0


def default_score_path() -> Path:
    return Path.home() / ".polysum" / "score.json"


class ScoreStore:
    """Keeps the best score across app restarts.
    File: ~/.polysum/score.json unless another path is given."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or default_score_path()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self) -> int:
        if not self._file_path.exists():
            return 0
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load score from %s: %s", self._file_path, e)
            return 0
        if not isinstance(payload, dict):
            logger.warning("Ignoring malformed score file %s", self._file_path)
            return 0
        try:
            return max(0, int(payload.get("best", 0)))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid best score in %s", self._file_path)
            return 0

    def save(self, best: int) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._file_path.write_text(json.dumps({"best": int(best)}, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save score to %s: %s", self._file_path, e)
