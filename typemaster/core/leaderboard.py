from __future__ import annotations

import json
import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from typemaster.core.settings import Difficulty, TypingMode
from typemaster.core.stats import TestResult

logger = logging.getLogger(__name__)

ALL = "all"


class SortKey(str, Enum):
    WPM = "wpm"
    NET_WPM = "net_wpm"
    ACCURACY = "accuracy"

    @classmethod
    def _missing_(cls, value):
        # camelCase spelling
        if value == "netWpm":
            return cls.NET_WPM
        return None


def _require_number(data: dict, key: str, upper: float = math.inf) -> float:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"'{key}' must be a number, got {type(value).__name__}")
    # json.loads accepts NaN and Infinity
    if not math.isfinite(value) or not 0 <= value <= upper:
        raise ValueError(f"'{key}' out of range: {value!r}")
    return value


def _require_string(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str) or not value:
        raise TypeError(f"'{key}' must be a non-empty string")
    return value


@dataclass(frozen=True)
class LeaderboardEntry:
    id: str
    username: str
    wpm: float
    net_wpm: float
    accuracy: float
    mode: TypingMode
    difficulty: Difficulty
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "wpm": self.wpm,
            "net_wpm": self.net_wpm,
            "accuracy": self.accuracy,
            "mode": self.mode.value,
            "difficulty": self.difficulty.value,
            "created_at": self.created_at.isoformat(timespec="milliseconds"),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LeaderboardEntry":
        """Build an entry from a stored record.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` when the record
        does not match the schema.
        """
        if not isinstance(data, dict):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        created_at = datetime.fromisoformat(_require_string(data, "created_at"))
        return cls(
            id=_require_string(data, "id"),
            username=_require_string(data, "username"),
            wpm=_require_number(data, "wpm"),
            net_wpm=_require_number(data, "net_wpm"),
            accuracy=_require_number(data, "accuracy", upper=100),
            mode=TypingMode(data["mode"]),
            difficulty=Difficulty(data["difficulty"]),
            created_at=created_at,
        )


class LeaderboardStore:
    """Leaderboard entries persisted to a JSON file.

    File: ~/.typemaster/leaderboard.json. Read failures are treated as an
    empty board; ``clear`` only runs after the caller confirms.
    """

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or Path.home() / ".typemaster" / "leaderboard.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def read_all(self) -> List[LeaderboardEntry]:
        if not self._file_path.exists():
            return []
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning("Could not load leaderboard from %s: %s", self._file_path, e)
            return []
        if not isinstance(payload, list):
            logger.warning("Ignoring leaderboard in %s: expected a list of entries", self._file_path)
            return []

        entries: List[LeaderboardEntry] = []
        for index, record in enumerate(payload):
            try:
                entries.append(LeaderboardEntry.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Dropping malformed leaderboard record #%d: %s", index, e)
        return entries

    def append(self, entry: LeaderboardEntry) -> None:
        entries = self.read_all()
        entries.append(entry)
        self._save(entries)

    def clear(self, confirm: Callable[[], bool]) -> bool:
        """Remove every entry if ``confirm()`` agrees; return whether it did."""
        if not confirm():
            logger.info("Leaderboard clear cancelled")
            return False
        self._save([])
        logger.info("Leaderboard cleared")
        return True

    def _save(self, entries: Iterable[LeaderboardEntry]) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = [entry.to_dict() for entry in entries]
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save leaderboard to %s: %s", self._file_path, e)


def submit_result(store: LeaderboardStore, result: TestResult, username: str) -> LeaderboardEntry:
    """Turn a finished result into a leaderboard entry and append it."""
    name = username.strip()
    if not name:
        raise ValueError("username is required to submit a score")
    entry = LeaderboardEntry(
        id=uuid.uuid4().hex,
        username=name,
        wpm=result.wpm,
        net_wpm=result.net_wpm,
        accuracy=result.accuracy,
        mode=result.mode,
        difficulty=result.difficulty,
        created_at=result.completed_at,
    )
    store.append(entry)
    logger.info("Submitted score for %s: %d net wpm", name, result.net_wpm)
    return entry


def rank(
    entries: Iterable[LeaderboardEntry],
    mode_filter: str = ALL,
    difficulty_filter: str = ALL,
    sort_key: str = SortKey.NET_WPM,
) -> List[LeaderboardEntry]:
    """Filter by mode and difficulty (``"all"`` matches everything), then sort descending.

    Accuracy ties are broken by net WPM. The input is never modified and
    equal entries keep their stored order.
    """
    try:
        sort_key = SortKey(sort_key)
    except ValueError:
        raise ValueError(f"unknown sort key {sort_key!r}") from None

    selected = [
        entry
        for entry in entries
        if (mode_filter == ALL or entry.mode == mode_filter)
        and (difficulty_filter == ALL or entry.difficulty == difficulty_filter)
    ]

    if sort_key is SortKey.ACCURACY:
        return sorted(selected, key=lambda e: (e.accuracy, e.net_wpm), reverse=True)
    if sort_key is SortKey.WPM:
        return sorted(selected, key=lambda e: e.wpm, reverse=True)
    return sorted(selected, key=lambda e: e.net_wpm, reverse=True)
