from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from typemaster.core.models import CharacterState, CharacterStatus
from typemaster.core.settings import Difficulty, TypingMode

CHARS_PER_WORD = 5

LATENCY_BUCKETS: Tuple[Tuple[str, float], ...] = (
    ("0-50ms", 50),
    ("50-100ms", 100),
    ("100-150ms", 150),
    ("150-200ms", 200),
    ("200ms+", math.inf),
)


@dataclass(frozen=True)
class TypingStats:
    """Live statistics snapshot, recomputed from the character sequence.

    Speed metrics use the 5-characters-per-word convention:
      * **WPM** – (typed characters / 5) / elapsed minutes.
      * **Net WPM** – (typed characters − errors) / 5 / elapsed minutes,
        floored at 0.
    """

    wpm: int = 0
    net_wpm: int = 0
    accuracy: int = 100
    characters_typed: int = 0
    backspaces: int = 0
    time_elapsed: int = 0
    current_streak: int = 0
    key_latencies: Tuple[float, ...] = ()
    errors_count: int = 0


@dataclass(frozen=True)
class TestResult(TypingStats):
    """Final statistics of a completed session, produced exactly once."""

    __test__ = False

    mode: TypingMode = TypingMode.NORMAL
    difficulty: Difficulty = Difficulty.MEDIUM
    text_length: int = 0
    completed_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_stats(
        cls,
        stats: TypingStats,
        *,
        mode: TypingMode,
        difficulty: Difficulty,
        text_length: int,
        completed_at: datetime,
    ) -> "TestResult":
        return cls(
            **asdict(stats),
            mode=mode,
            difficulty=difficulty,
            text_length=text_length,
            completed_at=completed_at,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["key_latencies"] = list(self.key_latencies)
        data["mode"] = self.mode.value
        data["difficulty"] = self.difficulty.value
        data["completed_at"] = self.completed_at.isoformat(timespec="milliseconds")
        return data


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def calculate_wpm(characters: int, time_elapsed_ms: float) -> int:
    if time_elapsed_ms <= 0:
        return 0
    minutes = time_elapsed_ms / 60000.0
    return round_half_up((characters / CHARS_PER_WORD) / minutes)


def calculate_net_wpm(characters: int, errors: int, time_elapsed_ms: float) -> int:
    return calculate_wpm(max(0, characters - errors), time_elapsed_ms)


def calculate_accuracy(correct: int, total: int) -> int:
    if total == 0:
        return 100
    return round_half_up(correct / total * 100)


def compute_stats(
    characters: Sequence[CharacterState],
    current_index: int,
    start_time: Optional[float],
    backspaces: int,
    latencies: Sequence[float],
    now: float,
) -> TypingStats:
    """Recompute every statistic from the authoritative character sequence."""
    time_elapsed = int(now - start_time) if start_time is not None else 0

    correct = 0
    incorrect = 0
    streak = 0
    for state in characters[:current_index]:
        if state.status == CharacterStatus.CORRECT:
            correct += 1
            streak += 1
        elif state.status == CharacterStatus.INCORRECT:
            incorrect += 1
            streak = 0

    return TypingStats(
        wpm=calculate_wpm(current_index, time_elapsed),
        net_wpm=calculate_net_wpm(current_index, incorrect, time_elapsed),
        accuracy=calculate_accuracy(correct, current_index),
        characters_typed=current_index,
        backspaces=backspaces,
        time_elapsed=time_elapsed,
        current_streak=streak,
        key_latencies=tuple(latencies),
        errors_count=incorrect,
    )


def average_latency(latencies: Sequence[float]) -> int:
    if not latencies:
        return 0
    return round_half_up(sum(latencies) / len(latencies))


def latency_histogram(latencies: Sequence[float]) -> Dict[str, int]:
    """Count latencies per bucket; the counts always sum to ``len(latencies)``."""
    histogram = {label: 0 for label, _ in LATENCY_BUCKETS}
    for latency in latencies:
        for label, upper in LATENCY_BUCKETS[:-1]:
            if latency < upper:
                histogram[label] += 1
                break
        else:
            histogram[LATENCY_BUCKETS[-1][0]] += 1
    return histogram


def export_rows(result: TestResult) -> List[Tuple[str, str]]:
    """Metric/value pairs handed to the export boundary."""
    return [
        ("WPM", str(result.wpm)),
        ("Net WPM", str(result.net_wpm)),
        ("Accuracy", f"{result.accuracy}%"),
        ("Characters Typed", str(result.characters_typed)),
        ("Backspaces", str(result.backspaces)),
        ("Time Elapsed", f"{round_half_up(result.time_elapsed / 1000)}s"),
        ("Errors", str(result.errors_count)),
        ("Average Latency", f"{average_latency(result.key_latencies)}ms"),
        ("Mode", result.mode.value),
        ("Difficulty", result.difficulty.value),
        ("Completed At", result.completed_at.isoformat(timespec="milliseconds")),
    ]
