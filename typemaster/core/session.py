from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple, Union

from typemaster.core.models import CharacterState, CharacterStatus
from typemaster.core.settings import TestSettings, TestType, TypingMode
from typemaster.core.stats import TestResult, TypingStats, compute_stats
from typemaster.core.text_generator import TextGenerator

logger = logging.getLogger(__name__)

BACKSPACE = "Backspace"


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETE = "complete"


@dataclass(frozen=True)
class KeyPress:
    """A single key event: a printable character or a key name such as ``Backspace``."""

    key: str
    ctrl: bool = False
    meta: bool = False

    @property
    def has_modifier(self) -> bool:
        return self.ctrl or self.meta


@dataclass(frozen=True)
class TypingState:
    """Snapshot of one session, replaced wholesale on every change."""

    text: str
    characters: Tuple[CharacterState, ...]
    current_index: int = 0
    is_active: bool = False
    is_complete: bool = False
    start_time: Optional[float] = None
    stats: TypingStats = field(default_factory=TypingStats)


def _initial_state(text: str, mark_first_current: bool) -> TypingState:
    characters = [CharacterState(char) for char in text]
    if mark_first_current and characters:
        characters[0] = CharacterState(characters[0].char, CharacterStatus.CURRENT)
    return TypingState(text=text, characters=tuple(characters))


class InputStateMachine:
    """Typing state of a single session, driven by keystrokes and timer ticks.

    All timestamps are milliseconds. ``handle_key``, ``tick`` and ``finish``
    return the ``TestResult`` on the call that completes the session and
    ``None`` otherwise, so a result is handed out exactly once.

    A freshly constructed session leaves every character untyped until the
    first keystroke; ``restart`` pre-marks the first character as current.
    """

    def __init__(self, settings: TestSettings, generator: Optional[TextGenerator] = None) -> None:
        self._settings = settings
        self._generator = generator or TextGenerator()
        self._reset(mark_first_current=False)

    @property
    def settings(self) -> TestSettings:
        """Settings the current text was generated from."""
        return self._settings

    @property
    def state(self) -> TypingState:
        """Immutable snapshot of the typing progress."""
        return self._state

    @property
    def result(self) -> Optional[TestResult]:
        """The final result once the session is complete."""
        return self._result

    @property
    def backspaces(self) -> int:
        """Number of accepted backspaces since the last restart."""
        return self._backspaces

    @property
    def latencies(self) -> Tuple[float, ...]:
        """Milliseconds between consecutive sampled keystrokes."""
        return tuple(self._latencies)

    @property
    def is_paused(self) -> bool:
        """True while input and ticks are ignored."""
        return self._paused

    @property
    def status(self) -> SessionStatus:
        """Lifecycle status derived from the state and the pause flag."""
        if self._state.is_complete:
            return SessionStatus.COMPLETE
        if self._paused:
            return SessionStatus.PAUSED
        if self._state.is_active:
            return SessionStatus.ACTIVE
        return SessionStatus.NOT_STARTED

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def handle_key(self, key: Union[KeyPress, str], now: float) -> Optional[TestResult]:
        if isinstance(key, str):
            key = KeyPress(key)
        if self._state.is_complete or self._paused:
            return None
        # Ctrl/Cmd combinations belong to copy/paste and other shortcuts.
        if key.has_modifier:
            return None

        if self._last_key_time is not None:
            self._latencies.append(now - self._last_key_time)
        self._last_key_time = now

        if key.key == BACKSPACE:
            self._backspace(now)
            return None
        if len(key.key) != 1:
            return None
        return self._type_char(key.key, now)

    def tick(self, now: float) -> Optional[TestResult]:
        state = self._state
        if not state.is_active or state.is_complete or self._paused:
            return None
        self._refresh_stats(now)
        if self._auto_completes(TestType.TIME) and self._state.stats.time_elapsed >= self._settings.time_limit * 1000:
            return self._complete(now)
        return None

    def finish(self, now: float) -> Optional[TestResult]:
        """End an active session from outside the engine (zen mode, stop)."""
        state = self._state
        if not state.is_active or state.is_complete or self._paused:
            return None
        return self._complete(now)

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def restart(self, settings: Optional[TestSettings] = None) -> None:
        """Discard the current session and start over with fresh text."""
        if settings is not None:
            self._settings = settings
        self._reset(mark_first_current=True)
        logger.debug("Session restarted (%s, %d characters)", self._settings.mode.value, len(self._state.text))

    # ------------------------------------------------------------------
    # Progress helpers for live display
    # ------------------------------------------------------------------

    def time_remaining_ms(self) -> int:
        if self._settings.test_type is not TestType.TIME or self._state.start_time is None:
            return 0
        return max(0, self._settings.time_limit * 1000 - self._state.stats.time_elapsed)

    def words_remaining(self) -> int:
        if self._settings.test_type is not TestType.WORDS:
            return 0
        return max(0, self._settings.word_limit - self._state.current_index // 5)

    def progress(self) -> float:
        """Completion percentage: elapsed share of the limit, or typed share of the text."""
        if self._settings.test_type is TestType.TIME:
            limit_ms = self._settings.time_limit * 1000
            return min(100.0, self._state.stats.time_elapsed / limit_ms * 100)
        if not self._state.text:
            return 0.0
        return self._state.current_index / len(self._state.text) * 100

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset(self, *, mark_first_current: bool) -> None:
        settings = self._settings
        text = self._generator.generate(
            settings.mode,
            settings.difficulty,
            settings.word_limit,
            settings.custom_text,
        )
        self._state = _initial_state(text, mark_first_current)
        self._backspaces = 0
        self._latencies: List[float] = []
        self._last_key_time: Optional[float] = None
        self._result: Optional[TestResult] = None
        self._paused = False

    def _auto_completes(self, test_type: TestType) -> bool:
        # Zen sessions only end through finish().
        return self._settings.test_type is test_type and self._settings.mode is not TypingMode.ZEN

    def _backspace(self, now: float) -> None:
        if self._settings.mode is TypingMode.HARD:
            return
        state = self._state
        index = state.current_index
        if index == 0:
            return

        characters = list(state.characters)
        new_index = index - 1
        characters[new_index] = CharacterState(characters[new_index].char)
        # Nothing is current after a backspace; the next keystroke marks index + 1.
        if index < len(characters) and characters[index].status == CharacterStatus.CURRENT:
            characters[index] = CharacterState(characters[index].char)

        self._backspaces += 1
        self._state = replace(state, characters=tuple(characters), current_index=new_index)
        self._refresh_stats(now)

    def _type_char(self, char: str, now: float) -> Optional[TestResult]:
        state = self._state
        index = state.current_index
        if index >= len(state.text):
            return None

        start_time = state.start_time
        if start_time is None:
            start_time = now
            logger.info(
                "Session started: mode=%s difficulty=%s type=%s",
                self._settings.mode.value,
                self._settings.difficulty.value,
                self._settings.test_type.value,
            )

        status = CharacterStatus.CORRECT if char == state.text[index] else CharacterStatus.INCORRECT
        characters = list(state.characters)
        characters[index] = CharacterState(characters[index].char, status, now)
        new_index = index + 1
        if new_index < len(characters):
            characters[new_index] = CharacterState(characters[new_index].char, CharacterStatus.CURRENT)

        self._state = replace(
            state,
            characters=tuple(characters),
            current_index=new_index,
            start_time=start_time,
            is_active=True,
        )
        self._refresh_stats(now)

        if self._auto_completes(TestType.WORDS) and new_index >= len(state.text):
            return self._complete(now)
        return None

    def _compute(self, now: float) -> TypingStats:
        state = self._state
        return compute_stats(
            state.characters,
            state.current_index,
            state.start_time,
            self._backspaces,
            self._latencies,
            now,
        )

    def _refresh_stats(self, now: float) -> None:
        if self._state.start_time is None:
            return
        self._state = replace(self._state, stats=self._compute(now))

    def _complete(self, now: float) -> TestResult:
        stats = self._compute(now)
        result = TestResult.from_stats(
            stats,
            mode=self._settings.mode,
            difficulty=self._settings.difficulty,
            text_length=len(self._state.text),
            completed_at=datetime.fromtimestamp(now / 1000, tz=timezone.utc),
        )
        self._state = replace(self._state, is_complete=True, stats=stats)
        self._result = result
        logger.info(
            "Session complete: wpm=%d net_wpm=%d accuracy=%d%% errors=%d",
            result.wpm,
            result.net_wpm,
            result.accuracy,
            result.errors_count,
        )
        return result
