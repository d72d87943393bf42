"""Qt glue that feeds keystrokes and timer ticks into an InputStateMachine."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from PySide6.QtCore import QEvent, QObject, Qt, QTimer, Signal
from PySide6.QtGui import QKeyEvent

from typemaster.core.session import BACKSPACE, InputStateMachine, KeyPress, SessionStatus
from typemaster.core.settings import TestSettings
from typemaster.core.stats import TestResult
from typemaster.core.text_generator import TextGenerator

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 100


def wall_clock_ms() -> float:
    return time.time() * 1000.0


def key_press_from_event(event: QKeyEvent) -> Optional[KeyPress]:
    """Translate a Qt key event; returns None for events carrying no key."""
    modifiers = event.modifiers()
    ctrl = bool(modifiers & Qt.KeyboardModifier.ControlModifier)
    meta = bool(modifiers & Qt.KeyboardModifier.MetaModifier)
    if event.key() == Qt.Key.Key_Backspace:
        return KeyPress(BACKSPACE, ctrl=ctrl, meta=meta)
    text = event.text()
    if len(text) == 1 and text.isprintable():
        return KeyPress(text, ctrl=ctrl, meta=meta)
    if event.key() == Qt.Key.Key_unknown:
        return None
    # Non-printing keys (Shift, arrows, ...) still count for latency.
    return KeyPress(f"Key_{int(event.key())}", ctrl=ctrl, meta=meta)


class SessionController(QObject):
    """Owns one session plus its tick timer and keystroke subscription.

    The timer runs only while the session is active; it is stopped on
    pause, completion, restart and teardown. Both keystrokes and ticks are
    delivered on the Qt event loop, so they never interleave.
    """

    state_changed = Signal(object)  # TypingState
    completed = Signal(object)  # TestResult, once per session

    def __init__(
        self,
        settings: TestSettings,
        generator: Optional[TextGenerator] = None,
        clock: Callable[[], float] = wall_clock_ms,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._machine = InputStateMachine(settings, generator)
        self._clock = clock
        self._watched: Optional[QObject] = None

        self._timer = QTimer(self)
        self._timer.setInterval(TICK_INTERVAL_MS)
        self._timer.timeout.connect(self._on_tick)

    @property
    def machine(self) -> InputStateMachine:
        return self._machine

    @property
    def is_ticking(self) -> bool:
        return self._timer.isActive()

    @property
    def is_attached(self) -> bool:
        return self._watched is not None

    # ------------------------------------------------------------------
    # Keystroke subscription
    # ------------------------------------------------------------------

    def attach(self, widget: QObject) -> None:
        """Start listening to key presses delivered to *widget*."""
        self.detach()
        widget.installEventFilter(self)
        self._watched = widget

    def detach(self) -> None:
        if self._watched is not None:
            self._watched.removeEventFilter(self)
            self._watched = None

    def eventFilter(self, obj, event) -> bool:
        if obj is self._watched and event.type() == QEvent.Type.KeyPress:
            key = key_press_from_event(event)
            if key is None:
                return False
            self.handle_key(key)
            # Let shortcuts through to the rest of the UI.
            return not key.has_modifier
        return super().eventFilter(obj, event)

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def handle_key(self, key: KeyPress) -> None:
        result = self._machine.handle_key(key, self._clock())
        self._after_event(result)

    def pause(self) -> None:
        self._machine.pause()
        self._timer.stop()
        self.state_changed.emit(self._machine.state)

    def resume(self) -> None:
        self._machine.resume()
        self._sync_timer()
        self.state_changed.emit(self._machine.state)

    def toggle_pause(self) -> None:
        if self._machine.is_paused:
            self.resume()
        else:
            self.pause()

    def finish(self) -> None:
        """Stop the session now (used to end zen tests)."""
        result = self._machine.finish(self._clock())
        self._after_event(result)

    def restart(self, settings: Optional[TestSettings] = None) -> None:
        self._timer.stop()
        self._machine.restart(settings)
        self.state_changed.emit(self._machine.state)

    def teardown(self) -> None:
        """Release the timer and the keystroke subscription."""
        self._timer.stop()
        self.detach()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_tick(self) -> None:
        result = self._machine.tick(self._clock())
        self._after_event(result)

    def _after_event(self, result: Optional[TestResult]) -> None:
        self._sync_timer()
        self.state_changed.emit(self._machine.state)
        if result is not None:
            logger.debug("Emitting result for completed session")
            self.completed.emit(result)

    def _sync_timer(self) -> None:
        if self._machine.status is SessionStatus.ACTIVE:
            if not self._timer.isActive():
                self._timer.start()
        else:
            self._timer.stop()
