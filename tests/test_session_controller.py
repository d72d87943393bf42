"""Tests for typemaster.ui.session_controller – timer and keystroke wiring."""

from __future__ import annotations

import random

import pytest
from PySide6.QtCore import QEvent, Qt
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import QApplication, QWidget

from typemaster.core.session import BACKSPACE, KeyPress, SessionStatus
from typemaster.core.settings import TestSettings
from typemaster.core.text_generator import TextGenerator
from typemaster.ui.session_controller import (
    TICK_INTERVAL_MS,
    SessionController,
    key_press_from_event,
)


class FakeClock:
    def __init__(self, now: float = 0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(1000)


def make_controller(clock: FakeClock, text: str = "cat", **settings) -> SessionController:
    settings.setdefault("test_type", "words")
    return SessionController(
        TestSettings(mode="custom", custom_text=text, **settings),
        TextGenerator(rng=random.Random(0)),
        clock=clock,
    )


def key_event(key, text: str = "", modifiers=Qt.KeyboardModifier.NoModifier) -> QKeyEvent:
    return QKeyEvent(QEvent.Type.KeyPress, key, modifiers, text)


# ---------------------------------------------------------------------------
# key_press_from_event
# ---------------------------------------------------------------------------

class TestKeyPressFromEvent:
    def test_printable(self, qapp):
        assert key_press_from_event(key_event(Qt.Key.Key_A, "a")) == KeyPress("a")

    def test_space(self, qapp):
        assert key_press_from_event(key_event(Qt.Key.Key_Space, " ")) == KeyPress(" ")

    def test_backspace(self, qapp):
        assert key_press_from_event(key_event(Qt.Key.Key_Backspace, "\b")) == KeyPress(BACKSPACE)

    def test_ctrl_modifier(self, qapp):
        key = key_press_from_event(key_event(Qt.Key.Key_V, "v", Qt.KeyboardModifier.ControlModifier))
        assert key.ctrl
        assert key.has_modifier

    def test_non_printing_key(self, qapp):
        key = key_press_from_event(key_event(Qt.Key.Key_Shift))
        assert key is not None
        assert len(key.key) > 1


# ---------------------------------------------------------------------------
# Timer lifecycle
# ---------------------------------------------------------------------------

class TestTimerLifecycle:
    def test_interval(self):
        assert TICK_INTERVAL_MS == 100

    def test_not_ticking_before_first_key(self, qapp, clock):
        c = make_controller(clock)
        assert not c.is_ticking

    def test_starts_on_first_key(self, qapp, clock):
        c = make_controller(clock)
        c.handle_key(KeyPress("c"))
        assert c.is_ticking
        c.teardown()

    def test_stops_on_pause_and_restarts_on_resume(self, qapp, clock):
        c = make_controller(clock)
        c.handle_key(KeyPress("c"))
        c.pause()
        assert not c.is_ticking
        c.resume()
        assert c.is_ticking
        c.teardown()

    def test_resume_before_start_does_not_tick(self, qapp, clock):
        c = make_controller(clock)
        c.pause()
        c.resume()
        assert not c.is_ticking

    def test_stops_on_completion(self, qapp, clock):
        c = make_controller(clock, "ab")
        c.handle_key(KeyPress("a"))
        c.handle_key(KeyPress("b"))
        assert c.machine.status is SessionStatus.COMPLETE
        assert not c.is_ticking

    def test_stops_on_restart(self, qapp, clock):
        c = make_controller(clock)
        c.handle_key(KeyPress("c"))
        c.restart()
        assert not c.is_ticking
        assert c.machine.status is SessionStatus.NOT_STARTED

    def test_stops_on_teardown(self, qapp, clock):
        c = make_controller(clock)
        c.handle_key(KeyPress("c"))
        c.teardown()
        assert not c.is_ticking


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------

class TestSignals:
    def test_state_changed_on_key(self, qapp, clock):
        c = make_controller(clock)
        states = []
        c.state_changed.connect(states.append)
        c.handle_key(KeyPress("c"))
        assert states[-1].current_index == 1

    def test_completed_emitted_once_for_words_test(self, qapp, clock):
        c = make_controller(clock, "cat")
        results = []
        c.completed.connect(results.append)
        for ch in "cat":
            clock.now += 150
            c.handle_key(KeyPress(ch))
        c.handle_key(KeyPress("x"))
        c._on_tick()
        assert len(results) == 1
        assert results[0].text_length == 3
        assert results[0].accuracy == 100

    def test_time_limit_completes_through_tick(self, qapp, clock):
        c = make_controller(clock, "hello world", test_type="time", time_limit=1)
        results = []
        c.completed.connect(results.append)
        c.handle_key(KeyPress("h"))
        clock.now += 500
        c._on_tick()
        assert results == []
        clock.now += 500
        c._on_tick()
        c._on_tick()
        assert len(results) == 1
        assert results[0].time_elapsed == 1000
        assert not c.is_ticking

    def test_finish_emits_result(self, qapp, clock):
        c = make_controller(clock, "hello")
        results = []
        c.completed.connect(results.append)
        c.handle_key(KeyPress("h"))
        clock.now += 2000
        c.finish()
        c.finish()
        assert len(results) == 1


# ---------------------------------------------------------------------------
# Keystroke subscription
# ---------------------------------------------------------------------------

class TestKeystrokeSubscription:
    def test_attached_widget_feeds_machine(self, qapp, clock):
        c = make_controller(clock)
        widget = QWidget()
        c.attach(widget)
        assert c.is_attached
        QApplication.sendEvent(widget, key_event(Qt.Key.Key_C, "c"))
        assert c.machine.state.current_index == 1
        c.teardown()

    def test_ctrl_shortcut_not_consumed(self, qapp, clock):
        c = make_controller(clock)
        widget = QWidget()
        c.attach(widget)
        event = key_event(Qt.Key.Key_C, "c", Qt.KeyboardModifier.ControlModifier)
        assert c.eventFilter(widget, event) is False
        assert c.machine.state.current_index == 0
        c.teardown()

    def test_detach_stops_listening(self, qapp, clock):
        c = make_controller(clock)
        widget = QWidget()
        c.attach(widget)
        c.detach()
        assert not c.is_attached
        QApplication.sendEvent(widget, key_event(Qt.Key.Key_C, "c"))
        assert c.machine.state.current_index == 0

    def test_teardown_releases_subscription(self, qapp, clock):
        c = make_controller(clock)
        widget = QWidget()
        c.attach(widget)
        c.teardown()
        assert not c.is_attached
