"""Main window: typing screen, result submission and leaderboard."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from typemaster.core.leaderboard import LeaderboardStore, rank, submit_result
from typemaster.core.session import SessionStatus, TypingState
from typemaster.core.settings import TestSettings, TestType, TypingMode
from typemaster.core.stats import TestResult, average_latency, latency_histogram
from typemaster.ui.colors import ThemeColors
from typemaster.ui.models import DIFFICULTY_FILTERS, MODE_FILTERS, SORT_OPTIONS, LeaderboardFilter
from typemaster.ui.session_controller import SessionController
from typemaster.ui.typing_widgets import TypingView

logger = logging.getLogger(__name__)

COLUMNS = ["Rank", "Username", "WPM", "Net WPM", "Accuracy", "Mode", "Difficulty", "Date"]


class LeaderboardDialog(QDialog):
    """Filterable, sortable leaderboard table with a confirmed clear action."""

    def __init__(self, store: LeaderboardStore, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Leaderboard")
        self.resize(760, 480)
        self._store = store
        self._filter = LeaderboardFilter()

        self._mode_box = QComboBox()
        for value, label in MODE_FILTERS:
            self._mode_box.addItem(label, value)
        self._difficulty_box = QComboBox()
        for value, label in DIFFICULTY_FILTERS:
            self._difficulty_box.addItem(label, value)
        self._sort_box = QComboBox()
        for value, label in SORT_OPTIONS:
            self._sort_box.addItem(label, value)
        for box in (self._mode_box, self._difficulty_box, self._sort_box):
            box.currentIndexChanged.connect(self._on_filter_changed)

        clear_button = QPushButton("Clear All")
        clear_button.clicked.connect(self._clear)

        filters = QHBoxLayout()
        filters.addWidget(self._mode_box)
        filters.addWidget(self._difficulty_box)
        filters.addWidget(self._sort_box)
        filters.addStretch(1)
        filters.addWidget(clear_button)

        self._summary = QLabel("")
        self._table = QTableWidget(0, len(COLUMNS))
        self._table.setHorizontalHeaderLabels(COLUMNS)
        self._table.verticalHeader().setVisible(False)
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)

        layout = QVBoxLayout(self)
        layout.addLayout(filters)
        layout.addWidget(self._summary)
        layout.addWidget(self._table, 1)

        self._refresh()

    def _on_filter_changed(self) -> None:
        self._filter.mode = self._mode_box.currentData()
        self._filter.difficulty = self._difficulty_box.currentData()
        self._filter.sort_key = self._sort_box.currentData()
        self._refresh()

    def _refresh(self) -> None:
        entries = self._store.read_all()
        ranked = rank(entries, self._filter.mode, self._filter.difficulty, self._filter.sort_key)
        self._summary.setText(f"Showing {len(ranked)} of {len(entries)} scores")
        self._table.setRowCount(len(ranked))
        for row, entry in enumerate(ranked):
            values = [
                str(row + 1),
                entry.username,
                f"{entry.wpm:g}",
                f"{entry.net_wpm:g}",
                f"{entry.accuracy:g}%",
                entry.mode.value,
                entry.difficulty.value,
                entry.created_at.astimezone().strftime("%Y-%m-%d"),
            ]
            for column, value in enumerate(values):
                self._table.setItem(row, column, QTableWidgetItem(value))

    def _clear(self) -> None:
        def confirm() -> bool:
            answer = QMessageBox.question(
                self,
                "Clear leaderboard",
                "Are you sure you want to clear all leaderboard data?",
            )
            return answer == QMessageBox.StandardButton.Yes

        if self._store.clear(confirm):
            self._refresh()


class MainWindow(QMainWindow):
    def __init__(self, settings: TestSettings, store: LeaderboardStore) -> None:
        super().__init__()
        self.setWindowTitle("TypeMaster")
        self.setStyleSheet(f"background-color: {ThemeColors.BACKGROUND}; color: {ThemeColors.TEXT_PRIMARY};")
        self._store = store

        self._controller = SessionController(settings, parent=self)
        self._controller.state_changed.connect(self._on_state_changed)
        self._controller.completed.connect(self._on_completed)

        self._view = TypingView()

        pause_button = QPushButton("Pause / Resume")
        pause_button.clicked.connect(self._controller.toggle_pause)
        restart_button = QPushButton("Restart")
        restart_button.clicked.connect(lambda: self._controller.restart())
        finish_button = QPushButton("Finish")
        finish_button.clicked.connect(self._controller.finish)
        leaderboard_button = QPushButton("Leaderboard")
        leaderboard_button.clicked.connect(self._show_leaderboard)
        for button in (pause_button, restart_button, finish_button, leaderboard_button):
            button.setFocusPolicy(Qt.NoFocus)

        toolbar = QHBoxLayout()
        for button in (pause_button, restart_button, finish_button):
            toolbar.addWidget(button)
        toolbar.addStretch(1)
        toolbar.addWidget(leaderboard_button)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.addLayout(toolbar)
        layout.addWidget(self._view, 1)
        self.setCentralWidget(central)

        self._controller.attach(self._view)
        self._view.setFocus()
        self._on_state_changed(self._controller.machine.state)

    def _remaining_text(self) -> str:
        machine = self._controller.machine
        settings = machine.settings
        if settings.mode is TypingMode.ZEN:
            return "zen"
        if settings.test_type is TestType.TIME:
            seconds = -(-machine.time_remaining_ms() // 1000)
            if machine.state.start_time is None:
                seconds = settings.time_limit
            return f"{seconds}s remaining"
        return f"{machine.words_remaining()} words remaining"

    def _hint_text(self, state: TypingState) -> str:
        machine = self._controller.machine
        if machine.status is SessionStatus.PAUSED:
            return "Test paused - press Resume to continue"
        hints = []
        if not state.is_active:
            hints.append("Start typing to begin the test")
        if machine.settings.mode is TypingMode.HARD:
            hints.append("Hard Mode: Backspace is disabled")
        return "  ·  ".join(hints)

    def _on_state_changed(self, state: TypingState) -> None:
        self._view.render(state, self._remaining_text(), self._hint_text(state))

    def _on_completed(self, result: TestResult) -> None:
        histogram = latency_histogram(result.key_latencies)
        buckets = ", ".join(f"{label}: {count}" for label, count in histogram.items())
        summary = (
            f"WPM {result.wpm} (net {result.net_wpm}), accuracy {result.accuracy}%\n"
            f"Errors {result.errors_count}, backspaces {result.backspaces}, "
            f"average latency {average_latency(result.key_latencies)}ms\n"
            f"Latency: {buckets}\n\n"
            "Enter a username to submit your score:"
        )
        username, ok = QInputDialog.getText(self, "Test complete", summary)
        if not ok:
            return
        try:
            submit_result(self._store, result, username)
        except ValueError as e:
            QMessageBox.warning(self, "Username required", str(e))

    def _show_leaderboard(self) -> None:
        was_paused = self._controller.machine.is_paused
        if not was_paused:
            self._controller.pause()
        LeaderboardDialog(self._store, self).exec()
        if not was_paused:
            self._controller.resume()
        self._view.setFocus()

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop the timer and drop the keystroke listener when closing."""
        self._controller.teardown()
        super().closeEvent(event)
