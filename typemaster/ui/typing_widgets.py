"""Typing test UI: colored target text and the live stats line."""

from __future__ import annotations

import html
from typing import Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget

from typemaster.core.models import CharacterState, CharacterStatus
from typemaster.core.session import TypingState
from typemaster.ui.colors import ThemeColors, blend_hex, color_for_status


def render_characters_html(characters: Sequence[CharacterState]) -> str:
    """One span per character, colored by status; the current one is underlined."""
    current_bg = blend_hex(ThemeColors.SURFACE, ThemeColors.PRIMARY, 0.35)
    parts = []
    for state in characters:
        char = "&nbsp;" if state.char == " " else html.escape(state.char)
        style = f"color:{color_for_status(state.status)};"
        if state.status == CharacterStatus.CURRENT:
            style += f"background-color:{current_bg};text-decoration:underline;"
        parts.append(f'<span style="{style}">{char}</span>')
    return "".join(parts)


def format_stats_line(state: TypingState, remaining: str) -> str:
    stats = state.stats
    return (
        f"{stats.wpm} WPM · {stats.accuracy}% · streak {stats.current_streak} · "
        f"{round(stats.time_elapsed / 1000)}s · {remaining}"
    )


class TypingView(QWidget):
    """Shows the target text and the live stats for one session."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setFocusPolicy(Qt.StrongFocus)

        self._stats_label = QLabel("")
        self._stats_label.setStyleSheet(f"color: {ThemeColors.TEXT_SECONDARY}; font-size: 14px;")

        self._text_label = QLabel("")
        self._text_label.setTextFormat(Qt.RichText)
        self._text_label.setWordWrap(True)
        self._text_label.setStyleSheet("font-family: monospace; font-size: 22px;")

        self._hint_label = QLabel("")
        self._hint_label.setAlignment(Qt.AlignCenter)
        self._hint_label.setStyleSheet(f"color: {ThemeColors.TEXT_MUTED};")

        layout = QVBoxLayout(self)
        layout.addWidget(self._stats_label)
        layout.addWidget(self._text_label, 1)
        layout.addWidget(self._hint_label)

    def render(self, state: TypingState, remaining: str, hint: str = "") -> None:
        self._stats_label.setText(format_stats_line(state, remaining))
        self._text_label.setText(render_characters_html(state.characters))
        self._hint_label.setText(hint)
