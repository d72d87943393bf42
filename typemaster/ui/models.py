"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass

from typemaster.core.leaderboard import ALL, SortKey

MODE_FILTERS = [
    (ALL, "All Modes"),
    ("normal", "Normal"),
    ("punctuation", "Punctuation"),
    ("numbers", "Numbers"),
    ("quotes", "Quotes"),
    ("custom", "Custom"),
    ("zen", "Zen"),
    ("hard", "Hard"),
]

DIFFICULTY_FILTERS = [
    (ALL, "All Difficulties"),
    ("easy", "Easy"),
    ("medium", "Medium"),
    ("hard", "Hard"),
]

SORT_OPTIONS = [
    (SortKey.NET_WPM, "Net WPM"),
    (SortKey.WPM, "Raw WPM"),
    (SortKey.ACCURACY, "Accuracy"),
]


@dataclass
class LeaderboardFilter:
    """Current leaderboard filter and sort selection."""

    mode: str = ALL
    difficulty: str = ALL
    sort_key: SortKey = SortKey.NET_WPM
