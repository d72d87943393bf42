"""Per-character state shared by the session and the statistics engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CharacterStatus(str, Enum):
    UNTYPED = "untyped"
    CURRENT = "current"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class CharacterState:
    """One target character, its status and when it was typed (ms)."""

    char: str
    status: CharacterStatus = CharacterStatus.UNTYPED
    timestamp: Optional[float] = None
