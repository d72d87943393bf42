"""Test settings: modes, difficulties and the validated settings record."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a settings combination is not supported."""


class TypingMode(str, Enum):
    NORMAL = "normal"
    PUNCTUATION = "punctuation"
    NUMBERS = "numbers"
    QUOTES = "quotes"
    CUSTOM = "custom"
    ZEN = "zen"
    HARD = "hard"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TestType(str, Enum):
    __test__ = False

    TIME = "time"
    WORDS = "words"


def _coerce(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"{field_name}: unsupported value {value!r} (expected one of {allowed})") from None


@dataclass(frozen=True)
class TestSettings:
    """Immutable input to a typing session.

    Values are checked on construction so an unsupported combination fails
    here and never in the middle of a test.
    """

    __test__ = False  # keep pytest from collecting this as a test class

    mode: TypingMode = TypingMode.NORMAL
    difficulty: Difficulty = Difficulty.MEDIUM
    test_type: TestType = TestType.TIME
    time_limit: int = 30
    word_limit: int = 50
    custom_text: Optional[str] = None
    sound_enabled: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", _coerce(TypingMode, self.mode, "mode"))
        object.__setattr__(self, "difficulty", _coerce(Difficulty, self.difficulty, "difficulty"))
        object.__setattr__(self, "test_type", _coerce(TestType, self.test_type, "test_type"))

        for name in ("time_limit", "word_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name}: expected a positive integer, got {value!r}")

        if self.mode is TypingMode.CUSTOM and self.custom_text is None:
            raise ConfigurationError("custom mode requires custom_text")
        if self.custom_text is not None and not isinstance(self.custom_text, str):
            raise ConfigurationError(f"custom_text: expected a string, got {type(self.custom_text).__name__}")
        if not isinstance(self.sound_enabled, bool):
            raise ConfigurationError(f"sound_enabled: expected a boolean, got {self.sound_enabled!r}")

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("mode", "difficulty", "test_type"):
            data[key] = data[key].value
        return data


def default_settings_path() -> Path:
    return Path.home() / ".typemaster" / "settings.yaml"


def load_settings(path: Optional[Path] = None) -> TestSettings:
    """Load settings from YAML; a missing file yields the defaults."""
    path = path or default_settings_path()
    if not path.exists():
        logger.debug("No settings file at %s, using defaults", path)
        return TestSettings()

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return TestSettings()
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path.name}: expected a mapping of settings")

    known = {f.name for f in fields(TestSettings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(f"{path.name}: unknown settings {', '.join(unknown)}")
    return TestSettings(**raw)


def save_settings(settings: TestSettings, path: Optional[Path] = None) -> None:
    path = path or default_settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(settings.to_dict(), allow_unicode=True, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
