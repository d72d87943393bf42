from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from typemaster.core.settings import Difficulty, TypingMode

ZEN_WORD_COUNT = 200
NUMBER_PROBABILITY = 0.7
PUNCTUATION_PROBABILITY = 0.3


@dataclass(frozen=True)
class Corpus:
    words: Dict[Difficulty, List[str]]
    punctuation: List[str]
    symbols: List[str]
    quotes: List[str]


def default_corpus_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "corpus.yaml"


def _string_list(raw: dict, key: str, source: str) -> List[str]:
    value = raw.get(key)
    if not isinstance(value, list):
        raise ValueError(f"{source}: missing or invalid '{key}'")
    items = [str(item) for item in value if item is not None and str(item)]
    if not items:
        raise ValueError(f"{source}: '{key}' is empty")
    return items


def load_corpus(path: Optional[Path] = None) -> Corpus:
    """Load word lists, symbols and quotes from a YAML file."""
    path = path or default_corpus_path()
    if not path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected YAML with 'words', 'punctuation', 'symbols' and 'quotes'")

    words_raw = raw.get("words")
    if not isinstance(words_raw, dict):
        raise ValueError(f"{path.name}: missing or invalid 'words'")
    words: Dict[Difficulty, List[str]] = {}
    for difficulty in Difficulty:
        words[difficulty] = _string_list(words_raw, difficulty.value, path.name)

    return Corpus(
        words=words,
        punctuation=_string_list(raw, "punctuation", path.name),
        symbols=_string_list(raw, "symbols", path.name),
        quotes=_string_list(raw, "quotes", path.name),
    )


class TextGenerator:
    """Builds the target text for a session.

    The random source is injectable so generated text is reproducible
    with a seeded ``random.Random``.
    """

    def __init__(self, corpus: Optional[Corpus] = None, rng: Optional[random.Random] = None) -> None:
        self._corpus = corpus or load_corpus()
        self._rng = rng or random.Random()

    @property
    def corpus(self) -> Corpus:
        return self._corpus

    def generate(
        self,
        mode: TypingMode,
        difficulty: Difficulty,
        word_count: int,
        custom_text: Optional[str] = None,
    ) -> str:
        mode = TypingMode(mode)
        difficulty = Difficulty(difficulty)
        if mode is TypingMode.CUSTOM:
            return custom_text or ""
        if mode is TypingMode.QUOTES:
            return self._rng.choice(self._corpus.quotes)
        if mode is TypingMode.ZEN:
            return self._words(difficulty, ZEN_WORD_COUNT)
        if mode is TypingMode.NUMBERS:
            return self._numbers(word_count)
        if mode is TypingMode.PUNCTUATION:
            return self._punctuated_words(difficulty, word_count)
        return self._words(difficulty, word_count)

    def _words(self, difficulty: Difficulty, word_count: int) -> str:
        vocabulary = self._corpus.words[difficulty]
        return " ".join(self._rng.choice(vocabulary) for _ in range(word_count))

    def _punctuated_words(self, difficulty: Difficulty, word_count: int) -> str:
        vocabulary = self._corpus.words[difficulty]
        result = []
        for _ in range(word_count):
            word = self._rng.choice(vocabulary)
            if self._rng.random() < PUNCTUATION_PROBABILITY:
                word += self._rng.choice(self._corpus.punctuation)
            result.append(word)
        return " ".join(result)

    def _numbers(self, word_count: int) -> str:
        result = []
        for _ in range(word_count):
            if self._rng.random() < NUMBER_PROBABILITY:
                result.append(str(self._rng.randrange(1000)))
            else:
                result.append(self._rng.choice(self._corpus.symbols))
        return " ".join(result)
