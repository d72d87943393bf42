"""Tests for typemaster.core.text_generator – corpus loading and text generation."""

from __future__ import annotations

import random
from pathlib import Path

import pytest
import yaml

from typemaster.core.settings import Difficulty, TypingMode
from typemaster.core.text_generator import (
    ZEN_WORD_COUNT,
    Corpus,
    TextGenerator,
    load_corpus,
)


@pytest.fixture(scope="module")
def corpus() -> Corpus:
    return load_corpus()


@pytest.fixture()
def generator(corpus: Corpus) -> TextGenerator:
    return TextGenerator(corpus, random.Random(1234))


def _write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.dump(data, allow_unicode=True, default_flow_style=False), encoding="utf-8")


# ---------------------------------------------------------------------------
# load_corpus
# ---------------------------------------------------------------------------

class TestLoadCorpus:
    def test_packaged_corpus(self, corpus: Corpus):
        for difficulty in Difficulty:
            assert corpus.words[difficulty]
        assert len(corpus.quotes) == 10
        assert "+" in corpus.symbols
        assert "," in corpus.punctuation

    def test_yaml_keywords_stay_words(self, corpus: Corpus):
        # "no", "on" and "off" must not turn into booleans
        assert "no" in corpus.words[Difficulty.EASY]
        assert "on" in corpus.words[Difficulty.EASY]
        assert "off" in corpus.words[Difficulty.MEDIUM]
        for words in corpus.words.values():
            assert all(isinstance(w, str) for w in words)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_corpus(tmp_path / "nope.yaml")

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "corpus.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="expected YAML"):
            load_corpus(path)

    def test_missing_difficulty(self, tmp_path: Path):
        path = tmp_path / "corpus.yaml"
        _write_yaml(path, {
            "words": {"easy": ["a"], "medium": ["b"]},
            "punctuation": ["."],
            "symbols": ["+"],
            "quotes": ["q"],
        })
        with pytest.raises(ValueError, match="hard"):
            load_corpus(path)

    def test_empty_quotes(self, tmp_path: Path):
        path = tmp_path / "corpus.yaml"
        _write_yaml(path, {
            "words": {"easy": ["a"], "medium": ["b"], "hard": ["c"]},
            "punctuation": ["."],
            "symbols": ["+"],
            "quotes": [],
        })
        with pytest.raises(ValueError, match="quotes"):
            load_corpus(path)

    def test_null_items_skipped(self, tmp_path: Path):
        path = tmp_path / "corpus.yaml"
        path.write_text(
            "words:\n  easy: [a, null]\n  medium: [b]\n  hard: [c]\n"
            "punctuation: ['.']\nsymbols: ['+']\nquotes: [q, ~]\n",
            encoding="utf-8",
        )
        corpus = load_corpus(path)
        assert corpus.words[Difficulty.EASY] == ["a"]
        assert corpus.quotes == ["q"]

    def test_only_null_items(self, tmp_path: Path):
        path = tmp_path / "corpus.yaml"
        _write_yaml(path, {
            "words": {"easy": ["a"], "medium": ["b"], "hard": ["c"]},
            "punctuation": ["."],
            "symbols": ["+"],
            "quotes": [None],
        })
        with pytest.raises(ValueError, match="quotes"):
            load_corpus(path)


# ---------------------------------------------------------------------------
# TextGenerator.generate
# ---------------------------------------------------------------------------

class TestGenerateNormal:
    def test_word_count(self, generator: TextGenerator):
        text = generator.generate(TypingMode.NORMAL, Difficulty.EASY, 25)
        assert len(text.split(" ")) == 25

    def test_words_from_difficulty_tier(self, generator: TextGenerator, corpus: Corpus):
        text = generator.generate("normal", "hard", 40)
        assert set(text.split(" ")) <= set(corpus.words[Difficulty.HARD])

    def test_hard_mode_uses_normal_words(self, generator: TextGenerator, corpus: Corpus):
        text = generator.generate(TypingMode.HARD, Difficulty.MEDIUM, 30)
        words = text.split(" ")
        assert len(words) == 30
        assert set(words) <= set(corpus.words[Difficulty.MEDIUM])

    def test_seeded_generation_is_reproducible(self, corpus: Corpus):
        a = TextGenerator(corpus, random.Random(7)).generate("normal", "medium", 50)
        b = TextGenerator(corpus, random.Random(7)).generate("normal", "medium", 50)
        assert a == b


class TestGeneratePunctuation:
    def test_word_count_and_marks(self, generator: TextGenerator, corpus: Corpus):
        text = generator.generate(TypingMode.PUNCTUATION, Difficulty.EASY, 200)
        tokens = text.split(" ")
        assert len(tokens) == 200
        vocabulary = set(corpus.words[Difficulty.EASY])
        marked = 0
        for token in tokens:
            if token in vocabulary:
                continue
            assert token[-1] in corpus.punctuation
            assert token[:-1] in vocabulary
            marked += 1
        # 0.3 probability over 200 words
        assert 20 < marked < 100


class TestGenerateNumbers:
    def test_tokens(self, generator: TextGenerator, corpus: Corpus):
        text = generator.generate(TypingMode.NUMBERS, Difficulty.EASY, 300)
        tokens = text.split(" ")
        assert len(tokens) == 300
        numbers = 0
        for token in tokens:
            if token in corpus.symbols:
                continue
            assert token.isdigit()
            assert 0 <= int(token) < 1000
            numbers += 1
        assert numbers > 150


class TestGenerateQuotes:
    @pytest.mark.parametrize("word_count", [0, 1, 50, 500])
    def test_returns_a_known_quote(self, generator: TextGenerator, corpus: Corpus, word_count: int):
        for difficulty in Difficulty:
            text = generator.generate(TypingMode.QUOTES, difficulty, word_count)
            assert text in corpus.quotes


class TestGenerateZen:
    def test_ignores_word_count(self, generator: TextGenerator):
        text = generator.generate(TypingMode.ZEN, Difficulty.EASY, 5)
        assert len(text.split(" ")) == ZEN_WORD_COUNT == 200


class TestGenerateCustom:
    def test_returns_text_verbatim(self, generator: TextGenerator):
        text = "  Exactly  this, please!  "
        assert generator.generate(TypingMode.CUSTOM, Difficulty.HARD, 3, text) == text

    def test_empty_custom_text(self, generator: TextGenerator):
        assert generator.generate(TypingMode.CUSTOM, Difficulty.EASY, 10, "") == ""

    def test_does_not_consume_randomness(self, corpus: Corpus):
        rng = random.Random(3)
        state = rng.getstate()
        TextGenerator(corpus, rng).generate("custom", "easy", 10, "abc")
        assert rng.getstate() == state
