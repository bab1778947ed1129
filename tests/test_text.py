"""Tests for transcript text normalization."""

from __future__ import annotations

from turnkit.voice.text import normalize_text


class TestNormalizeText:
    def test_lowercases(self) -> None:
        assert normalize_text("Olá Mundo") == "olá mundo"

    def test_strips_punctuation(self) -> None:
        assert normalize_text("Sim! Claro, pode ser?") == "sim claro pode ser"

    def test_keeps_accented_letters(self) -> None:
        assert normalize_text("Ação, coração e pé.") == "ação coração e pé"

    def test_collapses_whitespace(self) -> None:
        assert normalize_text("  muito   espaço\t\naqui  ") == "muito espaço aqui"

    def test_empty_and_punctuation_only(self) -> None:
        assert normalize_text("") == ""
        assert normalize_text("?!...") == ""
