"""Tests for sentence-respecting chunking."""
import re

import pytest

from travel_rag.rag.chunker import TextChunker, chunk_text, split_sentences


def _non_whitespace(text: str) -> str:
    return re.sub(r"\s+", "", text)


GUIDE = (
    "Day one starts at Senso-ji. Walk to the Kaminarimon gate!\n"
    "Lunch near Ueno?\n\n"
    "東京晴空塔是著名景點。築地市場有新鮮海鮮！要去台北101嗎？"
    "Evening: Shibuya crossing... then ramen."
)


def test_empty_text_returns_single_empty_chunk():
    assert TextChunker(chunk_size=100).chunk_text("") == [""]


def test_whitespace_only_text_returned_as_is():
    assert TextChunker(chunk_size=100).chunk_text("  \n ") == ["  \n "]


def test_text_without_terminators_is_one_chunk():
    assert TextChunker(chunk_size=5).chunk_text("no terminators here") == ["no terminators here"]


def test_sentences_packed_up_to_chunk_size():
    text = "Aaaa. Bbbb. Cccc."

    assert TextChunker(chunk_size=10).chunk_text(text) == ["Aaaa.", "Bbbb.", "Cccc."]
    assert TextChunker(chunk_size=11).chunk_text(text) == ["Aaaa. Bbbb.", "Cccc."]
    assert TextChunker(chunk_size=100).chunk_text(text) == ["Aaaa. Bbbb. Cccc."]


def test_full_width_terminators_split_sentences():
    text = "東京很好玩。大阪也不錯！京都呢？"

    assert split_sentences(text) == ["東京很好玩。", "大阪也不錯！", "京都呢？"]
    assert TextChunker(chunk_size=6).chunk_text(text) == ["東京很好玩。", "大阪也不錯！", "京都呢？"]


def test_newline_is_a_terminator():
    assert TextChunker(chunk_size=8).chunk_text("line one\nline two\r\n") == ["line one", "line two"]


def test_terminator_runs_stay_with_their_sentence():
    assert split_sentences("Wait... what?!") == ["Wait...", "what?!"]


def test_oversized_sentence_is_not_split():
    long_sentence = "This sentence is much longer than the budget allows."
    chunks = TextChunker(chunk_size=10).chunk_text(f"Hi. {long_sentence} Bye.")

    assert chunks == ["Hi.", long_sentence, "Bye."]


@pytest.mark.parametrize("chunk_size", [1, 10, 25, 60, 500])
def test_chunks_preserve_all_non_whitespace_in_order(chunk_size):
    chunks = TextChunker(chunk_size=chunk_size).chunk_text(GUIDE)

    assert chunks
    assert _non_whitespace("".join(chunks)) == _non_whitespace(GUIDE)


@pytest.mark.parametrize("chunk_size", [30, 60, 120])
def test_chunks_respect_size_when_sentences_fit(chunk_size):
    sentences = split_sentences(GUIDE)
    assert max(len(s) for s in sentences) <= 30

    chunks = TextChunker(chunk_size=chunk_size).chunk_text(GUIDE)

    assert all(len(c) <= chunk_size for c in chunks)


def test_non_positive_chunk_size_rejected():
    with pytest.raises(ValueError):
        TextChunker(chunk_size=0)


def test_default_chunk_size_from_config():
    assert TextChunker().chunk_size == 500


def test_chunk_text_convenience_accepts_size_override():
    assert chunk_text("Aaaa. Bbbb.", chunk_size=5) == ["Aaaa.", "Bbbb."]
    assert chunk_text("Aaaa. Bbbb.") == ["Aaaa. Bbbb."]


def test_chunk_stats():
    chunker = TextChunker(chunk_size=10)
    stats = chunker.get_chunk_stats(["abc", "abcdefg"])

    assert stats["chunk_count"] == 2
    assert stats["total_chars"] == 10
    assert stats["avg_chunk_size"] == 5
    assert stats["min_chunk_size"] == 3
    assert stats["max_chunk_size"] == 7
    assert chunker.get_chunk_stats([])["chunk_count"] == 0
