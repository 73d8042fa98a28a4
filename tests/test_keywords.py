"""Tests for keyword extraction, Jaccard similarity and keyword ranking."""
import pytest

from travel_rag.rag.errors import InvalidArgumentError
from travel_rag.rag.keywords import (
    extract_keywords,
    keyword_similarity,
    rank_by_keyword,
    score_chunks,
)


def test_extract_keywords_cjk_runs_and_latin_words():
    keywords = extract_keywords("東京晴空塔 is a Great TOWER, ok")

    assert keywords == {"東京晴空塔", "great", "tower"}


def test_extract_keywords_digits_break_cjk_runs():
    assert extract_keywords("台北101是台灣地標") == {"台北", "是台灣地標"}


def test_extract_keywords_latin_runs_are_maximal():
    # letters glued to digits or CJK still form their own run
    assert extract_keywords("abc123defg東京xyz") == {"abc", "defg", "東京", "xyz"}


def test_extract_keywords_keeps_common_words():
    assert extract_keywords("the and for") == {"the", "and", "for"}


def test_extract_keywords_empty():
    assert extract_keywords("12 34 !!") == set()


def test_similarity_jaccard_value():
    # {tokyo, tower} vs {tokyo, sushi}: 1 shared of 3 total
    assert keyword_similarity("Tokyo tower", "tokyo sushi") == pytest.approx(1 / 3)


@pytest.mark.parametrize(
    "a, b",
    [
        ("Tokyo tower", "tokyo sushi"),
        ("東京 景點", "東京晴空塔是著名景點"),
        ("", "anything here"),
        ("same words here", "here words same"),
    ],
)
def test_similarity_is_symmetric_and_bounded(a, b):
    forward = keyword_similarity(a, b)

    assert forward == keyword_similarity(b, a)
    assert 0.0 <= forward <= 1.0


def test_similarity_identical_keyword_sets_is_one():
    assert keyword_similarity("Kyoto temples", "temples, KYOTO!") == 1.0


def test_similarity_zero_when_either_side_has_no_keywords():
    assert keyword_similarity("", "") == 0.0
    assert keyword_similarity("ok 42", "ok 42") == 0.0
    assert keyword_similarity("tokyo", "12") == 0.0


def test_rank_by_keyword_orders_by_score():
    chunks = ["sushi bar", "tokyo tower view", "tokyo sushi"]

    assert rank_by_keyword("tokyo sushi", chunks, 2) == ["tokyo sushi", "sushi bar"]


def test_rank_by_keyword_ties_keep_original_order():
    chunks = ["tokyo park", "osaka castle", "tokyo bay"]

    assert rank_by_keyword("tokyo", chunks, 3) == ["tokyo park", "tokyo bay", "osaka castle"]


def test_rank_by_keyword_cjk_query(tokyo_chunks):
    assert rank_by_keyword("東京 景點", tokyo_chunks, 2) == tokyo_chunks[:2]


def test_rank_by_keyword_no_overlap_returns_document_order():
    assert rank_by_keyword("xyz", ["abc", "def"], 5) == ["abc", "def"]


def test_rank_by_keyword_overlap_with_later_chunk():
    chunks = ["hotel checkin", "museum tickets", "ramen shop"]

    assert rank_by_keyword("ramen", chunks, 1) == ["ramen shop"]


def test_rank_by_keyword_rejects_non_positive_top_k():
    with pytest.raises(InvalidArgumentError):
        rank_by_keyword("tokyo", ["tokyo"], 0)


def test_score_chunks_keeps_positions():
    scored = score_chunks("tokyo", ["osaka", "tokyo"])

    assert [s.index for s in scored] == [1, 0]
    assert scored[0].score == 1.0
