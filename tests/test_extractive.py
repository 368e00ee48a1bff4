"""
Tests for the extractive (no-cost) summarizer.
"""

from yt_tldr.extractive import (
    BULLET_MAX_CHARS,
    MAX_SENTENCE_CHARS,
    WINDOW_WORDS,
    candidate_levels,
    score_sentences,
    split_sentences,
    summarize_free,
    top_k,
)
from yt_tldr.models import SummaryStatus


def test_split_sentences_on_punctuation():
    text = "BTC is up. 5 coins broke out! Is ETH next? \"Maybe\" he said."
    assert split_sentences(text) == ["BTC is up.", "5 coins broke out!", "Is ETH next?", "\"Maybe\" he said."]


def test_split_sentences_keeps_decimals_and_lowercase_continuations():
    text = "Price is 3.5 now. it keeps going"
    assert split_sentences(text) == ["Price is 3.5 now. it keeps going"]


def test_split_sentences_windows_unpunctuated_runs():
    words = ["word"] * (WINDOW_WORDS * 3)
    text = " ".join(words)
    assert len(text) > MAX_SENTENCE_CHARS
    pieces = split_sentences(text)
    assert len(pieces) == 3
    assert all(len(p.split()) == WINDOW_WORDS for p in pieces)


def test_split_sentences_empty():
    assert split_sentences("") == []


def test_numbers_and_tickers_raise_scores():
    sentences = [
        "the market moved around today",
        "BTC bounced off 108000 support at $107,500 today",
    ]
    plain, specific = score_sentences(sentences)
    assert specific > plain


def test_top_k_ties_and_order():
    scores = [1.0, 5.0, 3.0, 5.0]
    assert top_k(scores, 2) == [1, 3]
    assert top_k(scores, 1) == [1]
    assert top_k(scores, 2, exclude={1}) == [2, 3]
    assert top_k(scores, 10) == [0, 1, 2, 3]


def test_candidate_levels():
    text = "Levels 3200, 3150 and 3200 again; 7 days, 1000000 shares, 2900.5 and 150"
    assert candidate_levels(text) == ["3200", "3150", "2900.5", "150"]


def test_candidate_levels_with_thousands_separator():
    text = "Support 4,200 then 3200, resistance 104,500 and 12,750.5"
    assert candidate_levels(text) == ["4,200", "3200", "12,750.5"]


def test_candidate_levels_limit():
    text = " ".join(str(n) for n in range(100, 120))
    assert len(candidate_levels(text)) == 6


def test_summarize_free(video, market_transcript):
    summary = summarize_free(video, market_transcript)

    sentences = split_sentences(market_transcript)
    assert summary.status == SummaryStatus.OK
    assert summary.method == "extractive"
    assert 1 <= len(summary.bullets) <= 3
    assert sum(len(b.split()) for b in summary.bullets) <= 60
    for bullet in summary.bullets:
        assert len(bullet) <= BULLET_MAX_CHARS
        assert bullet in sentences or bullet.endswith("...")

    assert summary.long.context == sentences[top_k(score_sentences(sentences), 1)[0]]
    assert len(summary.long.takeaways) <= 4
    assert not set(summary.long.takeaways) & set(summary.bullets)
    assert len(summary.long.notable_details) <= 6
    assert [k.level for k in summary.long.key_levels] == ["3200", "3150", "2900", "150", "165", "3400"]
    assert all(k.role == "unspecified" for k in summary.long.key_levels)
    # Everything came from the transcript, so grounding leaves it alone
    assert summary.long.note is None


def test_summarize_free_bullets_in_transcript_order(video, market_transcript):
    summary = summarize_free(video, market_transcript)
    positions = [market_transcript.find(b.rstrip(".")) for b in summary.bullets]
    assert positions == sorted(positions)


def test_summarize_free_empty_transcript(video):
    summary = summarize_free(video, "")
    assert summary.status == SummaryStatus.SKIPPED
    assert summary.bullets == ["Summary pending."]


def test_summarize_free_keeps_transcript_figures(video):
    transcript = "BTC tested 108000 support. Bulls want 112000 next. The range is tight."
    summary = summarize_free(video, transcript)
    assert summary.long.note is None
    assert any("108000" in b for b in summary.bullets)
