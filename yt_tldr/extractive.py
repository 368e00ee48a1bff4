"""
Extractive Summarizer
=====================

No-cost summary path: rank transcript sentences instead of calling a model.

Scoring rewards sentences that are frequent in vocabulary, carry numbers
(especially price-shaped ones), name a whitelisted ticker, mention a
currency, or are short. Output goes through the grounding filter like the
paid path does.
"""

import re
from collections import Counter
from typing import Iterable, List, Sequence, Set

from .grounding import ground
from .models import KeyLevel, LongSummary, Summary, SummaryStatus, VideoRef, clip_bullets
from .numeric import DEFAULT_TOLERANCE
from .tickers import TICKER_WHITELIST

BULLET_COUNT = 3
BULLET_MAX_CHARS = 160
TAKEAWAY_COUNT = 4
DETAIL_COUNT = 6
LEVEL_COUNT = 6

NUMERIC_BONUS = 0.5
PRICE_BONUS = 1.5
CURRENCY_BOOST = 1.15
TICKER_BOOST = 1.2
SHORT_BOOST = 1.1
SHORT_SENTENCE_CHARS = 140

# Caption text often has no punctuation at all; past this length a
# "sentence" is re-cut into fixed word windows.
MAX_SENTENCE_CHARS = 400
WINDOW_WORDS = 30

STOPWORDS = frozenset("""
a about above after again all also am an and any are as at be because been before being below between both
but by can could did do does doing down during each few for from further gonna got had has have having he her
here hers him his how i if in into is it its itself just know let like me more most my no nor not now of off
on once only or other our out over own really right same she should so some such than that the their them then
there these they this those through to too um uh under until up very was we well were what when where which
while who why will with would yeah you your going get see thing things okay ok
""".split())

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+(?=[A-Z0-9\"'$])|\n+")
_WORD_RE = re.compile(r"[A-Za-z][A-Za-z']+")
_NUMBER_RE = re.compile(r"\$?\d[\d,]*(?:\.\d+)?[kKmM%]?")
_PRICE_RE = re.compile(r"^\$?(?:\d{3,5}|\d{1,2},\d{3})(?:\.\d+)?$")
_LEVEL_RE = re.compile(r"(?<![\d.,])(?:\d{1,2},\d{3}|\d{2,5})(?:\.\d+)?(?!\d|,\d)")
_TICKER_RE = re.compile(r"\b(?:" + "|".join(sorted(TICKER_WHITELIST, key=len, reverse=True)) + r")\b")


def split_sentences(text: str) -> List[str]:
    """Punctuation-boundary split, with word windows for unpunctuated runs."""
    out: List[str] = []
    for piece in _SENTENCE_SPLIT_RE.split(text or ""):
        piece = piece.strip()
        if not piece:
            continue
        if len(piece) <= MAX_SENTENCE_CHARS:
            out.append(piece)
            continue
        words = piece.split()
        for i in range(0, len(words), WINDOW_WORDS):
            out.append(" ".join(words[i:i + WINDOW_WORDS]))
    return out


def _content_words(sentence: str) -> List[str]:
    return [w for w in (m.group(0).lower() for m in _WORD_RE.finditer(sentence)) if w not in STOPWORDS]


def score_sentences(sentences: Sequence[str]) -> List[float]:
    tf = Counter(w for s in sentences for w in _content_words(s))
    scores = []
    for s in sentences:
        score = float(sum(tf[w] for w in _content_words(s)))
        numbers = _NUMBER_RE.findall(s)
        score += NUMERIC_BONUS * len(numbers)
        score += PRICE_BONUS * sum(1 for n in numbers if _PRICE_RE.match(n))
        if "$" in s:
            score *= CURRENCY_BOOST
        if _TICKER_RE.search(s):
            score *= TICKER_BOOST
        if len(s) < SHORT_SENTENCE_CHARS:
            score *= SHORT_BOOST
        scores.append(score)
    return scores


def top_k(scores: Sequence[float], k: int, exclude: Iterable[int] = ()) -> List[int]:
    """Indices of the k best scores (ties keep earlier sentences), in original order."""
    skip: Set[int] = set(exclude)
    ranked = sorted((i for i in range(len(scores)) if i not in skip), key=lambda i: (-scores[i], i))
    return sorted(ranked[:k])


def _ellipsize(s: str, limit: int = BULLET_MAX_CHARS) -> str:
    if len(s) <= limit:
        return s
    cut = s[:limit - 3].rsplit(" ", 1)[0]
    return cut.rstrip(",;:.") + "..."


def candidate_levels(text: str, limit: int = LEVEL_COUNT) -> List[str]:
    """Up to `limit` distinct 2-5 digit numbers, in order of appearance."""
    seen: List[str] = []
    for m in _LEVEL_RE.finditer(text or ""):
        if m.group(0) not in seen:
            seen.append(m.group(0))
        if len(seen) >= limit:
            break
    return seen


def summarize_free(video: VideoRef, transcript: str, tolerance: float = DEFAULT_TOLERANCE) -> Summary:
    """
    Build a Summary from transcript sentences alone.

    Args:
        video: The video being summarized (kept for parity with the paid path)
        transcript: Normalized transcript text
        tolerance: Grounding tolerance

    Returns:
        Grounded Summary
    """
    sentences = split_sentences(transcript)
    if not sentences:
        return Summary.placeholder(SummaryStatus.SKIPPED, "No transcript available.")

    scores = score_sentences(sentences)

    bullet_idx = top_k(scores, BULLET_COUNT)
    bullets = clip_bullets([_ellipsize(sentences[i]) for i in bullet_idx])

    context_idx = top_k(scores, 1)
    context = sentences[context_idx[0]]

    used = set(bullet_idx)
    takeaway_idx = top_k(scores, TAKEAWAY_COUNT, exclude=used)
    used.update(takeaway_idx)

    details = [
        sentences[i] for i in range(len(sentences))
        if i not in used and (_TICKER_RE.search(sentences[i]) or re.search(r"\d", sentences[i]))
    ][:DETAIL_COUNT]

    long = LongSummary(
        context=context,
        key_levels=[KeyLevel(level=lvl) for lvl in candidate_levels(transcript)],
        takeaways=[sentences[i] for i in takeaway_idx],
        notable_details=details,
    )
    summary = Summary(bullets=bullets, long=long, method="extractive")
    return ground(summary, transcript, tolerance)
