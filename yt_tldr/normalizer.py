"""
Text Normalizer
===============

Canonicalize transcript and summary text and repair ticker symbols that
speech recognition tends to garble.

Stages (fixed order, each feeds the next):
1. Unicode NFKC, zero-width removal, straight quotes, single spaces
2. Collapse letter-by-letter spellings ("S O L") into one uppercase token
3. Ordered ASR confusion fixes from tickers.ASR_FIXES, outside long spaced runs
4. Uppercase bare 2-5 letter tokens that are whitelisted tickers

normalize() is total and idempotent: summaries get normalized again after
generation, so normalize(normalize(s)) must equal normalize(s).
"""

import re
import unicodedata
from typing import Optional

from .tickers import ASR_FIXES, TICKER_WHITELIST

_ZERO_WIDTH_RE = re.compile("[\u200b\u200c\u200d\u200e\u200f\u2060\ufeff\u00ad]")
_WS_RE = re.compile(r"\s+")
_QUOTES = str.maketrans({
    "\u2018": "'", "\u2019": "'", "\u201a": "'", "\u201b": "'",
    "\u201c": '"', "\u201d": '"', "\u201e": '"', "\u201f": '"',
    "\u2032": "'", "\u2033": '"',
})

# A maximal run of single letters separated by single spaces. Every letter in
# the run stands alone (no word character on either side, no leading
# apostrophe as in "I'm"), so punctuation may follow the run. Runs of 2-5
# letters are collapsed; longer runs are left alone.
_SPACED_LETTERS_RE = re.compile(r"(?<![\w'])[A-Za-z](?: [A-Za-z](?!\w))+(?!\w)")
_MAX_SPACED_LETTERS = 5

_BARE_TOKEN_RE = re.compile(r"\b[A-Za-z]{2,5}\b")


def _canonicalize(text: str) -> str:
    text = unicodedata.normalize("NFKC", text)
    text = _ZERO_WIDTH_RE.sub("", text)
    text = text.translate(_QUOTES)
    return _WS_RE.sub(" ", text).strip()


def _collapse_spaced_letters(text: str) -> str:
    def repl(m: re.Match) -> str:
        letters = m.group(0).split(" ")
        if len(letters) > _MAX_SPACED_LETTERS:
            return m.group(0)
        return "".join(letters).upper()

    return _SPACED_LETTERS_RE.sub(repl, text)


def _fix_segment(text: str) -> str:
    for pattern, replacement in ASR_FIXES:
        text = pattern.sub(replacement, text)
    return text


def _apply_asr_fixes(text: str) -> str:
    # Runs still spaced out after stage 2 are too long to collapse. Their
    # letters are not rewritten either, or a later pass would find a shorter
    # run left behind ("a b c d s p x" -> "a b c d SPX" -> "ABCD SPX").
    parts = []
    pos = 0
    for m in _SPACED_LETTERS_RE.finditer(text):
        parts.append(_fix_segment(text[pos:m.start()]))
        parts.append(m.group(0))
        pos = m.end()
    parts.append(_fix_segment(text[pos:]))
    return "".join(parts)


def _uppercase_whitelisted(text: str) -> str:
    def repl(m: re.Match) -> str:
        token = m.group(0)
        upper = token.upper()
        return upper if upper in TICKER_WHITELIST else token

    return _BARE_TOKEN_RE.sub(repl, text)


def normalize(text: Optional[str]) -> str:
    """
    Normalize free text for transcripts and summaries.

    Args:
        text: Raw text (None is treated as empty)

    Returns:
        Normalized text; never raises
    """
    if not text:
        return ""
    text = _canonicalize(str(text))
    text = _collapse_spaced_letters(text)
    text = _apply_asr_fixes(text)
    return _uppercase_whitelisted(text)
