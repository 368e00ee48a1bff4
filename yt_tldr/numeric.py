"""
Numeric Token Matcher
=====================

Parse numbers out of free text and compare them tolerantly.

Transcripts and model output format the same figure differently
("$4,200" vs "4200" vs "4.2k"), so comparison is by value within a relative
tolerance, with percent-ness required to agree.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Union

DEFAULT_TOLERANCE = 0.01

# Optional currency marker, a number with optional thousands separators and
# decimals (or a bare ".5"), then an optional magnitude suffix (k/m) or
# percent sign. A comma-joined list like "4000,4500" yields two numbers.
NUMERIC_RE = re.compile(
    r"(?:(?P<currency>[$€£])\s?)?"
    r"(?<![\d.])(?P<number>\d{1,3}(?:,\d{3})+(?!\d)(?:\.\d+)?|\d+(?:\.\d+)?|\.\d+)"
    r"(?P<suffix>[kKmM](?![A-Za-z])|\s?%)?"
)

_MAGNITUDE = {"k": 1_000.0, "m": 1_000_000.0}


@dataclass(frozen=True)
class NumericToken:
    """One numeric mention found in text."""
    raw: str
    value: float
    is_percent: bool = False
    is_currency: bool = False

    @property
    def key(self) -> str:
        """Raw text with currency, separators, spacing and case stripped."""
        return re.sub(r"[^0-9a-z.]", "", self.raw.lower())


TokenLike = Union[NumericToken, str]


def _token_from_match(m: re.Match) -> NumericToken:
    number = m.group("number").replace(",", "")
    suffix = (m.group("suffix") or "").strip().lower()
    value = float(number) * _MAGNITUDE.get(suffix, 1.0)
    return NumericToken(
        raw=m.group(0).strip(),
        value=value,
        is_percent=suffix == "%",
        is_currency=bool(m.group("currency")),
    )


def parse_numeric_tokens(text: str) -> List[NumericToken]:
    """
    Extract every numeric mention from text.

    Args:
        text: Free text

    Returns:
        Tokens in order of appearance (empty list for empty text)
    """
    if not text:
        return []
    return [_token_from_match(m) for m in NUMERIC_RE.finditer(text)]


def numeric_substrings(text: str) -> List[str]:
    """The raw matched substrings, as they appear in text."""
    if not text:
        return []
    return [m.group(0).strip() for m in NUMERIC_RE.finditer(text)]


def _as_token(t: TokenLike):
    if isinstance(t, NumericToken):
        return t
    tokens = parse_numeric_tokens(t)
    return tokens[0] if tokens else None


def token_matches(a: TokenLike, b: TokenLike, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """
    Tolerant equality between two numeric mentions.

    Percent flags must agree. Then either the stripped raw text is identical or
    the values are within `tolerance` relative to the larger magnitude.
    Strings are parsed and their first numeric token is used.
    """
    ta, tb = _as_token(a), _as_token(b)
    if ta is None or tb is None:
        return False
    if ta.is_percent != tb.is_percent:
        return False
    if ta.key == tb.key:
        return True
    scale = max(abs(ta.value), abs(tb.value))
    if scale == 0:
        return True
    return abs(ta.value - tb.value) <= tolerance * scale


def appears_in(
    candidate: str,
    source: Union[str, Sequence[NumericToken]],
    tolerance: float = DEFAULT_TOLERANCE,
) -> bool:
    """
    True when every number in `candidate` has a match among the numbers of
    `source`. A candidate with no numbers trivially appears.

    `source` may be raw text or tokens already parsed from it, so callers
    checking many candidates against one transcript parse it once.
    """
    source_tokens: Iterable[NumericToken] = (
        parse_numeric_tokens(source) if isinstance(source, str) else source
    )
    source_tokens = list(source_tokens)
    for token in parse_numeric_tokens(candidate):
        if not any(token_matches(token, s, tolerance) for s in source_tokens):
            return False
    return True
