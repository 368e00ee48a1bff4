"""
Ticker Tables
=============

Read-only lookup tables shared by the normalizer, the summarizers and the
price filter.

- TICKER_WHITELIST: the closed set of asset/index symbols we recognize
- ASR_FIXES: ordered (pattern, replacement) pairs for common speech-recognition
  mis-hearings of those symbols
- COINGECKO_IDS: spot-price lookup ids for the crypto symbols

All tables are built once at import time and are immutable.
"""

import re
from types import MappingProxyType
from typing import Pattern, Tuple

TICKER_WHITELIST = frozenset({
    # crypto
    "BTC", "ETH", "SOL", "XRP", "DOGE", "ADA", "AVAX", "BNB", "LTC",
    "SUI", "TAO", "PEPE",
    # indices, ETFs, macro
    "SPX", "SPY", "QQQ", "NDX", "DXY", "VIX", "IWM", "DJI",
    "XAU", "GLD", "USDT",
    # single names the channel covers
    "NVDA", "TSLA", "AAPL", "MSFT", "AMZN", "MSTR",
})

# Order matters: a specific pattern must come before any general pattern that
# would otherwise consume part of its match.
_ASR_FIX_SOURCE: Tuple[Tuple[str, str], ...] = (
    (r"\beath(?:e)?\s?ream\b|\beath\s?reum\b", "Ethereum"),
    (r"\beath\b", "ETH"),
    (r"\bsalana\b|\bso\s?lana\b", "Solana"),
    (r"\bsoul\b(?=\s+(?:is|was|has|price|at|to|above|below|holding|broke|support|resistance)\b)", "SOL"),
    (r"\bsaul\b", "SOL"),
    (r"\bex\s?rp\b|\bx\s?rp\b", "XRP"),
    (r"\bcue\s?cue\s?cue\b|\bqqq's\b", "QQQ"),
    (r"\bn\s?video\b(?=\s+(?:is|was|stock|shares|earnings|at|to|above|below)\b)", "NVDA"),
    (r"\bdoge\s?coin\b", "DOGE"),
    (r"\bd\s?x\s?why\b|\bdxy's\b", "DXY"),
    (r"\bspx's\b|\bs\s?p\s?x\b", "SPX"),
)

ASR_FIXES: Tuple[Tuple[Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), replacement)
    for pattern, replacement in _ASR_FIX_SOURCE
)

COINGECKO_IDS = MappingProxyType({
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
    "XRP": "ripple",
    "DOGE": "dogecoin",
    "ADA": "cardano",
    "AVAX": "avalanche-2",
    "BNB": "binancecoin",
    "LTC": "litecoin",
    "SUI": "sui",
    "TAO": "bittensor",
    "PEPE": "pepe",
})


def is_whitelisted(symbol: str) -> bool:
    """Case-insensitive membership test against the ticker whitelist."""
    return (symbol or "").strip().upper() in TICKER_WHITELIST
