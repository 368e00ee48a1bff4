"""
Price Plausibility Filter
=========================

Optional sanity pass over a summary's key levels using live spot prices.

A level is kept only when it sits within two orders of magnitude of the
asset's spot price (spot/100 < level < spot*100). This catches unit errors
and transcription garbage such as "4" for an asset trading at 40000; it is
not a range check.

Price lookups are best-effort: any failure means no filtering.
"""

import logging
from typing import Dict, Iterable, Optional

import requests

from .models import Summary
from .numeric import parse_numeric_tokens
from .tickers import COINGECKO_IDS

logger = logging.getLogger(__name__)

COINGECKO_SIMPLE_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"
MAGNITUDE_BOUND = 100.0


class PriceService:
    """Spot prices in USD keyed by ticker symbol."""

    def spot_prices(self, symbols: Iterable[str]) -> Dict[str, float]:
        raise NotImplementedError


class CoinGeckoPriceService(PriceService):
    """CoinGecko simple/price lookup; symbols without a known id are ignored."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = 10):
        self.session = session or requests.Session()
        self.timeout = timeout

    def spot_prices(self, symbols: Iterable[str]) -> Dict[str, float]:
        ids = {COINGECKO_IDS[s]: s for s in set(symbols) if s in COINGECKO_IDS}
        if not ids:
            return {}
        try:
            r = self.session.get(
                COINGECKO_SIMPLE_PRICE_URL,
                params={"ids": ",".join(sorted(ids)), "vs_currencies": "usd"},
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Live price lookup failed: %s: %s", type(e).__name__, e)
            return {}

        prices: Dict[str, float] = {}
        for coin_id, symbol in ids.items():
            usd = (data.get(coin_id) or {}).get("usd")
            if isinstance(usd, (int, float)) and usd > 0:
                prices[symbol] = float(usd)
        return prices


def level_value(level: str) -> Optional[float]:
    """First number in a level string ("$65,000", "64.5k"), or None."""
    tokens = [t for t in parse_numeric_tokens(level) if not t.is_percent]
    return tokens[0].value if tokens else None


def is_plausible(level: float, spot: float) -> bool:
    return spot / MAGNITUDE_BOUND < level < spot * MAGNITUDE_BOUND


def filter_implausible_levels(summary: Summary, price_service: Optional[PriceService]) -> Summary:
    """
    Drop key levels that are wildly off the asset's live price.

    Args:
        summary: Summary after grounding
        price_service: Live price lookup; None disables the filter

    Returns:
        Summary with implausible key levels removed (the same object when
        nothing was dropped or no prices were available)
    """
    if price_service is None or not summary.long.key_levels:
        return summary

    symbols = {kl.asset for kl in summary.long.key_levels if kl.asset}
    if not symbols:
        return summary

    try:
        prices = price_service.spot_prices(symbols)
    except Exception as e:
        logger.warning("Price service error, skipping plausibility filter: %s: %s", type(e).__name__, e)
        return summary
    if not prices:
        return summary

    kept = []
    for kl in summary.long.key_levels:
        spot = prices.get(kl.asset)
        value = level_value(kl.level)
        if spot is None or value is None or is_plausible(value, spot):
            kept.append(kl)
        else:
            logger.info("Dropping implausible %s level %s (spot %.2f)", kl.asset, kl.level, spot)

    if len(kept) == len(summary.long.key_levels):
        return summary
    long = summary.long.model_copy(update={"key_levels": kept})
    return summary.model_copy(update={"long": long})
