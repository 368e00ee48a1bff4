"""
YouTube TL;DR Core Modules
==========================

Transcript retrieval, text normalization, numeric grounding and
summarization for a trading channel's video summaries, plus the listing and
site-writing collaborators around them.
"""

__version__ = "1.0.0"

from .settings import Settings, ConfigError
from .models import (
    VideoRef,
    TranscriptResult,
    KeyLevel,
    TradeSetup,
    LongSummary,
    Summary,
    SummaryStatus,
)
from .normalizer import normalize
from .numeric import NumericToken, parse_numeric_tokens, token_matches, appears_in
from .transcript_fetcher import TranscriptFetcher, fetch_transcript
from .extractive import summarize_free
from .summarizer import summarize_with_openai
from .grounding import ground
from .price_filter import filter_implausible_levels
from .video_collector import YTError, collect_videos
from .site_writer import write_site
from .pipeline import process_video, run

__all__ = [
    "Settings",
    "ConfigError",
    "VideoRef",
    "TranscriptResult",
    "KeyLevel",
    "TradeSetup",
    "LongSummary",
    "Summary",
    "SummaryStatus",
    "normalize",
    "NumericToken",
    "parse_numeric_tokens",
    "token_matches",
    "appears_in",
    "TranscriptFetcher",
    "fetch_transcript",
    "summarize_free",
    "summarize_with_openai",
    "ground",
    "filter_implausible_levels",
    "YTError",
    "collect_videos",
    "write_site",
    "process_video",
    "run",
]
