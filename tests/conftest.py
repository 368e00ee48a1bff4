"""
Configuration for pytest tests.
"""

import pytest

from yt_tldr.models import VideoRef
from yt_tldr.settings import Settings


ENV_VARS = (
    "SITE_URL", "OUTPUT_DIR", "CHANNEL_ID", "CHANNEL_HANDLE", "PLAYLIST_NAME", "YT_API_KEY",
    "MAX_ITEMS", "SITE_TZ", "SUMMARIZER", "OPENAI_API_KEY", "OPENAI_MODEL",
    "TRANSCRIPT_MAX_CHARS", "MIN_TRANSCRIPT_CHARS", "GROUNDING_TOLERANCE", "LIVE_PRICES",
    "YT_OAUTH_TOKEN_PATH", "GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET",
    "YTDLP_BIN", "WHISPER_BIN", "WHISPER_MODEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every setting from the environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def settings(tmp_path):
    """Free-summarizer settings writing into a temp directory."""
    return Settings(
        site_url="https://example.com",
        output_dir=tmp_path,
        summarizer="free",
        oauth_token_path=tmp_path / "missing-token.json",
    )


@pytest.fixture
def video():
    return VideoRef(
        video_id="abc123def45",
        title="BTC and SOL levels for the week",
        description="Weekly outlook. Levels to watch on BTC and SOL. Not financial advice.",
        published_at="2025-03-04T15:30:00Z",
        url="https://youtu.be/abc123def45",
    )


@pytest.fixture
def market_transcript():
    """A realistic, fully punctuated transcript with price levels."""
    return (
        "Good morning everyone, welcome back to the channel. "
        "ETH is holding the 3200 level as support after yesterday's flush. "
        "Buyers stepped in right at 3150 and that wick was bought up fast. "
        "If ETH loses 3150 on the daily close, the next support sits near 2900. "
        "SOL broke above 150 with volume confirmation this morning. "
        "The next resistance for SOL is around 165 where it got rejected last month. "
        "Volume has been declining all week across the whole market. "
        "The dollar index is pushing higher and that usually weighs on risk assets. "
        "My plan is to wait for a reclaim of 3400 before adding any size. "
        "That's it for today, thanks for watching."
    )
