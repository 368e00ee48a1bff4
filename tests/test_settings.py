"""
Tests for settings loading and the CLI entry point.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

import orchestrator
from yt_tldr.models import Summary, SummaryStatus, VideoRef
from yt_tldr.settings import ConfigError, Settings
from yt_tldr.video_collector import YTError


def test_missing_site_url(clean_env):
    with pytest.raises(ConfigError, match="SITE_URL"):
        Settings.from_env()


def test_defaults(clean_env):
    clean_env.setenv("SITE_URL", "https://example.com/")
    settings = Settings.from_env()

    assert settings.site_url == "https://example.com"
    assert settings.channel_handle == "@Syn.Trades"
    assert settings.max_items == 10
    assert settings.summarizer == "auto"
    assert settings.grounding_tolerance == 0.01
    assert settings.min_transcript_chars == 200
    assert settings.transcript_max_chars == 8000
    assert settings.oauth_token_path == Path(".yt-oauth.json")
    assert settings.whisper_model is None
    assert not settings.live_prices
    assert not settings.use_openai


def test_env_values_and_overrides(clean_env):
    clean_env.setenv("SITE_URL", "https://example.com")
    clean_env.setenv("MAX_ITEMS", "4")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    clean_env.setenv("LIVE_PRICES", "yes")
    clean_env.setenv("GROUNDING_TOLERANCE", "0.02")

    settings = Settings.from_env(max_items=2, summarizer=None)

    assert settings.max_items == 2
    assert settings.use_openai
    assert settings.live_prices
    assert settings.grounding_tolerance == 0.02


def test_free_summarizer_ignores_key(clean_env):
    clean_env.setenv("SITE_URL", "https://example.com")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    clean_env.setenv("SUMMARIZER", "FREE")
    assert not Settings.from_env().use_openai


def test_openai_requires_key(clean_env):
    clean_env.setenv("SITE_URL", "https://example.com")
    clean_env.setenv("SUMMARIZER", "openai")
    with pytest.raises(ConfigError, match="OPENAI_API_KEY"):
        Settings.from_env()


@pytest.mark.parametrize("name,value", [("MAX_ITEMS", "zero"), ("MAX_ITEMS", "0"), ("SUMMARIZER", "gpt")])
def test_invalid_values(clean_env, name, value):
    clean_env.setenv("SITE_URL", "https://example.com")
    clean_env.setenv(name, value)
    with pytest.raises(ConfigError):
        Settings.from_env()


def test_settings_are_frozen(settings):
    with pytest.raises(ValueError):
        settings.max_items = 3


def test_cli_exits_on_missing_config(clean_env):
    with patch("orchestrator.load_dotenv"), patch("orchestrator.run") as mock_run:
        assert orchestrator.main([]) == 1
    mock_run.assert_not_called()


def test_cli_exits_on_listing_failure(clean_env):
    clean_env.setenv("SITE_URL", "https://example.com")
    with patch("orchestrator.load_dotenv"), patch("orchestrator.run", side_effect=YTError("No videos found")):
        assert orchestrator.main(["--summarizer", "free"]) == 1


def test_cli_passes_flags(clean_env, tmp_path):
    clean_env.setenv("SITE_URL", "https://example.com")
    video = VideoRef(video_id="v", title="t", published_at="2025-03-05T16:00:00Z", url="https://youtu.be/v")
    results = [(video, Summary.placeholder(SummaryStatus.SKIPPED, "none"))]

    with patch("orchestrator.load_dotenv"), patch("orchestrator.run", return_value=results) as mock_run:
        code = orchestrator.main(["--output", str(tmp_path), "--limit", "3", "--summarizer", "free", "--live-prices"])

    assert code == 0
    settings = mock_run.call_args.args[0]
    assert settings.output_dir == tmp_path
    assert settings.max_items == 3
    assert settings.summarizer == "free"
    assert settings.live_prices
