"""
Settings
========

Run configuration pulled from the environment (after load_dotenv()).

Settings are built once per run and passed by reference; they are never
mutated afterwards.
"""

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .numeric import DEFAULT_TOLERANCE


class ConfigError(RuntimeError):
    """Required configuration is missing or invalid."""
    pass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Everything a build run needs to know."""
    model_config = ConfigDict(frozen=True)

    # Site output
    site_url: str
    output_dir: Path = Path(".")
    site_tz: str = "America/Los_Angeles"

    # Video listing
    channel_id: Optional[str] = None
    channel_handle: str = "@Syn.Trades"
    playlist_name: Optional[str] = None
    yt_api_key: Optional[str] = None
    max_items: int = Field(default=10, ge=1)

    # Summarization
    summarizer: Literal["auto", "free", "openai"] = "auto"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    transcript_max_chars: int = 8000
    min_transcript_chars: int = 200
    grounding_tolerance: float = DEFAULT_TOLERANCE
    live_prices: bool = False

    # Transcript cascade
    oauth_token_path: Path = Path(".yt-oauth.json")
    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    ytdlp_bin: str = "yt-dlp"
    whisper_bin: str = "whisper-cli"
    whisper_model: Optional[Path] = None

    @property
    def use_openai(self) -> bool:
        if self.summarizer == "openai":
            return True
        return self.summarizer == "auto" and bool(self.openai_api_key)

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            **overrides: Values that win over the environment (CLI flags);
                None values are ignored

        Raises:
            ConfigError: SITE_URL missing, or OPENAI_API_KEY missing while
                SUMMARIZER=openai
        """
        values = {
            "site_url": (os.getenv("SITE_URL") or "").rstrip("/"),
            "output_dir": os.getenv("OUTPUT_DIR") or ".",
            "site_tz": os.getenv("SITE_TZ") or "America/Los_Angeles",
            "channel_id": os.getenv("CHANNEL_ID") or None,
            "channel_handle": os.getenv("CHANNEL_HANDLE") or "@Syn.Trades",
            "playlist_name": os.getenv("PLAYLIST_NAME") or None,
            "yt_api_key": os.getenv("YT_API_KEY") or None,
            "max_items": os.getenv("MAX_ITEMS") or 10,
            "summarizer": (os.getenv("SUMMARIZER") or "auto").lower(),
            "openai_api_key": os.getenv("OPENAI_API_KEY") or None,
            "openai_model": os.getenv("OPENAI_MODEL") or "gpt-4o-mini",
            "transcript_max_chars": os.getenv("TRANSCRIPT_MAX_CHARS") or 8000,
            "min_transcript_chars": os.getenv("MIN_TRANSCRIPT_CHARS") or 200,
            "grounding_tolerance": os.getenv("GROUNDING_TOLERANCE") or DEFAULT_TOLERANCE,
            "live_prices": _env_bool("LIVE_PRICES"),
            "oauth_token_path": os.getenv("YT_OAUTH_TOKEN_PATH") or ".yt-oauth.json",
            "google_client_id": os.getenv("GOOGLE_CLIENT_ID") or None,
            "google_client_secret": os.getenv("GOOGLE_CLIENT_SECRET") or None,
            "ytdlp_bin": os.getenv("YTDLP_BIN") or "yt-dlp",
            "whisper_bin": os.getenv("WHISPER_BIN") or "whisper-cli",
            "whisper_model": os.getenv("WHISPER_MODEL") or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        if not values["site_url"]:
            raise ConfigError("Missing env: SITE_URL")
        if values["summarizer"] == "openai" and not values["openai_api_key"]:
            raise ConfigError("SUMMARIZER=openai requires OPENAI_API_KEY")

        try:
            return cls(**values)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
