"""
Transcript Fetcher
==================

Get a transcript for a video through an ordered cascade of sources.

Stages (strict priority, the next runs only if the previous found nothing):
1. captions-api   - official captions via OAuth (captions_api.py)
2. transcript-api - youtube-transcript-api across English locale variants
3. page-scrape    - caption tracks from the public player page (page_scraper.py)
4. offline-stt    - audio download + local speech recognition (offline_stt.py)

The first non-empty, sufficiently long result is normalized, truncated to
the character budget and returned. Exhausting every stage is not an error:
the caller gets an empty TranscriptResult.
"""

import logging
from typing import Optional, Sequence, Tuple

from youtube_transcript_api import (
    YouTubeTranscriptApi,
    TranscriptsDisabled,
    NoTranscriptFound,
    CouldNotRetrieveTranscript,
    IpBlocked,
    RequestBlocked,
    VideoUnavailable,
)

from .auth_helper import load_credentials
from .captions_api import CaptionsApiSource
from .models import TranscriptResult
from .normalizer import normalize
from .offline_stt import OfflineSpeechSource, WhisperCppTranscriber, YtDlpAudioDownloader
from .page_scraper import PageScrapeSource
from .settings import Settings
from .sources import TranscriptSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 8000
MIN_USABLE_CHARS = 40

ENGLISH_VARIANTS: Tuple[str, ...] = ("en", "en-US", "en-GB", "en-CA", "en-AU", "en-IN", "a.en")


class TranscriptApiSource(TranscriptSource):
    """
    youtube-transcript-api, one English variant at a time.

    The library prefers manually created transcripts over auto-generated
    ones for a given code; asking per variant keeps the order explicit.
    """

    name = "transcript-api"

    def __init__(self, languages: Sequence[str] = ENGLISH_VARIANTS, api: Optional[YouTubeTranscriptApi] = None):
        self.languages = tuple(languages)
        self.api = api or YouTubeTranscriptApi()

    def _fetch(self, video_id: str) -> Optional[str]:
        for code in self.languages:
            try:
                fetched = self.api.fetch(video_id, languages=[code])
            except NoTranscriptFound:
                continue
            except TranscriptsDisabled:
                logger.info("Transcripts disabled for %s", video_id)
                return None
            except (RequestBlocked, IpBlocked, VideoUnavailable) as e:
                # same outcome for every locale
                logger.warning("transcript-api gave up on %s: %s", video_id, type(e).__name__)
                return None
            except CouldNotRetrieveTranscript as e:
                logger.warning("transcript-api could not retrieve %s (%s): %s", video_id, code, type(e).__name__)
                continue

            text = " ".join(s.text.strip() for s in fetched if s.text and s.text.strip())
            if text:
                logger.debug("transcript-api matched %s for %s", code, video_id)
                return text
        return None


class TranscriptFetcher:
    """Runs the cascade of transcript sources for one video at a time."""

    def __init__(
        self,
        sources: Sequence[TranscriptSource],
        max_chars: int = DEFAULT_MAX_CHARS,
        min_chars: int = MIN_USABLE_CHARS,
    ):
        self.sources = list(sources)
        self.max_chars = max_chars
        self.min_chars = min_chars

    def fetch_transcript(self, video_id: str) -> TranscriptResult:
        """
        Try each source in order.

        Args:
            video_id: YouTube video ID

        Returns:
            TranscriptResult with normalized, bounded text and the provenance
            tag of the winning stage, or an empty result
        """
        for source in self.sources:
            raw = source.fetch(video_id)
            if not raw:
                logger.debug("%s found nothing for %s", source.name, video_id)
                continue

            text = normalize(raw)
            if len(text) < self.min_chars:
                logger.info("%s returned only %d chars for %s; trying next source",
                            source.name, len(text), video_id)
                continue

            truncated = len(text) > self.max_chars
            if truncated:
                text = text[:self.max_chars]
            logger.info("✅ Transcript for %s via %s (%d chars%s)",
                        video_id, source.name, len(text), ", truncated" if truncated else "")
            return TranscriptResult(text=text, source=source.name, truncated=truncated)

        logger.info("No transcript available for %s from any source", video_id)
        return TranscriptResult.empty()


def build_default_sources(settings: Settings) -> Sequence[TranscriptSource]:
    """Assemble the four stages from settings; unconfigured stages skip themselves."""
    credentials = None
    try:
        credentials = load_credentials(
            settings.oauth_token_path,
            settings.google_client_id,
            settings.google_client_secret,
        )
    except (OSError, ValueError) as e:
        logger.warning("Could not read OAuth token file %s: %s", settings.oauth_token_path, e)

    downloader = transcriber = None
    if settings.whisper_model:
        downloader = YtDlpAudioDownloader(settings.ytdlp_bin)
        transcriber = WhisperCppTranscriber(settings.whisper_bin, settings.whisper_model)

    return [
        CaptionsApiSource(credentials),
        TranscriptApiSource(),
        PageScrapeSource(),
        OfflineSpeechSource(downloader, transcriber),
    ]


def fetch_transcript(video_id: str, settings: Settings) -> TranscriptResult:
    """Convenience wrapper: default cascade for a single video."""
    fetcher = TranscriptFetcher(build_default_sources(settings), max_chars=settings.transcript_max_chars)
    return fetcher.fetch_transcript(video_id)
