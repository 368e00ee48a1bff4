"""
Captions API Source
===================

Stage 1 of the transcript cascade: official caption tracks through the
YouTube Data API, authenticated with the channel owner's OAuth token.

Features:
- Lists caption tracks for the video and picks English auto-generated first
- Downloads the track as SRT and strips sequence numbers and timestamps
- Skipped silently when no OAuth credentials are configured
"""

import logging
import re
from typing import Optional

from google.oauth2.credentials import Credentials

from .auth_helper import make_authenticated_request
from .sources import TranscriptSource, pick_caption_track

logger = logging.getLogger(__name__)

YT_API = "https://www.googleapis.com/youtube/v3"

_SRT_TIMESTAMP_RE = re.compile(r"^\d{1,2}:\d{2}:\d{2}[,.]\d{1,3}\s*-->\s*\d{1,2}:\d{2}:\d{2}[,.]\d{1,3}")
_SRT_INDEX_RE = re.compile(r"^\d+$")
_TAG_RE = re.compile(r"<[^>]+>")


def srt_to_text(srt: str) -> str:
    """
    Convert an SRT/VTT caption payload to plain text.

    Drops cue numbers, timestamp lines and inline markup, and skips a line
    that repeats the previous one (rolling auto-captions).
    """
    lines = []
    prev = None
    for raw in (srt or "").splitlines():
        line = raw.strip()
        if not line or line == "WEBVTT":
            continue
        if _SRT_INDEX_RE.match(line) or _SRT_TIMESTAMP_RE.match(line):
            continue
        line = _TAG_RE.sub("", line).strip()
        if not line or line == prev:
            continue
        lines.append(line)
        prev = line
    return " ".join(lines)


class CaptionsApiSource(TranscriptSource):
    """Official captions for videos on a channel we hold OAuth access to."""

    name = "captions-api"

    def __init__(self, credentials: Optional[Credentials]):
        self.credentials = credentials

    def _fetch(self, video_id: str) -> Optional[str]:
        if self.credentials is None:
            logger.debug("No OAuth credentials; skipping captions API for %s", video_id)
            return None

        listing = make_authenticated_request(
            f"{YT_API}/captions",
            {"part": "snippet", "videoId": video_id},
            self.credentials,
        ).json()
        tracks = listing.get("items", [])

        track = pick_caption_track(
            tracks,
            language_of=lambda t: t.get("snippet", {}).get("language", ""),
            is_auto=lambda t: t.get("snippet", {}).get("trackKind", "").lower() == "asr",
        )
        if track is None:
            logger.info("No caption tracks listed for %s", video_id)
            return None

        logger.debug("Downloading caption track %s (%s) for %s",
                     track["id"], track.get("snippet", {}).get("language"), video_id)
        r = make_authenticated_request(
            f"{YT_API}/captions/{track['id']}",
            {"tfmt": "srt"},
            self.credentials,
        )
        return srt_to_text(r.text)
