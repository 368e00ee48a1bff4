"""
Transcript Sources
==================

Common interface for the cascade stages plus the caption-track preference
shared by the captions API and the page scrape.
"""

import logging
from typing import Callable, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TranscriptSource:
    """
    One stage of the transcript cascade.

    Subclasses implement _fetch(); fetch() never raises, any failure is
    logged and reported as "nothing found" so the cascade moves on.
    """

    name = "source"

    def _fetch(self, video_id: str) -> Optional[str]:
        raise NotImplementedError

    def fetch(self, video_id: str) -> Optional[str]:
        try:
            return self._fetch(video_id)
        except Exception as e:
            logger.warning("%s failed for %s: %s: %s", self.name, video_id, type(e).__name__, e)
            return None


def _is_english(code: str) -> bool:
    code = (code or "").lower()
    return code == "en" or code.startswith("en-") or code.startswith("en_")


def pick_caption_track(
    tracks: Sequence[T],
    language_of: Callable[[T], str],
    is_auto: Callable[[T], bool],
) -> Optional[T]:
    """
    Choose the best caption track.

    Preference: English auto-generated, any English, any auto-generated,
    then the first track.
    """
    if not tracks:
        return None
    for t in tracks:
        if _is_english(language_of(t)) and is_auto(t):
            return t
    for t in tracks:
        if _is_english(language_of(t)):
            return t
    for t in tracks:
        if is_auto(t):
            return t
    return tracks[0]
