"""
Page Scrape Source
==================

Stage 3 of the transcript cascade: read caption tracks straight from the
public player page, no API key or library involved.

Features:
- Embed page first, full watch page as fallback
- Browser-like headers plus a consent cookie to dodge the EU interstitial
- Rejects consent / "unusual traffic" challenge pages
- Balanced-brace extraction of the player-response JSON (arbitrarily nested,
  so a fixed regex cannot delimit it)
- json3 timed text first, XML timed text as fallback
"""

import html
import json
import logging
from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from .sources import TranscriptSource, pick_caption_track

logger = logging.getLogger(__name__)

EMBED_URL = "https://www.youtube.com/embed/{video_id}?hl=en"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}&hl=en"

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}
CONSENT_COOKIES = {"CONSENT": "YES+cb", "SOCS": "CAI"}

PLAYER_RESPONSE_MARKERS = ("ytInitialPlayerResponse", '"playerResponse":')
EMBEDDED_RESPONSE_MARKER = '"embedded_player_response":"'

_CHALLENGE_URL_SIGNS = ("consent.youtube.com", "google.com/sorry")
_CHALLENGE_PAGE_SIGNS = (
    'action="https://consent.youtube.com',
    "before you continue to youtube",
    "unusual traffic from your computer network",
    "confirm you're not a bot",
)


def is_challenge_page(html_text: str, final_url: str = "") -> bool:
    """Consent interstitial or bot check instead of a player page."""
    if any(sign in (final_url or "").lower() for sign in _CHALLENGE_URL_SIGNS):
        return True
    head = (html_text or "")[:50000].lower()
    return any(sign in head for sign in _CHALLENGE_PAGE_SIGNS)


def extract_json_object(text: str, marker: str) -> Optional[Dict[str, Any]]:
    """
    Find `marker` in text and parse the JSON object that follows it.

    Scans from the first "{" after the marker, counting braces outside of
    string literals, until the depth returns to zero.

    Returns:
        Parsed dict, or None when the marker or a balanced object is missing
    """
    idx = text.find(marker)
    if idx < 0:
        return None
    start = text.find("{", idx + len(marker))
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                try:
                    return json.loads(text[start:i + 1])
                except json.JSONDecodeError:
                    logger.debug("Balanced object after %r is not valid JSON", marker)
                    return None
    return None


def _extract_embedded_string(text: str) -> Optional[Dict[str, Any]]:
    """The embed page carries the player response as a JSON-encoded string."""
    idx = text.find(EMBEDDED_RESPONSE_MARKER)
    if idx < 0:
        return None
    start = idx + len(EMBEDDED_RESPONSE_MARKER) - 1
    escaped = False
    for i in range(start + 1, len(text)):
        ch = text[i]
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            try:
                return json.loads(json.loads(text[start:i + 1]))
            except (json.JSONDecodeError, TypeError):
                return None
    return None


def extract_player_response(page: str) -> Optional[Dict[str, Any]]:
    """Locate the player-response JSON in a watch or embed page."""
    for marker in PLAYER_RESPONSE_MARKERS:
        data = extract_json_object(page, marker)
        if data and "captions" in data:
            return data
    return _extract_embedded_string(page)


def caption_tracks(player_response: Dict[str, Any]) -> List[Dict[str, Any]]:
    renderer = (player_response.get("captions") or {}).get("playerCaptionsTracklistRenderer") or {}
    return [t for t in renderer.get("captionTracks") or [] if t.get("baseUrl")]


def json3_to_text(payload: Dict[str, Any]) -> str:
    """Join the utf8 segments of a json3 timed-text payload."""
    parts = []
    for event in payload.get("events") or []:
        for seg in event.get("segs") or []:
            piece = (seg.get("utf8") or "").replace("\n", " ").strip()
            if piece:
                parts.append(piece)
    return " ".join(parts)


def timedtext_xml_to_text(xml: str) -> str:
    """Strip the <text>/<p> markup of an XML timed-text payload."""
    soup = BeautifulSoup(xml, "html.parser")
    nodes = soup.find_all(["text", "p"])
    parts = []
    for node in nodes:
        piece = html.unescape(node.get_text(" ", strip=True))
        if piece:
            parts.append(piece)
    return " ".join(parts)


class PageScrapeSource(TranscriptSource):
    """Caption tracks scraped from the public player page."""

    name = "page-scrape"

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = 20):
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, url: str) -> requests.Response:
        r = self.session.get(url, headers=BROWSER_HEADERS, cookies=CONSENT_COOKIES, timeout=self.timeout)
        r.raise_for_status()
        return r

    def _player_response(self, video_id: str) -> Optional[Dict[str, Any]]:
        for template in (EMBED_URL, WATCH_URL):
            url = template.format(video_id=video_id)
            logger.debug("Scraping %s", url)
            try:
                r = self._get(url)
            except requests.RequestException as e:
                logger.warning("Page fetch failed for %s: %s", url, e)
                continue
            if is_challenge_page(r.text, r.url):
                logger.warning("Challenge page served for %s", url)
                continue
            data = extract_player_response(r.text)
            if data and caption_tracks(data):
                return data
        return None

    def _download_track(self, base_url: str) -> str:
        sep = "&" if "?" in base_url else "?"
        try:
            r = self._get(f"{base_url}{sep}fmt=json3")
            text = json3_to_text(r.json())
            if text:
                return text
        except (requests.RequestException, ValueError) as e:
            logger.debug("json3 timed text failed (%s); trying XML", e)

        r = self._get(base_url)
        return timedtext_xml_to_text(r.text)

    def _fetch(self, video_id: str) -> Optional[str]:
        data = self._player_response(video_id)
        if data is None:
            return None
        track = pick_caption_track(
            caption_tracks(data),
            language_of=lambda t: t.get("languageCode", ""),
            is_auto=lambda t: t.get("kind") == "asr",
        )
        if track is None:
            return None
        logger.debug("Using scraped track %s/%s for %s",
                     track.get("languageCode"), track.get("kind", "standard"), video_id)
        return self._download_track(track["baseUrl"])
