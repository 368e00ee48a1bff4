"""
Video Collector
===============

List the channel's most recent videos.

Features:
- RSS path: public channel feed, no API key (when CHANNEL_ID is set)
- Data API path: resolve @handle, then newest uploads via search order=date
- Optional playlist path: items of the channel playlist named PLAYLIST_NAME
- Deduplicated by video ID, newest first, capped at MAX_ITEMS
"""

import logging
from typing import Dict, List, Optional

import requests
from bs4 import BeautifulSoup
from dateutil import parser as dtparser

from .models import VideoRef
from .settings import Settings

logger = logging.getLogger(__name__)

BASE = "https://www.googleapis.com/youtube/v3"
RSS_URL = "https://www.youtube.com/feeds/videos.xml"


class YTError(RuntimeError):
    """YouTube API or feed error."""
    pass


def _get(path: str, api_key: Optional[str], **params) -> dict:
    """Make GET request to YouTube API."""
    if not api_key:
        raise YTError("Missing YT_API_KEY (or set CHANNEL_ID to use the RSS feed)")
    params["key"] = api_key
    try:
        r = requests.get(f"{BASE}/{path}", params=params, timeout=30)
    except requests.RequestException as e:
        raise YTError(f"YT API request failed: {e}") from e
    if r.status_code != 200:
        raise YTError(f"YT API error {r.status_code}: {r.text[:200]}")
    return r.json()


def _to_ref(video_id: str, title: str, description: str, published_at: str, url: Optional[str] = None) -> Optional[VideoRef]:
    if not video_id or not published_at:
        return None
    try:
        return VideoRef(
            video_id=video_id,
            title=title or video_id,
            description=description or "",
            published_at=published_at,
            url=url or VideoRef.watch_url(video_id),
        )
    except ValueError as e:
        logger.warning("Skipping video %s with bad metadata: %s", video_id, e)
        return None


# ---------------------------------------------------------------------------
# RSS
# ---------------------------------------------------------------------------

def parse_rss(xml_text: str) -> List[VideoRef]:
    """
    Parse a YouTube channel Atom feed.

    Args:
        xml_text: Feed body

    Returns:
        VideoRefs in feed order (the feed is already newest first)
    """
    soup = BeautifulSoup(xml_text, "html.parser")
    out: List[VideoRef] = []
    for entry in soup.find_all("entry"):
        def text_of(tag: str) -> str:
            node = entry.find(tag)
            return node.get_text(strip=True) if node else ""

        link = entry.find("link", attrs={"rel": "alternate"})
        ref = _to_ref(
            video_id=text_of("yt:videoid"),
            title=text_of("title"),
            description=text_of("media:description"),
            published_at=text_of("published"),
            url=link.get("href") if link else None,
        )
        if ref:
            out.append(ref)
    return out


def fetch_recent_videos_rss(channel_id: str, max_items: int) -> List[VideoRef]:
    try:
        r = requests.get(RSS_URL, params={"channel_id": channel_id}, timeout=30)
    except requests.RequestException as e:
        raise YTError(f"RSS fetch failed: {e}") from e
    if r.status_code != 200:
        raise YTError(f"RSS fetch failed: {r.status_code}")
    return parse_rss(r.text)[:max_items]


# ---------------------------------------------------------------------------
# Data API
# ---------------------------------------------------------------------------

def resolve_channel_id(handle: str, api_key: Optional[str]) -> str:
    """
    Resolve @handle to a channel ID.

    Tries channels.list forHandle first, then falls back to a channel search.
    """
    data = _get("channels", api_key, part="id", forHandle=handle)
    items = data.get("items") or []
    if items:
        return items[0]["id"]

    data = _get("search", api_key, part="snippet", q=handle, type="channel", maxResults=1)
    items = data.get("items") or []
    channel_id = items[0].get("snippet", {}).get("channelId") if items else None
    if not channel_id:
        raise YTError(f"Cannot resolve channel from handle: {handle}")
    return channel_id


def fetch_recent_videos_api(channel_id: str, api_key: Optional[str], max_items: int) -> List[VideoRef]:
    data = _get(
        "search", api_key,
        part="snippet",
        channelId=channel_id,
        order="date",
        type="video",
        maxResults=min(50, max_items),
    )
    out: List[VideoRef] = []
    for it in data.get("items", []):
        sn = it.get("snippet", {})
        ref = _to_ref(
            video_id=it.get("id", {}).get("videoId", ""),
            title=sn.get("title", ""),
            description=sn.get("description", ""),
            published_at=sn.get("publishedAt", ""),
        )
        if ref:
            out.append(ref)
    return out


def find_playlist_id(channel_id: str, name: str, api_key: Optional[str]) -> str:
    """Look up a channel playlist by (case-insensitive) title."""
    page_token = None
    while True:
        params: Dict[str, object] = {"part": "snippet", "channelId": channel_id, "maxResults": 50}
        if page_token:
            params["pageToken"] = page_token
        data = _get("playlists", api_key, **params)
        for it in data.get("items", []):
            if (it.get("snippet", {}).get("title") or "").strip().lower() == name.strip().lower():
                return it["id"]
        page_token = data.get("nextPageToken")
        if not page_token:
            raise YTError(f"Playlist not found on channel: {name}")


def fetch_playlist_videos(playlist_id: str, api_key: Optional[str], max_items: int) -> List[VideoRef]:
    out: List[VideoRef] = []
    page_token = None
    while len(out) < max_items:
        params: Dict[str, object] = {"part": "snippet", "playlistId": playlist_id, "maxResults": 50}
        if page_token:
            params["pageToken"] = page_token
        data = _get("playlistItems", api_key, **params)
        for it in data.get("items", []):
            sn = it.get("snippet", {})
            ref = _to_ref(
                video_id=sn.get("resourceId", {}).get("videoId", ""),
                title=sn.get("title", ""),
                description=sn.get("description", ""),
                published_at=sn.get("publishedAt", ""),
            )
            if ref:
                out.append(ref)
        page_token = data.get("nextPageToken")
        if not page_token:
            break
    return out


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def dedupe_newest_first(videos: List[VideoRef], limit: int) -> List[VideoRef]:
    """Drop repeated video IDs (first one wins), sort newest first, cap at limit."""
    seen = set()
    unique: List[VideoRef] = []
    for v in videos:
        if v.video_id in seen:
            continue
        seen.add(v.video_id)
        unique.append(v)
    unique.sort(key=lambda v: dtparser.isoparse(v.published_at), reverse=True)
    return unique[:limit]


def collect_videos(settings: Settings) -> List[VideoRef]:
    """
    List the most recent videos according to settings.

    Returns:
        Up to settings.max_items VideoRefs, newest first

    Raises:
        YTError: Feed/API failure, or no videos found
    """
    if settings.channel_id and not settings.playlist_name:
        logger.info("Listing videos via RSS for channel %s", settings.channel_id)
        videos = fetch_recent_videos_rss(settings.channel_id, settings.max_items)
    else:
        channel_id = settings.channel_id or resolve_channel_id(settings.channel_handle, settings.yt_api_key)
        if settings.playlist_name:
            logger.info("Listing playlist '%s' of channel %s", settings.playlist_name, channel_id)
            playlist_id = find_playlist_id(channel_id, settings.playlist_name, settings.yt_api_key)
            videos = fetch_playlist_videos(playlist_id, settings.yt_api_key, settings.max_items)
        else:
            logger.info("Listing videos via Data API for channel %s", channel_id)
            videos = fetch_recent_videos_api(channel_id, settings.yt_api_key, settings.max_items)

    videos = dedupe_newest_first(videos, settings.max_items)
    if not videos:
        raise YTError("No videos found")
    return videos
