"""
Site Writer
===========

Write the static artifacts the website reads.

Features:
- One HTML page per video: summaries/<date>-<slug>.html
- latest.json for the newest video
- yt-index.json with every summarized video ({"items": [...]})
- Dates rendered as YYYY-MM-DD in the site timezone
- Atomic writes (temp file, fsync, replace) under a directory lock
"""

import html
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Sequence, Tuple
from zoneinfo import ZoneInfo

from dateutil import parser as dtparser
from filelock import FileLock
from slugify import slugify

from .models import LongSummary, Summary, VideoRef

logger = logging.getLogger(__name__)

SUMMARIES_DIR = "summaries"
LATEST_FILE = "latest.json"
INDEX_FILE = "yt-index.json"
LOCK_FILE = ".yt-tldr.lock"


def local_date(published_at: str, tz: str = "America/Los_Angeles") -> str:
    """Publish timestamp as YYYY-MM-DD in the given timezone."""
    dt = dtparser.isoparse(published_at)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo("UTC"))
    return dt.astimezone(ZoneInfo(tz)).strftime("%Y-%m-%d")


def page_slug(video: VideoRef, date: str) -> str:
    safe = slugify(video.title)[:80].strip("-") or video.video_id
    return f"{date}-{safe}"


def _atomic_write_text(target: Path, text: str) -> None:
    """
    Write atomically: write to temp, fsync, move.
    Prevents partial writes on crash.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    temp = target.with_suffix(target.suffix + ".tmp")
    with temp.open("w", encoding="utf-8") as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
    os.replace(temp, target)


def _atomic_write_json(target: Path, obj: dict) -> None:
    _atomic_write_text(target, json.dumps(obj, ensure_ascii=False, indent=2))


def _li(items: Sequence[str]) -> str:
    return "".join(f"<li>{html.escape(i)}</li>" for i in items)


def _long_html(long: LongSummary) -> str:
    e = html.escape
    parts: List[str] = []
    if long.context:
        parts.append(f"<h3>Context</h3><p>{e(long.context)}</p>")
    if long.key_levels:
        rows = "".join(
            f"<tr><td>{e(k.asset)}</td><td>{e(k.level)}</td><td>{e(k.role)}</td><td>{e(k.notes)}</td></tr>"
            for k in long.key_levels
        )
        parts.append(
            "<h3>Key levels</h3><table><tr><th>Asset</th><th>Level</th><th>Role</th><th>Notes</th></tr>"
            f"{rows}</table>"
        )
    if long.setups:
        items = []
        for s in long.setups:
            targets = ", ".join(s.targets)
            items.append(
                f"<li><strong>{e(s.name or 'Setup')}</strong>: {e(s.thesis)}"
                f"<br>Trigger: {e(s.trigger)} &middot; Invalidation: {e(s.invalidation)}"
                + (f" &middot; Targets: {e(targets)}" if targets else "")
                + "</li>"
            )
        parts.append(f"<h3>Setups</h3><ul>{''.join(items)}</ul>")
    for heading, values in (("Takeaways", long.takeaways), ("Catalysts", long.catalysts),
                            ("Notable details", long.notable_details)):
        if values:
            parts.append(f"<h3>{heading}</h3><ul>{_li(values)}</ul>")
    if long.note:
        parts.append(f'<p class="note">{e(long.note)}</p>')
    return "\n".join(parts)


def render_page(video: VideoRef, summary: Summary, date: str, site_url: str) -> str:
    """Standalone HTML page for one summary. All text is escaped."""
    e = html.escape
    title = e(video.title)
    meta_desc = e(" ".join(summary.bullets)[:160])
    vid = e(video.video_id)
    return f"""<!doctype html><html lang="en"><head>
<meta charset="utf-8"><title>{title} - Video Summary</title>
<meta name="description" content="{meta_desc}">
<meta property="og:title" content="{title} - Video Summary">
<meta property="og:description" content="{meta_desc}">
<meta property="og:image" content="https://i.ytimg.com/vi/{vid}/hqdefault.jpg">
<meta name="viewport" content="width=device-width, initial-scale=1">
<link rel="canonical" href="{e(site_url)}">
</head><body><div class="container">
<a class="btn" href="/summaries.html">&larr; All summaries</a>
<article class="card">
<div class="thumb"><iframe src="https://www.youtube.com/embed/{vid}?rel=0&amp;modestbranding=1" title="{title}" allowfullscreen loading="lazy"></iframe></div>
<h1>{title}</h1>
<p class="meta">Published: {e(date)} &middot; <a class="btn" href="{e(video.url)}" target="_blank" rel="noopener">Watch on YouTube</a></p>
<h3>TL;DR</h3><ul>{_li(summary.bullets)}</ul>
{_long_html(summary.long)}
</article></div></body></html>
"""


def index_item(video: VideoRef, summary: Summary, date: str, permalink: str) -> Dict:
    return {
        "title": video.title,
        "datePT": date,
        "url": video.url,
        "videoId": video.video_id,
        "bullets": list(summary.bullets),
        "permalink": permalink,
        "status": summary.status.value,
        "source": summary.transcript_source,
        "long": summary.long.model_dump(),
    }


def write_site(
    output_dir: Path,
    results: Sequence[Tuple[VideoRef, Summary]],
    site_url: str,
    tz: str = "America/Los_Angeles",
) -> Dict[str, Path]:
    """
    Write summary pages, latest.json and yt-index.json.

    Args:
        output_dir: Site root
        results: (video, final summary) pairs, newest first
        site_url: Public base URL, used for canonical links
        tz: Timezone for rendered dates

    Returns:
        Dict with the paths of latest.json and yt-index.json
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    pages_dir = output_dir / SUMMARIES_DIR

    items: List[Dict] = []
    with FileLock(str(output_dir / LOCK_FILE), timeout=30):
        for video, summary in results:
            date = local_date(video.published_at, tz)
            slug = page_slug(video, date)
            permalink = f"{SUMMARIES_DIR}/{slug}.html"
            page = render_page(video, summary, date, f"{site_url.rstrip('/')}/{permalink}")
            _atomic_write_text(pages_dir / f"{slug}.html", page)
            items.append(index_item(video, summary, date, permalink))

        latest_path = output_dir / LATEST_FILE
        index_path = output_dir / INDEX_FILE
        if items:
            newest = items[0]
            _atomic_write_json(latest_path, {k: newest[k] for k in ("title", "datePT", "url", "videoId", "bullets")})
        _atomic_write_json(index_path, {"items": items})

    logger.info("Wrote %s, %s and %d summary pages to %s", LATEST_FILE, INDEX_FILE, len(items), output_dir)
    return {"latest": latest_path, "index": index_path}
