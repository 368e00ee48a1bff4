"""
Data Models
===========

Pydantic models passed between the enumerator, the transcript cascade, the
summarizers and the site writer.

- VideoRef: one video from the channel listing (immutable, keyed by video_id)
- TranscriptResult: cascade output; empty text means "no transcript"
- Summary: short bullets + LongSummary, with a status marker for the
  degenerate skipped / unavailable / error variants
"""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PLACEHOLDER_BULLET = "Summary pending."
MAX_BULLETS = 3
MAX_BULLET_WORDS = 60


class VideoRef(BaseModel):
    """Metadata for one channel video."""
    model_config = ConfigDict(frozen=True)

    video_id: str
    title: str
    description: str = ""
    published_at: str  # ISO 8601
    url: str

    @field_validator("published_at")
    @classmethod
    def validate_iso(cls, v: str):
        """Ensure ISO8601-ish string (lenient)."""
        try:
            datetime.fromisoformat(v.replace("Z", "+00:00"))
        except Exception:
            raise ValueError("published_at must be ISO 8601")
        return v

    @classmethod
    def watch_url(cls, video_id: str) -> str:
        return f"https://youtu.be/{video_id}"


class TranscriptResult(BaseModel):
    """Plain transcript text and the cascade stage that produced it."""
    model_config = ConfigDict(frozen=True)

    text: str = ""
    source: Optional[str] = None  # "captions-api" | "transcript-api" | "page-scrape" | "offline-stt"
    truncated: bool = False

    @property
    def available(self) -> bool:
        return bool(self.text)

    @classmethod
    def empty(cls) -> "TranscriptResult":
        return cls()


class KeyLevel(BaseModel):
    asset: str = ""
    level: str = ""
    role: Literal["support", "resistance", "pivot", "unspecified"] = "unspecified"
    notes: str = ""

    @field_validator("role", mode="before")
    @classmethod
    def coerce_role(cls, v):
        v = (v or "").strip().lower() if isinstance(v, str) else v
        return v if v in ("support", "resistance", "pivot") else "unspecified"


class TradeSetup(BaseModel):
    name: str = ""
    thesis: str = ""
    trigger: str = ""
    invalidation: str = ""
    targets: List[str] = Field(default_factory=list)


class LongSummary(BaseModel):
    """Detailed breakdown rendered below the TL;DR bullets."""
    context: str = ""
    key_levels: List[KeyLevel] = Field(default_factory=list)
    setups: List[TradeSetup] = Field(default_factory=list)
    takeaways: List[str] = Field(default_factory=list)
    catalysts: List[str] = Field(default_factory=list)
    notable_details: List[str] = Field(default_factory=list)
    note: Optional[str] = None


class SummaryStatus(str, Enum):
    """Why a Summary looks the way it does."""
    OK = "ok"
    SKIPPED = "skipped"          # no transcript from any cascade stage
    UNAVAILABLE = "unavailable"  # transcript too short for the paid path
    ERROR = "error"              # text-generation or processing failure


class Summary(BaseModel):
    """Final per-video summary handed to the site writer."""
    bullets: List[str] = Field(default_factory=list)
    long: LongSummary = Field(default_factory=LongSummary)
    status: SummaryStatus = SummaryStatus.OK
    transcript_source: Optional[str] = None
    method: Optional[str] = None  # "extractive" | "openai"

    @classmethod
    def placeholder(cls, status: SummaryStatus, reason: str) -> "Summary":
        """Terminal summary for videos that never reach the grounding filter."""
        return cls(
            bullets=[PLACEHOLDER_BULLET],
            long=LongSummary(context=reason),
            status=status,
        )


def clip_bullets(bullets: List[str], max_items: int = MAX_BULLETS, max_words: int = MAX_BULLET_WORDS) -> List[str]:
    """Keep at most `max_items` non-empty bullets and `max_words` words in total."""
    out: List[str] = []
    budget = max_words
    for b in bullets:
        b = (b or "").strip()
        if not b or len(out) >= max_items or budget <= 0:
            continue
        words = b.split()
        if len(words) > budget:
            b = " ".join(words[:budget]).rstrip(",;:.") + "..."
            words = words[:budget]
        out.append(b)
        budget -= len(words)
    return out
