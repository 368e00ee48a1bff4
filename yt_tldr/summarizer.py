"""
Summarizer
==========

LLM-based transcript summarization with a strict prompt contract.

Features:
- One JSON-mode chat completion per video (OpenAI via LangChain)
- Prompt restricts tickers to the whitelist and numbers to the transcript
- Defensive parsing: malformed output degrades to an empty payload
- Every free-text field normalized; non-whitelisted assets blanked
- Result passes through the grounding filter
- Any request/parse failure yields an "error" Summary instead of raising
"""

import json
import logging
import re
from typing import Any, List, Optional

from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, Field, ValidationError

from .grounding import ground
from .models import PLACEHOLDER_BULLET, LongSummary, Summary, SummaryStatus, VideoRef, clip_bullets
from .normalizer import normalize
from .numeric import DEFAULT_TOLERANCE
from .tickers import TICKER_WHITELIST

logger = logging.getLogger(__name__)

MIN_TRANSCRIPT_CHARS = 200
DEFAULT_MODEL = "gpt-4o-mini"

SYSTEM_PROMPT = """You are a concise trading note-taker for a website that publishes video summaries.
Rules:
1. Only use tickers from this list: {tickers}. If an asset is not on the list, leave "asset" empty.
2. Write tickers exactly in that casing.
3. Only include numbers (prices, levels, percentages, targets) that appear in the transcript. Never compute or round new ones.
4. If something is uncertain or not stated, write "unspecified" instead of inventing a value.
5. Be objective. Focus on structure: levels and ranges, holds and origins, momentum shifts, invalidation. No hype, no advice.
Return one JSON object with exactly these keys:
{{"bullets": ["2-3 bullets, 60 words total at most"],
 "long": {{"context": "one paragraph",
   "key_levels": [{{"asset": "", "level": "", "role": "support|resistance|pivot|unspecified", "notes": ""}}],
   "setups": [{{"name": "", "thesis": "", "trigger": "", "invalidation": "", "targets": [""]}}],
   "takeaways": [""], "catalysts": [""], "notable_details": [""]}}}}"""

USER_PROMPT = """Title: {title}
Description: {description}

Transcript:
{transcript}"""

SUMMARY_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SYSTEM_PROMPT),
    ("user", USER_PROMPT),
])


class LLMPayload(BaseModel):
    """Expected shape of the model's JSON answer."""
    bullets: List[str] = Field(default_factory=list)
    long: LongSummary = Field(default_factory=LongSummary)


def _stringify(value: Any) -> Any:
    """Models like to emit bare numbers for levels; the schema wants strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return [_stringify(v) for v in value]
    if isinstance(value, dict):
        return {k: _stringify(v) for k, v in value.items()}
    return value


def parse_payload(content: Optional[str]) -> LLMPayload:
    """
    Parse the model output, degrading to an empty payload on any problem.

    Accepts a bare JSON object or one wrapped in a ``` fence.
    """
    text = (content or "").strip()
    fenced = re.search(r"```(?:json)?\s*(.*?)```", text, re.DOTALL)
    if fenced:
        text = fenced.group(1)
    try:
        data = json.loads(text) if text else {}
    except json.JSONDecodeError:
        logger.warning("Model returned malformed JSON; using empty payload")
        data = {}
    if not isinstance(data, dict):
        data = {}
    try:
        return LLMPayload.model_validate(_stringify(data))
    except ValidationError as e:
        logger.warning("Model JSON did not match schema (%d errors); using empty payload", e.error_count())
        return LLMPayload()


def _normalize_long(long: LongSummary) -> LongSummary:
    key_levels = []
    for kl in long.key_levels:
        asset = normalize(kl.asset)
        key_levels.append(kl.model_copy(update={
            "asset": asset if asset in TICKER_WHITELIST else "",
            "level": normalize(kl.level),
            "notes": normalize(kl.notes),
        }))
    setups = [
        s.model_copy(update={
            "name": normalize(s.name),
            "thesis": normalize(s.thesis),
            "trigger": normalize(s.trigger),
            "invalidation": normalize(s.invalidation),
            "targets": [normalize(t) for t in s.targets if normalize(t)],
        })
        for s in long.setups
    ]
    return LongSummary(
        context=normalize(long.context),
        key_levels=key_levels,
        setups=setups,
        takeaways=[t for t in map(normalize, long.takeaways) if t],
        catalysts=[c for c in map(normalize, long.catalysts) if c],
        notable_details=[d for d in map(normalize, long.notable_details) if d],
    )


def description_bullets(description: str) -> List[str]:
    """First sentences of the video description, used when the model gives no bullets."""
    parts = [normalize(s) for s in re.split(r"\.\s+", description or "")]
    return [p for p in parts if p][:3]


def build_llm(api_key: Optional[str], model: str = DEFAULT_MODEL, temperature: float = 0.2) -> ChatOpenAI:
    return ChatOpenAI(model=model, temperature=temperature, api_key=api_key)


def summarize_with_openai(
    video: VideoRef,
    transcript: str,
    llm: Optional[ChatOpenAI] = None,
    api_key: Optional[str] = None,
    model: str = DEFAULT_MODEL,
    min_chars: int = MIN_TRANSCRIPT_CHARS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> Summary:
    """
    Summarize one video's transcript with the text-generation service.

    Args:
        video: Video metadata (title and description go into the prompt)
        transcript: Normalized transcript text
        llm: Chat model to use (built from api_key/model when omitted)
        api_key: OpenAI API key
        model: OpenAI model name
        min_chars: Shorter transcripts short-circuit without any request
        tolerance: Grounding tolerance

    Returns:
        Grounded Summary, or a terminal "unavailable" / "error" Summary
    """
    if len((transcript or "").strip()) < min_chars:
        return Summary.placeholder(SummaryStatus.UNAVAILABLE, "Transcript unavailable for this video.")

    try:
        llm = llm or build_llm(api_key, model)
        chain = SUMMARY_PROMPT | llm.bind(response_format={"type": "json_object"})
        result = chain.invoke({
            "tickers": ", ".join(sorted(TICKER_WHITELIST)),
            "title": video.title,
            "description": (video.description or "")[:1200],
            "transcript": transcript,
        })
        payload = parse_payload(getattr(result, "content", str(result)))
    except Exception as e:
        logger.error("Summarization failed for %s: %s: %s", video.video_id, type(e).__name__, e)
        return Summary.placeholder(SummaryStatus.ERROR, "Processing error: the summary could not be generated.")

    bullets = clip_bullets([normalize(b) for b in payload.bullets])
    if not bullets:
        bullets = clip_bullets(description_bullets(video.description)) or [PLACEHOLDER_BULLET]

    summary = Summary(
        bullets=bullets,
        long=_normalize_long(payload.long),
        method="openai",
    )
    return ground(summary, transcript, tolerance)
