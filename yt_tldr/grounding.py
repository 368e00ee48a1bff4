"""
Grounding Filter
================

Check every number in a generated summary against the source transcript.

If a single figure cannot be found in the transcript (within tolerance) the
whole numeric surface of the summary is redacted and a note is attached.
One fabricated number is treated as evidence that the rest of the numeric
narrative cannot be trusted either.
"""

import json
import logging
from typing import Any

from .models import Summary
from .numeric import DEFAULT_TOLERANCE, NUMERIC_RE, appears_in, numeric_substrings, parse_numeric_tokens

logger = logging.getLogger(__name__)

REDACTION_MARKER = "[redacted]"
SCRUB_NOTE = "Figures redacted: one or more numbers could not be matched to the video transcript."


def serialize_surface(summary: Summary) -> str:
    """All text a reader could see: bullets plus the long-form structure."""
    return "\n".join(summary.bullets) + "\n" + json.dumps(summary.long.model_dump(exclude={"note"}), ensure_ascii=False)


def _redact(value: Any) -> Any:
    if isinstance(value, str):
        return NUMERIC_RE.sub(REDACTION_MARKER, value)
    if isinstance(value, list):
        return [_redact(v) for v in value]
    if isinstance(value, dict):
        return {k: _redact(v) for k, v in value.items()}
    return value


def scrub(summary: Summary) -> Summary:
    """Replace every numeric substring in every text field and set the note."""
    data = summary.model_dump()
    data["bullets"] = _redact(data["bullets"])
    long = _redact({k: v for k, v in data["long"].items() if k != "note"})
    long["note"] = SCRUB_NOTE
    data["long"] = long
    return Summary.model_validate(data)


def ground(summary: Summary, transcript: str, tolerance: float = DEFAULT_TOLERANCE) -> Summary:
    """
    Verify the summary's numbers against the transcript.

    Args:
        summary: Candidate summary
        transcript: Source transcript text
        tolerance: Relative tolerance for numeric equality

    Returns:
        The summary unchanged when every number verifies, otherwise a scrubbed copy
    """
    source_tokens = parse_numeric_tokens(transcript)
    unverified = [
        s for s in numeric_substrings(serialize_surface(summary))
        if not appears_in(s, source_tokens, tolerance)
    ]
    if not unverified:
        return summary

    logger.warning("Scrubbing summary: unverifiable figures %s", sorted(set(unverified))[:10])
    return scrub(summary)
