"""
Pipeline
========

Per-video processing and the batch run.

VideoRef -> transcript cascade -> summarizer -> grounding -> (price filter)
-> final Summary. Videos are processed one at a time and independently;
a failure on one video becomes an "error" Summary for that video only.
"""

import logging
from typing import Callable, Iterable, List, Optional, Tuple

from langchain_openai import ChatOpenAI

from .extractive import summarize_free
from .models import Summary, SummaryStatus, VideoRef
from .price_filter import CoinGeckoPriceService, PriceService, filter_implausible_levels
from .settings import Settings
from .site_writer import write_site
from .summarizer import build_llm, summarize_with_openai
from .transcript_fetcher import TranscriptFetcher, build_default_sources
from .video_collector import collect_videos

logger = logging.getLogger(__name__)

Result = Tuple[VideoRef, Summary]


def process_video(
    video: VideoRef,
    fetcher: TranscriptFetcher,
    settings: Settings,
    price_service: Optional[PriceService] = None,
    llm: Optional[ChatOpenAI] = None,
) -> Summary:
    """
    Produce the final Summary for one video. Never raises.

    Args:
        video: Video to summarize
        fetcher: Transcript cascade
        settings: Run settings (summarizer choice, tolerance, limits)
        price_service: Live prices for the plausibility filter (None disables it)
        llm: Chat model for the OpenAI path

    Returns:
        Final Summary; "skipped" when no transcript was found
    """
    try:
        transcript = fetcher.fetch_transcript(video.video_id)
        if not transcript.available:
            return Summary.placeholder(SummaryStatus.SKIPPED, "No transcript available for this video.")

        if settings.use_openai:
            summary = summarize_with_openai(
                video,
                transcript.text,
                llm=llm,
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                min_chars=settings.min_transcript_chars,
                tolerance=settings.grounding_tolerance,
            )
        else:
            summary = summarize_free(video, transcript.text, tolerance=settings.grounding_tolerance)

        if summary.status == SummaryStatus.OK:
            summary = filter_implausible_levels(summary, price_service)
        return summary.model_copy(update={"transcript_source": transcript.source})
    except Exception as e:
        logger.exception("Processing failed for %s: %s", video.video_id, e)
        return Summary.placeholder(SummaryStatus.ERROR, "Processing error: the summary could not be generated.")


def run(
    settings: Settings,
    progress: Callable[[Iterable[VideoRef]], Iterable[VideoRef]] = iter,
    fetcher: Optional[TranscriptFetcher] = None,
    price_service: Optional[PriceService] = None,
) -> List[Result]:
    """
    List videos, summarize each one, then write the site artifacts.

    Args:
        settings: Run settings
        progress: Wraps the video iterable (e.g. tqdm) for progress display
        fetcher: Transcript cascade (default sources from settings when omitted)
        price_service: Live prices (CoinGecko when LIVE_PRICES is on and omitted)

    Returns:
        (video, summary) pairs, newest first

    Raises:
        YTError: Video listing failed or found nothing
    """
    videos = collect_videos(settings)
    logger.info("Found %d videos", len(videos))

    if fetcher is None:
        fetcher = TranscriptFetcher(
            build_default_sources(settings),
            max_chars=settings.transcript_max_chars,
        )
    if price_service is None and settings.live_prices:
        price_service = CoinGeckoPriceService()
    llm = build_llm(settings.openai_api_key, settings.openai_model) if settings.use_openai else None

    results: List[Result] = []
    for video in progress(videos):
        summary = process_video(video, fetcher, settings, price_service=price_service, llm=llm)
        logger.info("%s: %s via %s (%s)", video.video_id, summary.status.value,
                    summary.transcript_source or "-", summary.method or "-")
        results.append((video, summary))

    write_site(settings.output_dir, results, settings.site_url, settings.site_tz)
    return results
