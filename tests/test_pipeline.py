"""
Tests for per-video processing and the batch run.
"""

import json
from unittest.mock import MagicMock, patch

from yt_tldr.models import KeyLevel, LongSummary, Summary, SummaryStatus, TranscriptResult, VideoRef
from yt_tldr.pipeline import process_video, run
from yt_tldr.price_filter import PriceService


def _fetcher(text="", source=None):
    fetcher = MagicMock()
    fetcher.fetch_transcript.return_value = TranscriptResult(text=text, source=source)
    return fetcher


def test_no_transcript_is_skipped(video, settings):
    summary = process_video(video, _fetcher(), settings)

    assert summary.status == SummaryStatus.SKIPPED
    assert summary.bullets == ["Summary pending."]
    assert summary.transcript_source is None


def test_free_path(video, settings, market_transcript):
    summary = process_video(video, _fetcher(market_transcript, "page-scrape"), settings)

    assert summary.status == SummaryStatus.OK
    assert summary.method == "extractive"
    assert summary.transcript_source == "page-scrape"


def test_openai_path(video, settings, market_transcript):
    settings = settings.model_copy(update={"summarizer": "openai", "openai_api_key": "test_api_key"})
    llm = MagicMock()
    canned = Summary(bullets=["SOL broke 150"], method="openai")

    with patch("yt_tldr.pipeline.summarize_with_openai", return_value=canned) as mock_sum:
        summary = process_video(video, _fetcher(market_transcript, "transcript-api"), settings, llm=llm)

    assert summary.bullets == ["SOL broke 150"]
    assert summary.transcript_source == "transcript-api"
    assert mock_sum.call_args.kwargs["llm"] is llm
    assert mock_sum.call_args.kwargs["min_chars"] == settings.min_transcript_chars


def test_price_filter_applied(video, settings, market_transcript):
    canned = Summary(bullets=["x"], long=LongSummary(key_levels=[
        KeyLevel(asset="ETH", level="3200"),
        KeyLevel(asset="ETH", level="3"),
    ]))
    prices = MagicMock(spec=PriceService)
    prices.spot_prices.return_value = {"ETH": 3300.0}

    with patch("yt_tldr.pipeline.summarize_free", return_value=canned):
        summary = process_video(video, _fetcher(market_transcript, "captions-api"), settings, price_service=prices)

    assert [k.level for k in summary.long.key_levels] == ["3200"]


def test_unexpected_failure_is_contained(video, settings):
    fetcher = MagicMock()
    fetcher.fetch_transcript.side_effect = RuntimeError("boom")

    summary = process_video(video, fetcher, settings)

    assert summary.status == SummaryStatus.ERROR
    assert summary.bullets == ["Summary pending."]


def test_run_writes_after_all_videos(settings, market_transcript):
    videos = [
        VideoRef(video_id="new00000000", title="New", published_at="2025-03-05T16:00:00Z",
                 url=VideoRef.watch_url("new00000000")),
        VideoRef(video_id="old00000000", title="Old", published_at="2025-03-04T16:00:00Z",
                 url=VideoRef.watch_url("old00000000")),
    ]
    fetcher = MagicMock()
    fetcher.fetch_transcript.side_effect = [
        TranscriptResult(text=market_transcript, source="transcript-api"),
        RuntimeError("boom"),
    ]
    seen = []

    def progress(items):
        for item in items:
            seen.append(item.video_id)
            yield item

    with patch("yt_tldr.pipeline.collect_videos", return_value=videos):
        results = run(settings, progress=progress, fetcher=fetcher)

    assert seen == ["new00000000", "old00000000"]
    assert [s.status for _, s in results] == [SummaryStatus.OK, SummaryStatus.ERROR]

    index = json.loads((settings.output_dir / "yt-index.json").read_text())
    assert [i["status"] for i in index["items"]] == ["ok", "error"]
    assert (settings.output_dir / "latest.json").is_file()


def test_run_enables_live_prices(settings):
    settings = settings.model_copy(update={"live_prices": True})
    with patch("yt_tldr.pipeline.collect_videos", return_value=[]), \
            patch("yt_tldr.pipeline.CoinGeckoPriceService") as mock_prices, \
            patch("yt_tldr.pipeline.write_site") as mock_write:
        run(settings, fetcher=_fetcher())
    mock_prices.assert_called_once()
    mock_write.assert_called_once()
