"""
YouTube TL;DR Orchestrator - Main CLI
=====================================

Build grounded TL;DR summaries for a channel's most recent videos.

Usage:
    python orchestrator.py --limit 5 --summarizer free

Flow:
    1. Load settings from .env / environment (SITE_URL is required)
    2. List the channel's recent videos (RSS or Data API)
    3. For each video: transcript cascade -> summarize -> ground -> price check
    4. Write summaries/*.html, latest.json and yt-index.json
"""

import argparse
import logging
import sys

from dotenv import load_dotenv
from tqdm import tqdm

from yt_tldr import ConfigError, Settings, SummaryStatus, YTError, run


def main(argv=None):
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="YouTube -> grounded TL;DR site builder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Summarize the 10 newest videos (OpenAI if OPENAI_API_KEY is set)
  python orchestrator.py

  # Free extractive summaries only, into ./public
  python orchestrator.py --summarizer free --output ./public

  # Drop key levels that are far off live crypto prices
  python orchestrator.py --live-prices
        """
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Site output directory (default: OUTPUT_DIR or .)"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Max videos to summarize (default: MAX_ITEMS or 10)"
    )
    parser.add_argument(
        "--summarizer",
        choices=["auto", "free", "openai"],
        default=None,
        help="'free' (extractive), 'openai', or 'auto' (openai when a key is set)"
    )
    parser.add_argument(
        "--live-prices",
        action="store_true",
        default=None,
        help="Filter key levels against live spot prices"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose output"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_env(
            output_dir=args.output,
            max_items=args.limit,
            summarizer=args.summarizer,
            live_prices=args.live_prices,
        )
    except ConfigError as e:
        print(f"❌ {e}")
        return 1

    mode = "openai" if settings.use_openai else "free (extractive)"
    print(f"\n🎥 Fetching up to {settings.max_items} videos, summarizer: {mode}")

    try:
        results = run(settings, progress=lambda videos: tqdm(videos, desc="Summarizing", unit="video"))
    except YTError as e:
        print(f"❌ Error fetching videos: {e}")
        return 1

    counts = {s: 0 for s in SummaryStatus}
    for _, summary in results:
        counts[summary.status] += 1

    print(f"\n✅ Done! {len(results)} videos")
    for status, n in counts.items():
        if n:
            print(f"   {status.value:<12} {n}")
    print(f"   Output:      {settings.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
