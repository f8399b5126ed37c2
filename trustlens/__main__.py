"""
TrustLens 분석 실행 스크립트

사용법:
    python -m trustlens <URL>
    python -m trustlens <URL> --html saved_page.html --output annotated.html

예시:
    python -m trustlens "https://www.amazon.com/dp/B000000000"
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from trustlens.core.exceptions import CrawlerError, TrustLensError
from trustlens.core.logging import get_logger, setup_logging
from trustlens.pipeline.models import PageDocument
from trustlens.session import TrustLensSession
from trustlens.utils.config import get_settings

logger = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="trustlens",
        description="Score product reviews on a shopping page for likely inauthenticity.",
    )
    parser.add_argument("url", help="Product page URL")
    parser.add_argument("--html", type=Path, help="Analyze a saved HTML file instead of loading the URL")
    parser.add_argument("--output", type=Path, help="Write the annotated HTML here")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser.parse_args(argv)


async def analyze(args: argparse.Namespace) -> int:
    async with TrustLensSession() as session:
        if args.html:
            document = PageDocument.from_file(args.html, args.url)
            run = await session.analyze(document)
        else:
            run = await session.analyze_url(args.url)

    if run is None:
        print("Page is not an analysis target.")
        return 1
    if run.is_empty:
        print("No reviews could be analyzed.")
        return 1

    print(json.dumps(run.to_dict(), ensure_ascii=False, indent=2))

    if args.output and session.document is not None:
        args.output.write_text(session.document.to_html(), encoding="utf-8")
        print(f"Annotated page written to {args.output}")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    config = get_settings()
    setup_logging(
        args.log_level or config.log_level,
        log_file=config.log_file,
        log_dir=config.log_dir,
    )

    try:
        return asyncio.run(analyze(args))
    except ValueError as e:
        print(f"Unsupported URL: {e}")
    except CrawlerError as e:
        print(f"Failed to load the page: {e}")
    except TrustLensError as e:
        print(f"Analysis failed: {e}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
