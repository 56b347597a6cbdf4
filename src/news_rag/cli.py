"""Command-line entry point for news ingestion.

    news-rag-ingest --limit=20
    news-rag-ingest --file=data/articles.json
"""

from __future__ import annotations

import argparse
import logging
import sys

from news_rag.config import settings
from news_rag.exceptions import NewsRagError

logger = logging.getLogger("news_rag.ingest")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="news-rag-ingest",
        description="Crawl news articles (or load them from a JSON file) into the vector index.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=settings.num_articles,
        help="Maximum number of articles to crawl (default: %(default)s)",
    )
    parser.add_argument(
        "--file",
        default=None,
        help="Ingest a local JSON array of {id,title,url,content} instead of crawling",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default: %(default)s)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from news_rag.ingestion.pipeline import IngestionPipeline

    try:
        settings.ensure_configured("ingest")
        pipeline = IngestionPipeline.from_settings(settings)
        report = pipeline.run(limit=args.limit, from_file=args.file)
    except NewsRagError as exc:
        logger.error("Fatal ingestion error: %s", exc)
        return 1
    except Exception:
        logger.exception("Fatal ingestion error")
        return 1

    print(report.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
