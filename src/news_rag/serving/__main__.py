"""Run the API with uvicorn: ``python -m news_rag.serving`` or ``news-rag-serve``."""

from __future__ import annotations

import logging

import uvicorn

from news_rag.config import settings


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("news_rag.serving.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
