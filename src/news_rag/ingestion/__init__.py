"""
Ingestion — crawling, extraction, chunking, embedding, and indexing.

This module is responsible for the ETL-like pipeline that converts news
pages (or a local JSON dump of articles) into embedded chunks stored in a
vector database.  :class:`~news_rag.ingestion.pipeline.IngestionPipeline`
is the entry point.
"""
