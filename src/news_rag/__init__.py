"""news-rag — retrieval-augmented chat over crawled news articles."""

__version__ = "0.1.0"
