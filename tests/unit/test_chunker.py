"""Unit tests for the chunker module."""

import pytest

from news_rag.ingestion.chunker import chunk_text, iter_chunks


def _reassemble(chunks, overlap: int) -> str:
    text = chunks[0].text
    for chunk in chunks[1:]:
        text += chunk.text[overlap:]
    return text


def test_thousand_chars_gives_two_windows() -> None:
    """800/100 windows over 1000 chars: [0,800) and [700,1000)."""
    text = "A" * 1000
    chunks = chunk_text(text, chunk_size=800, overlap=100)
    assert [c.text for c in chunks] == [text[0:800], text[700:1000]]
    assert [c.id for c in chunks] == ["chunk_0", "chunk_1"]


def test_no_chunk_exceeds_chunk_size() -> None:
    text = "The quick brown fox jumps over the lazy dog. " * 120
    chunks = chunk_text(text, chunk_size=300, overlap=50)
    assert len(chunks) > 1
    assert all(len(c.text) <= 300 for c in chunks)


def test_chunks_reconstruct_original_text() -> None:
    """Dropping each overlap and concatenating gives back the input."""
    text = "abcdefghijklmnopqrstuvwxyz0123456789" * 70
    chunks = chunk_text(text, chunk_size=256, overlap=32)
    assert _reassemble(chunks, 32) == text


def test_short_text_is_one_chunk() -> None:
    chunks = chunk_text("  Short article body.  ", chunk_size=800, overlap=100)
    assert [c.text for c in chunks] == ["Short article body."]


def test_empty_and_whitespace_text_yield_nothing() -> None:
    assert chunk_text("") == []
    assert chunk_text(" " * 2000, chunk_size=500, overlap=50) == []


def test_whitespace_window_does_not_consume_an_ordinal() -> None:
    text = "x" * 10 + " " * 10 + "y" * 10
    chunks = chunk_text(text, chunk_size=10, overlap=0)
    assert [(c.id, c.text) for c in chunks] == [("chunk_0", "x" * 10), ("chunk_1", "y" * 10)]


def test_chunking_is_deterministic() -> None:
    text = "Lorem ipsum dolor sit amet. " * 100
    assert chunk_text(text, 200, 20) == chunk_text(text, 200, 20)


def test_iter_chunks_is_lazy() -> None:
    gen = iter_chunks("B" * 5000, chunk_size=1000, overlap=0)
    assert next(gen).id == "chunk_0"
    assert next(gen).id == "chunk_1"


@pytest.mark.parametrize(("size", "overlap"), [(100, 100), (100, 150), (0, 0), (100, -1)])
def test_invalid_parameters_raise(size: int, overlap: int) -> None:
    with pytest.raises(ValueError):
        chunk_text("some text", chunk_size=size, overlap=overlap)
