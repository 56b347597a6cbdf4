"""Numeric point ids for one ingestion run."""

from __future__ import annotations

import time


class PointIdGenerator:
    """Hand out unique integer ids: ``<run start ms><counter>``.

    Construct one per ingestion run and pass it to the pipeline; ids never
    repeat within a run because the counter only grows.

    Note: the concatenated value passes 2**53 once the counter reaches
    four digits, which matters only for stores that keep ids as doubles.
    """

    def __init__(self, base_ms: int | None = None) -> None:
        self.base_ms = int(time.time() * 1000) if base_ms is None else base_ms
        self._counter = 0

    def next_id(self) -> int:
        value = int(f"{self.base_ms}{self._counter}")
        self._counter += 1
        return value

    @property
    def issued(self) -> int:
        """Number of ids handed out so far."""
        return self._counter
