"""Chunk window entity for long-audio scheduling."""

from __future__ import annotations

from pydantic import BaseModel


class ChunkWindow(BaseModel):
    start_sample: int
    end_sample: int
    offset_seconds: float

    @property
    def length(self) -> int:
        return self.end_sample - self.start_sample
