"""Transcript entities: segments, aligned tokens and sentences."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

SENTENCE_TERMINALS = ('.', '!', '?')


def format_time_range(start: float, end: float) -> str:
    """Render a ``[start->end]`` marker with one decimal place."""
    return f'[{start:.1f}->{end:.1f}]'


class TranscriptSegment(BaseModel):
    """A finalized segment emitted by the streaming backend."""

    text: str
    start: float = Field(description='Offset in seconds from the start of the audio')
    end: float = Field(description='Offset in seconds from the start of the audio')


class AlignedToken(BaseModel):
    """A single time-aligned token from the alignment backend."""

    text: str
    start: float
    end: float

    def shifted(self, offset: float) -> AlignedToken:
        return AlignedToken(text=self.text, start=self.start + offset, end=self.end + offset)

    @property
    def closes_sentence(self) -> bool:
        return any(mark in self.text for mark in SENTENCE_TERMINALS)


class AlignedSentence(BaseModel):
    tokens: list[AlignedToken]

    @property
    def text(self) -> str:
        return ''.join(tok.text for tok in self.tokens)

    @property
    def start(self) -> float:
        return self.tokens[0].start if self.tokens else 0.0

    @property
    def end(self) -> float:
        return self.tokens[-1].end if self.tokens else 0.0


class TranscriptRecord(BaseModel):
    """One persisted transcription."""

    text: str
    timestamp: datetime
    duration_seconds: float
