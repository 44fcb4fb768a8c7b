"""Port: opaque inference backends behind the vendor adapters."""

from __future__ import annotations

from collections.abc import Callable
from typing import Literal, Protocol

import numpy as np
from pydantic import BaseModel, Field

from super_transcribe.l1_entities.cancellation import AbortSignal
from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l1_entities.transcript import AlignedToken, TranscriptSegment
from super_transcribe.l1_entities.vendor import ModelVendor


class StreamingDecodeOptions(BaseModel):
    """Decode parameters handed to the streaming backend."""

    use_beam_search: bool = False
    beam_size: int = 5
    temperature: float = 0.0
    no_speech_threshold: float = 0.6
    initial_prompt: str | None = None
    language: str | None = None  # None → auto-detect
    translate: bool = False
    suppress_blank: bool = False
    timestamps: bool = False
    n_threads: int = 4

    @classmethod
    def from_settings(cls, settings: TranscriptionSettings) -> StreamingDecodeOptions:
        return cls(
            use_beam_search=settings.use_beam_search,
            beam_size=settings.beam_size,
            temperature=settings.temperature,
            no_speech_threshold=settings.no_speech_threshold,
            initial_prompt=settings.initial_prompt or None,
            language=settings.language_hint,
            translate=settings.translate_to_english,
            suppress_blank=settings.suppress_blank_audio,
            timestamps=settings.show_timestamps,
        )


class AlignmentDecodeOptions(BaseModel):
    """Decode parameters handed to the alignment backend.

    The TDT decoder has no sampling temperature or language conditioning, so
    only the search mode and the per-frame emission cap are configurable.
    """

    decoding: Literal['greedy'] = 'greedy'
    max_symbols_per_step: int = Field(default=500, ge=1)


class StreamingEngine(Protocol):
    """Backend that finalizes timestamped segments while it decodes."""

    def transcribe(
        self,
        audio: np.ndarray,
        options: StreamingDecodeOptions,
        on_segment: Callable[[TranscriptSegment], None],
        abort: AbortSignal,
    ) -> list[TranscriptSegment]:
        """Run encode + decode over the whole buffer. Raises RuntimeError on failure."""
        ...

    def close(self) -> None:
        """Release the native model."""
        ...


class AlignmentEngine(Protocol):
    """Backend that returns a batch of time-aligned tokens per call."""

    @property
    def sample_rate(self) -> int: ...

    def align(self, audio: np.ndarray, options: AlignmentDecodeOptions) -> list[AlignedToken]:
        """Encode and decode one window. Token times are relative to the window."""
        ...

    def close(self) -> None: ...


class EngineLoader(Protocol):
    """Loads a backend model from disk. Blocking; called off the event loop."""

    def load(self, model_path: str, vendor: ModelVendor) -> StreamingEngine | AlignmentEngine: ...
