"""Port: vendor adapter — one interface, selected once per loaded session."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from super_transcribe.l1_entities.cancellation import AbortSignal
from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l1_entities.vendor import ModelVendor


@dataclass(frozen=True)
class ProgressUpdate:
    """Fraction of the current request completed, in [0, 1]."""

    progress: float


@dataclass(frozen=True)
class SegmentUpdate:
    """Newly finalized text from the streaming decode loop."""

    text: str


AdapterEvent = ProgressUpdate | SegmentUpdate
EventSink = Callable[[AdapterEvent], None]


class VendorAdapter(Protocol):
    vendor: ModelVendor

    def run(
        self,
        audio: np.ndarray,
        settings: TranscriptionSettings,
        abort: AbortSignal,
        emit: EventSink,
    ) -> str:
        """Transcribe *audio* and return the raw (not post-processed) text.

        Raises ProcessingFailed, or TranscriptionCancelled once *abort* is set.
        Must not touch shared state; progress goes through *emit*.
        """
        ...

    def close(self) -> None: ...
