"""Cancellation primitives shared between the coordinator and worker threads."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from super_transcribe.l1_entities.errors import TranscriptionCancelled


class AbortSignal:
    """Out-of-band abort flag, shared by reference with the active adapter.

    Set from the coordination thread, polled from inside decode loops that
    cannot be interrupted any other way.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def set(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def raise_if_set(self) -> None:
        if self._event.is_set():
            raise TranscriptionCancelled('Transcription was cancelled')


@dataclass(frozen=True)
class RequestToken:
    """Generation id of one transcribe call. Compared by value."""

    generation: int
