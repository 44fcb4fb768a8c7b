"""Port: persistence of completed transcriptions."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TranscriptStore(Protocol):
    def append(self, text: str, timestamp: datetime, duration_seconds: float) -> None:
        """Persist one completed transcription. May raise; callers log and continue."""
        ...
