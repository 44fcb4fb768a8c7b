"""Port: read-only access to persisted preferences."""

from __future__ import annotations

from typing import Protocol

from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l1_entities.vendor import ModelVendor


class PreferenceStore(Protocol):
    """Values are read at call time, never cached across calls."""

    def transcription_settings(self) -> TranscriptionSettings: ...

    def model_vendor(self) -> ModelVendor: ...

    def model_path(self) -> str | None: ...
