"""Port: speech model resolution."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from super_transcribe.l1_entities.vendor import ModelVendor


class ModelStore(Protocol):
    """Maps the active model preference to a loadable local path."""

    def resolve_active_path(self) -> tuple[str, ModelVendor]:
        """Return (path, vendor) for the active model. Raises ModelResolutionError."""
        ...

    def models_directory(self, vendor: ModelVendor) -> Path:
        """Directory holding installed models for *vendor*."""
        ...
