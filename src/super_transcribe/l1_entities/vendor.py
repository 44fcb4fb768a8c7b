"""L1 entity: inference backend vendor tag."""

from __future__ import annotations

import enum


class ModelVendor(enum.Enum):
    """Values are the strings persisted in preferences."""

    STREAMING = 'whisper'
    ALIGNMENT = 'parakeet'

    @property
    def display_name(self) -> str:
        if self is ModelVendor.STREAMING:
            return 'Whisper'
        return 'Parakeet MLX'

    @classmethod
    def parse(cls, raw: str | None) -> ModelVendor:
        """Map a persisted preference string to a vendor, falling back to whisper."""
        try:
            return cls(raw)
        except ValueError:
            return cls.STREAMING
