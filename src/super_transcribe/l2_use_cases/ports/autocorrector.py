"""Port: script-aware text autocorrection (CJK spacing and punctuation)."""

from __future__ import annotations

from typing import Protocol


class Autocorrector(Protocol):
    def format(self, text: str) -> str:
        """Pure function: return the corrected text."""
        ...
