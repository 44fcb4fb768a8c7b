"""Port: clipboard insertion of the final text."""

from __future__ import annotations

from typing import Protocol


class ClipboardSink(Protocol):
    def insert(self, text: str) -> None: ...
