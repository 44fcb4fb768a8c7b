"""Gateway: system clipboard via pyperclip — implements ClipboardSink port."""

from __future__ import annotations

import pyperclip


class PyperclipClipboard:
    def insert(self, text: str) -> None:
        pyperclip.copy(text)
