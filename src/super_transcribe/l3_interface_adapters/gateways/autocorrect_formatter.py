"""Gateway: CJK autocorrection via autocorrect-py — implements Autocorrector port."""

from __future__ import annotations

import autocorrect_py


class AutocorrectFormatter:
    """Fixes spacing and punctuation between CJK and Latin text."""

    def format(self, text: str) -> str:
        return autocorrect_py.format(text)
