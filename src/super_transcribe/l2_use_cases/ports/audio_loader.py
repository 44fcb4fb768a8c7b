"""Port: audio file decoding to model-ready PCM."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import numpy as np


class AudioLoader(Protocol):
    """Decodes any common audio container to float32 mono PCM at 16 kHz."""

    def __call__(self, path: Path) -> np.ndarray:
        """Return non-empty samples. Raises AudioConversionFailed."""
        ...
