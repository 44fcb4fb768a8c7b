"""Use case: split long audio into overlapping windows and stitch the tokens back together."""

from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np

from super_transcribe.l1_entities.cancellation import AbortSignal
from super_transcribe.l1_entities.chunk import ChunkWindow
from super_transcribe.l1_entities.transcript import AlignedToken

log = logging.getLogger('stx.chunks')

CHUNK_THRESHOLD_SECONDS = 180.0
WINDOW_SECONDS = 120.0
OVERLAP_SECONDS = 15.0


def plan_windows(
    total_samples: int,
    sample_rate: int,
    window_seconds: float = WINDOW_SECONDS,
    overlap_seconds: float = OVERLAP_SECONDS,
) -> list[ChunkWindow]:
    """Lay out windows of *window_seconds* advancing by window minus overlap.

    The window that reaches the end of the audio is the last one, so the count
    is ``ceil((total - overlap) / (window - overlap))``. Stepping with
    ``start = min(end, start + step)`` until ``start`` reaches the end instead
    adds a short tail window whenever ``start + step < total <= start + window``
    (220 s of audio gives three windows that way, two here).
    """
    window_samples = max(1, int(window_seconds * sample_rate))
    overlap_samples = int(overlap_seconds * sample_rate)
    step = max(1, window_samples - overlap_samples)

    windows: list[ChunkWindow] = []
    start = 0
    while start < total_samples:
        end = min(start + window_samples, total_samples)
        windows.append(ChunkWindow(start_sample=start, end_sample=end, offset_seconds=start / sample_rate))
        if end >= total_samples:
            break
        start += step
    return windows


class ChunkScheduler:
    """Runs an alignment decode per window and merges the shifted tokens.

    Tokens from overlapping regions are kept as-is: a phrase spoken inside the
    overlap can appear twice in the merged stream.
    """

    def __init__(
        self,
        threshold_seconds: float = CHUNK_THRESHOLD_SECONDS,
        window_seconds: float = WINDOW_SECONDS,
        overlap_seconds: float = OVERLAP_SECONDS,
    ) -> None:
        self._threshold = threshold_seconds
        self._window = window_seconds
        self._overlap = overlap_seconds

    def should_chunk(self, duration_seconds: float) -> bool:
        return duration_seconds > self._threshold

    def run(
        self,
        audio: np.ndarray,
        sample_rate: int,
        decode_window: Callable[[np.ndarray], list[AlignedToken]],
        abort: AbortSignal,
        on_progress: Callable[[float], None],
    ) -> list[AlignedToken]:
        total = len(audio)
        windows = plan_windows(total, sample_rate, self._window, self._overlap)
        log.info('Chunked decode: %d windows over %d samples @ %d Hz', len(windows), total, sample_rate)

        merged: list[AlignedToken] = []
        for idx, window in enumerate(windows):
            abort.raise_if_set()
            tokens = decode_window(audio[window.start_sample : window.end_sample])
            merged.extend(tok.shifted(window.offset_seconds) for tok in tokens)
            log.debug('Window %d/%d: %d tokens (offset %.1fs)', idx + 1, len(windows), len(tokens), window.offset_seconds)
            on_progress(min(window.end_sample / total, 1.0))
        return merged
