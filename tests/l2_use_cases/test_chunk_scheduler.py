"""Tests for window planning and the chunked decode loop."""

from __future__ import annotations

import math

import numpy as np
import pytest

from super_transcribe.l1_entities.cancellation import AbortSignal
from super_transcribe.l1_entities.errors import TranscriptionCancelled
from super_transcribe.l1_entities.transcript import AlignedToken
from super_transcribe.l2_use_cases.chunk_scheduler import ChunkScheduler, plan_windows

RATE = 100  # small rate keeps buffers tiny; window math is rate-independent


class TestPlanWindows:
    @pytest.mark.parametrize('seconds', [181, 240, 300, 600, 3600])
    def test_window_count(self, seconds):
        windows = plan_windows(seconds * RATE, RATE, 120, 15)
        assert len(windows) == math.ceil((seconds - 15) / (120 - 15))

    def test_last_window_ends_at_total(self):
        total = 300 * RATE
        windows = plan_windows(total, RATE, 120, 15)
        assert windows[-1].end_sample == total

    def test_no_tail_window_once_end_is_covered(self):
        # the second window (105 s to 225 s) already covers 220 s
        windows = plan_windows(220 * RATE, RATE, 120, 15)
        assert [(w.start_sample // RATE, w.end_sample // RATE) for w in windows] == [(0, 120), (105, 220)]

    def test_windows_overlap_by_fixed_amount(self):
        windows = plan_windows(600 * RATE, RATE, 120, 15)
        for prev, nxt in zip(windows, windows[1:], strict=False):
            assert prev.end_sample - nxt.start_sample == 15 * RATE

    def test_offsets_in_seconds(self):
        windows = plan_windows(300 * RATE, RATE, 120, 15)
        assert [w.offset_seconds for w in windows] == [0.0, 105.0, 210.0]

    def test_window_never_exceeds_length(self):
        for w in plan_windows(600 * RATE, RATE, 120, 15):
            assert w.length <= 120 * RATE

    def test_short_audio_single_window(self):
        windows = plan_windows(50 * RATE, RATE, 120, 15)
        assert len(windows) == 1
        assert windows[0].end_sample == 50 * RATE

    def test_empty_audio_no_windows(self):
        assert plan_windows(0, RATE) == []


class TestChunkScheduler:
    def test_should_chunk_is_strictly_above_threshold(self):
        scheduler = ChunkScheduler()
        assert scheduler.should_chunk(180.0) is False
        assert scheduler.should_chunk(180.1) is True

    def test_tokens_shifted_by_window_offset(self):
        audio = np.zeros(300 * RATE, dtype=np.float32)
        scheduler = ChunkScheduler()

        result = scheduler.run(
            audio,
            RATE,
            lambda window: [AlignedToken(text=' a', start=1.0, end=2.0)],
            AbortSignal(),
            lambda _p: None,
        )

        assert [t.start for t in result] == [1.0, 106.0, 211.0]
        assert [t.end for t in result] == [2.0, 107.0, 212.0]

    def test_overlap_duplicates_kept(self):
        audio = np.zeros(240 * RATE, dtype=np.float32)
        result = ChunkScheduler().run(
            audio,
            RATE,
            lambda window: [AlignedToken(text=' x', start=0.0, end=0.5)],
            AbortSignal(),
            lambda _p: None,
        )
        assert len(result) == 3

    def test_progress_monotonic_and_reaches_one(self):
        audio = np.zeros(300 * RATE, dtype=np.float32)
        progress: list[float] = []

        ChunkScheduler().run(audio, RATE, lambda window: [], AbortSignal(), progress.append)

        assert progress == sorted(progress)
        assert progress[0] == pytest.approx(0.4)
        assert progress[-1] == pytest.approx(1.0)

    def test_windows_passed_in_order(self):
        audio = np.arange(300 * RATE, dtype=np.float32)
        seen: list[float] = []

        def decode(window: np.ndarray) -> list[AlignedToken]:
            seen.append(float(window[0]))
            return []

        ChunkScheduler().run(audio, RATE, decode, AbortSignal(), lambda _p: None)

        assert seen == [0.0, 105.0 * RATE, 210.0 * RATE]

    def test_abort_stops_before_next_window(self):
        audio = np.zeros(600 * RATE, dtype=np.float32)
        abort = AbortSignal()
        calls: list[int] = []

        def decode(window: np.ndarray) -> list[AlignedToken]:
            calls.append(len(window))
            abort.set()
            return []

        with pytest.raises(TranscriptionCancelled):
            ChunkScheduler().run(audio, RATE, decode, abort, lambda _p: None)
        assert len(calls) == 1
