"""Tests for AlignmentAdapter."""

from __future__ import annotations

import math

import numpy as np
import pytest

from super_transcribe.l1_entities.audio_constants import SAMPLE_RATE
from super_transcribe.l1_entities.cancellation import AbortSignal
from super_transcribe.l1_entities.errors import ProcessingFailed, TranscriptionCancelled
from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l1_entities.transcript import AlignedToken
from super_transcribe.l2_use_cases.alignment_adapter import AlignmentAdapter
from super_transcribe.l2_use_cases.ports.speech_engine import AlignmentDecodeOptions
from super_transcribe.l2_use_cases.ports.vendor_adapter import ProgressUpdate
from tests.conftest import FakeAlignmentEngine


def _audio(seconds: float) -> np.ndarray:
    return np.zeros(int(seconds * SAMPLE_RATE), dtype=np.float32)


def _tokens() -> list[AlignedToken]:
    return [
        AlignedToken(text=' Hello', start=1.2, end=1.6),
        AlignedToken(text=' world.', start=1.6, end=2.0),
    ]


class TestShortAudio:
    def test_single_align_call_on_full_buffer(self):
        engine = FakeAlignmentEngine(_tokens())
        audio = _audio(180)
        AlignmentAdapter(engine).run(audio, TranscriptionSettings(), AbortSignal(), lambda e: None)

        assert len(engine.align_calls) == 1
        assert len(engine.align_calls[0][0]) == len(audio)

    def test_timestamped_output(self):
        engine = FakeAlignmentEngine(_tokens())
        text = AlignmentAdapter(engine).run(
            _audio(5), TranscriptionSettings(show_timestamps=True), AbortSignal(), lambda e: None
        )
        assert text == '[1.2->2.0] Hello world.'

    def test_plain_output_has_no_markers(self):
        engine = FakeAlignmentEngine(_tokens())
        text = AlignmentAdapter(engine).run(_audio(5), TranscriptionSettings(), AbortSignal(), lambda e: None)
        assert text == 'Hello world.'
        assert '->' not in text

    def test_default_decode_options(self):
        engine = FakeAlignmentEngine(_tokens())
        AlignmentAdapter(engine).run(_audio(5), TranscriptionSettings(), AbortSignal(), lambda e: None)
        options = engine.align_calls[0][1]
        assert options.decoding == 'greedy'
        assert options.max_symbols_per_step == 500

    def test_custom_decode_options_reach_every_window(self):
        engine = FakeAlignmentEngine(_tokens())
        adapter = AlignmentAdapter(engine, options=AlignmentDecodeOptions(max_symbols_per_step=8))
        adapter.run(_audio(300), TranscriptionSettings(), AbortSignal(), lambda e: None)
        assert {call[1].max_symbols_per_step for call in engine.align_calls} == {8}

    def test_engine_error_becomes_processing_failed(self):
        engine = FakeAlignmentEngine(error=RuntimeError('encoder failed'))
        with pytest.raises(ProcessingFailed, match='encoder failed'):
            AlignmentAdapter(engine).run(_audio(5), TranscriptionSettings(), AbortSignal(), lambda e: None)


class TestLongAudio:
    def test_chunked_into_expected_windows(self):
        engine = FakeAlignmentEngine(_tokens())
        AlignmentAdapter(engine).run(_audio(300), TranscriptionSettings(), AbortSignal(), lambda e: None)
        assert len(engine.align_calls) == math.ceil((300 - 15) / (120 - 15))

    def test_token_times_are_absolute(self):
        engine = FakeAlignmentEngine([AlignedToken(text=' Hi.', start=1.0, end=2.0)])
        text = AlignmentAdapter(engine).run(
            _audio(240), TranscriptionSettings(show_timestamps=True), AbortSignal(), lambda e: None
        )
        assert text.splitlines() == ['[1.0->2.0] Hi.', '[106.0->107.0] Hi.', '[211.0->212.0] Hi.']

    def test_reports_progress(self):
        events = []
        engine = FakeAlignmentEngine(_tokens())
        AlignmentAdapter(engine).run(_audio(300), TranscriptionSettings(), AbortSignal(), events.append)

        progress = [e.progress for e in events if isinstance(e, ProgressUpdate)]
        assert progress == sorted(progress)
        assert progress[-1] == pytest.approx(1.0)

    def test_abort_between_windows(self):
        abort = AbortSignal()

        class _AbortingEngine(FakeAlignmentEngine):
            def align(self, audio, options):
                abort.set()
                return super().align(audio, options)

        engine = _AbortingEngine(_tokens())
        with pytest.raises(TranscriptionCancelled):
            AlignmentAdapter(engine).run(_audio(300), TranscriptionSettings(), abort, lambda e: None)
        assert len(engine.align_calls) == 1


class TestClose:
    def test_close_releases_engine(self):
        engine = FakeAlignmentEngine()
        AlignmentAdapter(engine).close()
        assert engine.close_calls == 1
