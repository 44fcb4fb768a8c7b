"""Vendor adapter: incremental segment decode on the streaming backend."""

from __future__ import annotations

import logging

import numpy as np

from super_transcribe.l1_entities.audio_constants import SAMPLE_RATE
from super_transcribe.l1_entities.cancellation import AbortSignal
from super_transcribe.l1_entities.errors import ProcessingFailed, TranscriptionCancelled
from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l1_entities.transcript import TranscriptSegment, format_time_range
from super_transcribe.l1_entities.vendor import ModelVendor
from super_transcribe.l2_use_cases.ports.speech_engine import StreamingDecodeOptions, StreamingEngine
from super_transcribe.l2_use_cases.ports.vendor_adapter import EventSink, ProgressUpdate, SegmentUpdate
from super_transcribe.l2_use_cases.post_processor import strip_markers

log = logging.getLogger('stx.whisper')

_CHECK_EVERY = 5  # segments between cancellation checkpoints while assembling text


class StreamingAdapter:
    """Processes the full buffer in one pass; the backend windows internally."""

    vendor = ModelVendor.STREAMING

    def __init__(self, engine: StreamingEngine) -> None:
        self._engine = engine

    def run(
        self,
        audio: np.ndarray,
        settings: TranscriptionSettings,
        abort: AbortSignal,
        emit: EventSink,
    ) -> str:
        abort.raise_if_set()
        total_duration = len(audio) / SAMPLE_RATE
        options = StreamingDecodeOptions.from_settings(settings)

        def _on_segment(seg: TranscriptSegment) -> None:
            # Runs inside the backend decode loop.
            if abort.is_set():
                return
            text = seg.text.strip()
            if text:
                emit(SegmentUpdate(text=text))
            if total_duration > 0 and seg.end > 0:
                emit(ProgressUpdate(progress=min(seg.end / total_duration, 1.0)))

        try:
            segments = self._engine.transcribe(audio, options, _on_segment, abort)
        except TranscriptionCancelled:
            raise
        except Exception as exc:
            if abort.is_set():
                raise TranscriptionCancelled('Transcription was cancelled') from exc
            log.error('Streaming decode failed: %s', exc, exc_info=True)
            raise ProcessingFailed(f'Streaming decode failed: {exc}') from exc

        abort.raise_if_set()

        lines: list[str] = []
        for i, seg in enumerate(segments):
            if i % _CHECK_EVERY == 0:
                abort.raise_if_set()
            if settings.show_timestamps:
                lines.append(f'{format_time_range(seg.start, seg.end)} {seg.text}')
            else:
                lines.append(seg.text)

        log.info('Streaming decode produced %d segments', len(segments))
        return strip_markers('\n'.join(lines)).strip()

    def close(self) -> None:
        self._engine.close()
