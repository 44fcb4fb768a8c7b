"""Vendor adapter: batch token-alignment decode, chunked for long audio."""

from __future__ import annotations

import logging

import numpy as np

from super_transcribe.l1_entities.audio_constants import SAMPLE_RATE
from super_transcribe.l1_entities.cancellation import AbortSignal
from super_transcribe.l1_entities.errors import ProcessingFailed
from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l1_entities.transcript import AlignedToken
from super_transcribe.l1_entities.vendor import ModelVendor
from super_transcribe.l2_use_cases.chunk_scheduler import ChunkScheduler
from super_transcribe.l2_use_cases.ports.speech_engine import AlignmentDecodeOptions, AlignmentEngine
from super_transcribe.l2_use_cases.ports.vendor_adapter import EventSink, ProgressUpdate
from super_transcribe.l2_use_cases.utils.sentence_builder import render_sentences, tokens_to_sentences

log = logging.getLogger('stx.parakeet')


class AlignmentAdapter:
    vendor = ModelVendor.ALIGNMENT

    def __init__(
        self,
        engine: AlignmentEngine,
        scheduler: ChunkScheduler | None = None,
        options: AlignmentDecodeOptions | None = None,
    ) -> None:
        self._engine = engine
        self._scheduler = scheduler or ChunkScheduler()
        self._options = options or AlignmentDecodeOptions()

    def run(
        self,
        audio: np.ndarray,
        settings: TranscriptionSettings,
        abort: AbortSignal,
        emit: EventSink,
    ) -> str:
        abort.raise_if_set()
        duration = len(audio) / SAMPLE_RATE

        if self._scheduler.should_chunk(duration):
            log.info('Audio is %.1fs, decoding in windows', duration)
            tokens = self._scheduler.run(
                audio,
                self._engine.sample_rate,
                lambda window: self._align(window, self._options),
                abort,
                lambda fraction: emit(ProgressUpdate(progress=fraction)),
            )
        else:
            tokens = self._align(audio, self._options)

        abort.raise_if_set()

        sentences = tokens_to_sentences(tokens)
        log.info('Alignment decode produced %d tokens in %d sentences', len(tokens), len(sentences))
        return render_sentences(sentences, settings.show_timestamps).strip()

    def _align(self, audio: np.ndarray, options: AlignmentDecodeOptions) -> list[AlignedToken]:
        try:
            return self._engine.align(audio, options)
        except Exception as exc:
            log.error('Alignment decode failed: %s', exc, exc_info=True)
            raise ProcessingFailed(f'Alignment decode failed: {exc}') from exc

    def close(self) -> None:
        self._engine.close()
