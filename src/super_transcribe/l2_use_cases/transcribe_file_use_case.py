"""Use case: transcribe one audio file — ingest, dispatch to the adapter, post-process.

Runs entirely on a worker thread. Does not touch shared state: progress and
partial text leave through the ``emit`` sink only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from super_transcribe.l1_entities.audio_constants import SAMPLE_RATE
from super_transcribe.l1_entities.cancellation import AbortSignal
from super_transcribe.l1_entities.errors import AudioConversionFailed
from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l2_use_cases.ports.audio_loader import AudioLoader
from super_transcribe.l2_use_cases.ports.vendor_adapter import EventSink, VendorAdapter
from super_transcribe.l2_use_cases.post_processor import PostProcessor

log = logging.getLogger('stx.pipeline')


@dataclass(frozen=True)
class FileTranscription:
    text: str
    duration_seconds: float


class TranscribeFileUseCase:
    def __init__(self, load_audio: AudioLoader, post_processor: PostProcessor) -> None:
        self._load_audio = load_audio
        self._post = post_processor

    def execute(
        self,
        audio_path: Path,
        settings: TranscriptionSettings,
        adapter: VendorAdapter,
        abort: AbortSignal,
        emit: EventSink,
    ) -> FileTranscription:
        abort.raise_if_set()

        audio = self._load_audio(audio_path)
        if len(audio) == 0:
            raise AudioConversionFailed(f'Audio file appears to be empty: {audio_path}')

        abort.raise_if_set()

        duration = len(audio) / SAMPLE_RATE
        log.info('Transcribing %s (%.1fs) with %s', audio_path.name, duration, adapter.vendor.display_name)

        raw = adapter.run(audio, settings, abort, emit)
        abort.raise_if_set()

        return FileTranscription(text=self._post.process(raw, settings), duration_seconds=duration)
