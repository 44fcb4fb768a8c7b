"""Dependency container — composition root for wiring all layers together."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from super_transcribe.l2_use_cases.ports.clipboard import ClipboardSink
from super_transcribe.l2_use_cases.ports.speech_engine import EngineLoader
from super_transcribe.l2_use_cases.ports.transcript_store import TranscriptStore
from super_transcribe.l2_use_cases.post_processor import PostProcessor
from super_transcribe.l2_use_cases.transcribe_file_use_case import TranscribeFileUseCase
from super_transcribe.l3_interface_adapters.controllers.model_session_manager import ModelSessionManager
from super_transcribe.l3_interface_adapters.controllers.transcription_orchestrator import (
    StateListener,
    TranscriptionOrchestrator,
)
from super_transcribe.l3_interface_adapters.gateways.autocorrect_formatter import AutocorrectFormatter
from super_transcribe.l3_interface_adapters.gateways.engine_loader import NativeEngineLoader
from super_transcribe.l3_interface_adapters.gateways.ffmpeg_audio_loader import FfmpegAudioLoader
from super_transcribe.l3_interface_adapters.gateways.file_transcript_store import FileTranscriptStore
from super_transcribe.l3_interface_adapters.gateways.hf_model_store import HfModelStore
from super_transcribe.l3_interface_adapters.gateways.paths import DATA_DIR, DEFAULT_TRANSCRIPTS_PATH
from super_transcribe.l3_interface_adapters.gateways.pyperclip_clipboard import PyperclipClipboard
from super_transcribe.l3_interface_adapters.gateways.yaml_preference_store import YamlPreferenceStore
from super_transcribe.l4_frameworks_and_drivers.infra_config import InfraConfig


class DependencyContainer:
    """Creates and wires all concrete instances. Easy to override for testing."""

    def __init__(
        self,
        preferences: YamlPreferenceStore,
        infra: InfraConfig | None = None,
        on_change: StateListener | None = None,
        on_download_progress: Callable[[int], None] | None = None,
        engine_loader: EngineLoader | None = None,
    ) -> None:
        _infra = infra or InfraConfig()
        prefs = preferences.load()

        self.preferences = preferences
        self.executor = ThreadPoolExecutor(max_workers=_infra.worker_threads, thread_name_prefix='stx-worker')
        self.model_store = HfModelStore(
            preferences,
            base_dir=Path(_infra.models_dir) if _infra.models_dir else DATA_DIR,
            on_progress=on_download_progress,
        )
        self.transcript_store: TranscriptStore = FileTranscriptStore(
            Path(prefs.output.transcripts_file) if prefs.output.transcripts_file else DEFAULT_TRANSCRIPTS_PATH
        )
        self.clipboard: ClipboardSink | None = PyperclipClipboard() if prefs.output.copy_to_clipboard else None
        self.audio_loader = FfmpegAudioLoader(
            base_timeout=_infra.audio_decode_timeout,
            seconds_per_mb=_infra.audio_decode_seconds_per_mb,
        )

        self.sessions = ModelSessionManager(
            engine_loader=engine_loader or NativeEngineLoader(),
            preferences=preferences,
            model_store=self.model_store,
            executor=self.executor,
        )
        self.orchestrator = TranscriptionOrchestrator(
            sessions=self.sessions,
            use_case=TranscribeFileUseCase(self.audio_loader, PostProcessor(AutocorrectFormatter())),
            transcript_store=self.transcript_store,
            clipboard=self.clipboard,
            executor=self.executor,
            on_change=on_change,
        )

    def close(self) -> None:
        self.orchestrator.shutdown()
        self.sessions.close()
