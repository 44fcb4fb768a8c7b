"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import numpy as np
import pytest

from super_transcribe.l1_entities.audio_constants import SAMPLE_RATE
from super_transcribe.l1_entities.cancellation import AbortSignal
from super_transcribe.l1_entities.errors import ModelResolutionError
from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l1_entities.transcript import AlignedToken, TranscriptSegment
from super_transcribe.l1_entities.vendor import ModelVendor
from super_transcribe.l2_use_cases.ports.speech_engine import AlignmentDecodeOptions, StreamingDecodeOptions
from super_transcribe.l2_use_cases.ports.vendor_adapter import AdapterEvent

# --- Protocol-conforming Fakes ---


class FakeStreamingEngine:
    """Fake streaming backend: reports each segment through on_segment, then returns them all."""

    def __init__(self, segments: list[TranscriptSegment] | None = None, error: Exception | None = None):
        self._segments = segments or []
        self._error = error
        self.transcribe_calls: list[tuple[np.ndarray, StreamingDecodeOptions]] = []
        self.close_calls = 0

    def transcribe(
        self,
        audio: np.ndarray,
        options: StreamingDecodeOptions,
        on_segment: Callable[[TranscriptSegment], None],
        abort: AbortSignal,
    ) -> list[TranscriptSegment]:
        self.transcribe_calls.append((audio, options))
        for seg in self._segments:
            on_segment(seg)
        if self._error is not None:
            raise self._error
        return list(self._segments)

    def close(self) -> None:
        self.close_calls += 1


class FakeAlignmentEngine:
    """Fake alignment backend: returns the same relative tokens for every window."""

    def __init__(
        self,
        tokens: list[AlignedToken] | None = None,
        error: Exception | None = None,
        sample_rate: int = SAMPLE_RATE,
    ):
        self._tokens = tokens or []
        self._error = error
        self._sample_rate = sample_rate
        self.align_calls: list[tuple[np.ndarray, AlignmentDecodeOptions]] = []
        self.close_calls = 0

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def align(self, audio: np.ndarray, options: AlignmentDecodeOptions) -> list[AlignedToken]:
        self.align_calls.append((audio, options))
        if self._error is not None:
            raise self._error
        return list(self._tokens)

    def close(self) -> None:
        self.close_calls += 1


class FakeEngineLoader:
    """Fake engine loader: hands out a fresh fake engine per load, or raises."""

    def __init__(self, error: Exception | None = None, segments: list[TranscriptSegment] | None = None):
        self._error = error
        self._segments = segments
        self.load_calls: list[tuple[str, ModelVendor]] = []
        self.engines: list[FakeStreamingEngine | FakeAlignmentEngine] = []
        self.gate: threading.Event | None = None  # when set, load blocks until released

    def load(self, model_path: str, vendor: ModelVendor):
        self.load_calls.append((model_path, vendor))
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self._error is not None:
            raise self._error
        engine = FakeStreamingEngine(self._segments) if vendor is ModelVendor.STREAMING else FakeAlignmentEngine()
        self.engines.append(engine)
        return engine


class FakeAudioLoader:
    """Fake audio loader: returns a fixed buffer, or raises."""

    def __init__(self, audio: np.ndarray | None = None, error: Exception | None = None):
        self._audio = audio if audio is not None else np.zeros(SAMPLE_RATE * 2, dtype=np.float32)
        self._error = error
        self.calls: list[Path] = []

    def __call__(self, path: Path) -> np.ndarray:
        self.calls.append(path)
        if self._error is not None:
            raise self._error
        return self._audio


class FakeVendorAdapter:
    """Fake vendor adapter: emits scripted events, then returns *text*.

    With *gate* set, run() blocks until the gate opens or the abort fires.
    """

    vendor = ModelVendor.STREAMING

    def __init__(
        self,
        text: str = 'hello world',
        events: list[AdapterEvent] | None = None,
        error: Exception | None = None,
        gate: threading.Event | None = None,
    ):
        self._text = text
        self._events = events or []
        self._error = error
        self._gate = gate
        self.started = threading.Event()
        self.run_calls = 0
        self.close_calls = 0

    def run(self, audio, settings, abort: AbortSignal, emit) -> str:
        self.run_calls += 1
        self.started.set()
        for event in self._events:
            emit(event)
        if self._gate is not None:
            while not self._gate.wait(timeout=0.01):
                abort.raise_if_set()
        abort.raise_if_set()
        if self._error is not None:
            raise self._error
        return self._text

    def close(self) -> None:
        self.close_calls += 1


class FakeTranscriptStore:
    def __init__(self, error: Exception | None = None):
        self._error = error
        self.records: list[tuple[str, datetime, float]] = []
        self.appended = threading.Event()

    def append(self, text: str, timestamp: datetime, duration_seconds: float) -> None:
        self.appended.set()
        if self._error is not None:
            raise self._error
        self.records.append((text, timestamp, duration_seconds))


class FakeClipboard:
    def __init__(self, error: Exception | None = None):
        self._error = error
        self.inserted: list[str] = []

    def insert(self, text: str) -> None:
        if self._error is not None:
            raise self._error
        self.inserted.append(text)


class FakeAutocorrector:
    def __init__(self, suffix: str = ' (fixed)'):
        self._suffix = suffix
        self.calls: list[str] = []

    def format(self, text: str) -> str:
        self.calls.append(text)
        return text + self._suffix


class FakePreferenceStore:
    def __init__(
        self,
        settings: TranscriptionSettings | None = None,
        vendor: ModelVendor = ModelVendor.STREAMING,
        path: str | None = '/models/ggml-base.bin',
    ):
        self.settings = settings or TranscriptionSettings()
        self.vendor = vendor
        self.path = path

    def transcription_settings(self) -> TranscriptionSettings:
        return self.settings

    def model_vendor(self) -> ModelVendor:
        return self.vendor

    def model_path(self) -> str | None:
        return self.path


class FakeModelStore:
    def __init__(self, path: str = '/models/ggml-base.bin', vendor: ModelVendor = ModelVendor.STREAMING):
        self._path = path
        self._vendor = vendor
        self.error: ModelResolutionError | None = None

    def resolve_active_path(self) -> tuple[str, ModelVendor]:
        if self.error is not None:
            raise self.error
        return self._path, self._vendor

    def models_directory(self, vendor: ModelVendor) -> Path:
        return Path('/models') / vendor.value


# --- Standard Fixtures ---


@pytest.fixture
def default_settings() -> TranscriptionSettings:
    return TranscriptionSettings()


@pytest.fixture
def one_second_audio() -> np.ndarray:
    return np.zeros(SAMPLE_RATE, dtype=np.float32)


@pytest.fixture
def fake_engine_loader() -> FakeEngineLoader:
    return FakeEngineLoader()


@pytest.fixture
def fake_preferences() -> FakePreferenceStore:
    return FakePreferenceStore()


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    content = """\
model:
  path: "large-v3-turbo-q8_0"
  vendor: "whisper"
transcription:
  language: "zh"
  show_timestamps: true
  beam_size: 3
output:
  copy_to_clipboard: false
"""
    p = tmp_path / 'config.yaml'
    p.write_text(content, encoding='utf-8')
    return p
