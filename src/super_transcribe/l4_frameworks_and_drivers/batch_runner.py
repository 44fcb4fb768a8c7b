"""Batch runner — headless transcribe-one-file from the command line."""

from __future__ import annotations

import asyncio
import signal
import sys
from pathlib import Path

from super_transcribe.l1_entities.errors import TranscriptionCancelled, TranscriptionError
from super_transcribe.l1_entities.state import TranscriptionState
from super_transcribe.l3_interface_adapters.gateways.yaml_preference_store import YamlPreferenceStore
from super_transcribe.l4_frameworks_and_drivers.container import DependencyContainer
from super_transcribe.l4_frameworks_and_drivers.infra_config import InfraConfig

EXIT_CANCELLED = 130


def _err(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


class ProgressPrinter:
    """Prints whole-percent progress steps and new segments to stderr."""

    def __init__(self) -> None:
        self._last_percent = -1
        self._last_segment = ''

    def __call__(self, state: TranscriptionState) -> None:
        if not state.is_transcribing:
            return
        if state.current_segment and state.current_segment != self._last_segment:
            self._last_segment = state.current_segment
            _err(f'  {state.current_segment}')
        percent = int(state.progress * 100)
        if percent > self._last_percent:
            self._last_percent = percent
            _err(f'  Progress: {percent}%')


def run_file(
    audio_path: Path,
    preferences: YamlPreferenceStore,
    infra: InfraConfig,
    container: DependencyContainer | None = None,
) -> str:
    """Transcribe *audio_path* with the active model. Blocks until done and prints the text."""

    def _on_download(percent: int) -> None:
        _err(f'  Downloading model: {percent}%')

    _container = container or DependencyContainer(
        preferences,
        infra=infra,
        on_change=ProgressPrinter(),
        on_download_progress=_on_download,
    )
    try:
        text = asyncio.run(_transcribe(audio_path, preferences, _container))
    except KeyboardInterrupt as exc:
        _err('Cancelled.')
        raise SystemExit(EXIT_CANCELLED) from exc
    finally:
        _container.close()

    print(text)
    return text


async def _transcribe(audio_path: Path, preferences: YamlPreferenceStore, container: DependencyContainer) -> str:
    orchestrator = container.orchestrator

    _err('Loading model...')
    if not await orchestrator.load_or_reload_model():
        _err(f'Error loading model: {container.sessions.state.last_error}')
        raise SystemExit(1)
    _err(f'Model: {container.sessions.state.model_path} ({container.sessions.current_vendor.display_name})')

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, orchestrator.cancel)
    except NotImplementedError:
        pass  # Windows: KeyboardInterrupt path in run_file

    _err(f'Transcribing: {audio_path}')
    try:
        return await orchestrator.transcribe(audio_path, preferences.transcription_settings())
    except TranscriptionCancelled as exc:
        _err('Cancelled.')
        raise SystemExit(EXIT_CANCELLED) from exc
    except TranscriptionError as exc:
        _err(f'Error: {exc}')
        raise SystemExit(1) from exc
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except NotImplementedError:
            pass
