"""TranscriptionOrchestrator — coordinates one cancellable transcription at a time.

Runs on the asyncio loop that owns all published state. The pipeline itself
executes on a worker thread; progress and partial text come back as messages
scheduled onto the loop and stamped with the request token, so anything from
a cancelled or superseded request is dropped.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from super_transcribe.l1_entities.cancellation import AbortSignal, RequestToken
from super_transcribe.l1_entities.errors import (
    ProcessingFailed,
    TranscriptionBusyError,
    TranscriptionCancelled,
    TranscriptionError,
)
from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l1_entities.state import TranscriptionState
from super_transcribe.l2_use_cases.ports.clipboard import ClipboardSink
from super_transcribe.l2_use_cases.ports.transcript_store import TranscriptStore
from super_transcribe.l2_use_cases.ports.vendor_adapter import AdapterEvent, ProgressUpdate, SegmentUpdate
from super_transcribe.l2_use_cases.transcribe_file_use_case import FileTranscription, TranscribeFileUseCase
from super_transcribe.l3_interface_adapters.controllers.model_session_manager import ModelSessionManager

log = logging.getLogger('stx.orchestrator')

StateListener = Callable[[TranscriptionState], None]


@dataclass
class _ActiveRequest:
    token: RequestToken
    abort: AbortSignal = field(default_factory=AbortSignal)
    future: asyncio.Future | None = None
    teardown: asyncio.Event = field(default_factory=asyncio.Event)
    cancel_requested: bool = False


class TranscriptionOrchestrator:
    """Owns cancellation and progress state for file transcriptions.

    A second ``transcribe`` while one is active is rejected with
    TranscriptionBusyError rather than cancelling the first.
    """

    def __init__(
        self,
        sessions: ModelSessionManager,
        use_case: TranscribeFileUseCase,
        transcript_store: TranscriptStore | None = None,
        clipboard: ClipboardSink | None = None,
        executor: Executor | None = None,
        on_change: StateListener | None = None,
    ) -> None:
        self._sessions = sessions
        self._use_case = use_case
        self._transcript_store = transcript_store
        self._clipboard = clipboard
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix='stx-worker')
        self._on_change = on_change

        self.state = TranscriptionState()
        self._generations = itertools.count(1)
        self._active: _ActiveRequest | None = None
        self._token: RequestToken | None = None

    # --- read-only observable state ---

    @property
    def is_loading(self) -> bool:
        return self._sessions.is_loading

    @property
    def is_transcribing(self) -> bool:
        return self.state.is_transcribing

    @property
    def progress(self) -> float:
        return self.state.progress

    @property
    def current_segment(self) -> str:
        return self.state.current_segment

    @property
    def last_result_text(self) -> str:
        return self.state.transcribed_text

    @property
    def current_token(self) -> RequestToken | None:
        return self._token

    # --- operations ---

    async def load_or_reload_model(self, model_path: str | None = None) -> bool:
        return await self._sessions.load_or_reload(model_path)

    async def transcribe(self, audio_path: Path, settings: TranscriptionSettings) -> str:
        """Transcribe *audio_path* with the current session and return the final text.

        Raises ContextInitializationFailed, AudioConversionFailed, ProcessingFailed
        or TranscriptionCancelled.
        """
        if self._active is not None:
            raise TranscriptionBusyError('A transcription is already in progress')

        lease = self._sessions.acquire()
        request = _ActiveRequest(token=RequestToken(next(self._generations)))
        self._active = request
        self._token = request.token
        self._update(is_transcribing=True, progress=0.0, current_segment='', transcribed_text='')
        log.info(
            'Transcription #%d started: %s (vendor=%s)',
            request.token.generation,
            audio_path,
            lease.session.vendor.display_name,
        )

        loop = asyncio.get_running_loop()

        def emit(event: AdapterEvent) -> None:
            loop.call_soon_threadsafe(self._on_event, request.token, event)

        def on_worker_done(_future) -> None:
            lease.release()
            loop.call_soon_threadsafe(request.teardown.set)

        worker = self._executor.submit(
            self._use_case.execute,
            audio_path,
            settings,
            lease.session.adapter,
            request.abort,
            emit,
        )
        # Fires on completion or on cancellation before the worker started.
        worker.add_done_callback(on_worker_done)
        request.future = asyncio.wrap_future(worker, loop=loop)

        cancelled = False
        try:
            result: FileTranscription = await request.future
            if request.cancel_requested:
                # cancel() landed after the worker had already committed its result
                raise TranscriptionCancelled('Transcription was cancelled')
        except asyncio.CancelledError:
            cancelled = True
            request.abort.set()
            await request.teardown.wait()
            if request.cancel_requested:
                raise TranscriptionCancelled('Transcription was cancelled') from None
            raise
        except TranscriptionCancelled:
            cancelled = True
            raise
        except TranscriptionError as exc:
            log.error('Transcription #%d failed: %s', request.token.generation, exc)
            raise
        except Exception as exc:
            log.error('Transcription #%d failed unexpectedly: %s', request.token.generation, exc, exc_info=True)
            raise ProcessingFailed(f'{type(exc).__name__}: {exc}') from exc
        finally:
            self._finish(request, cancelled=cancelled)

        self._update(transcribed_text=result.text, progress=1.0)
        log.info('Transcription #%d finished (%d chars)', request.token.generation, len(result.text))

        loop.run_in_executor(self._executor, self._persist, result)
        self._insert_into_clipboard(result.text)
        return result.text

    def cancel(self) -> None:
        """Abort the active request. State is reset once its worker has wound down."""
        request = self._active
        if request is None:
            return
        log.info('Cancelling transcription #%d', request.token.generation)
        request.cancel_requested = True
        request.abort.set()
        self._token = None
        if request.future is not None:
            request.future.cancel()

    def shutdown(self) -> None:
        """Cancel the active request, then wait for queued transcript writes."""
        self.cancel()
        self._executor.shutdown(wait=True)

    # --- loop-thread internals ---

    def _finish(self, request: _ActiveRequest, *, cancelled: bool) -> None:
        if self._active is not request:
            return
        self._active = None
        self._token = None
        if cancelled:
            self._update(is_transcribing=False, current_segment='', progress=0.0)
        else:
            self._update(is_transcribing=False, current_segment='')

    def _on_event(self, token: RequestToken, event: AdapterEvent) -> None:
        if token != self._token:
            log.debug('Dropping %s from stale request #%d', type(event).__name__, token.generation)
            return
        if isinstance(event, ProgressUpdate):
            if event.progress > self.state.progress:
                self._update(progress=min(event.progress, 1.0))
        elif isinstance(event, SegmentUpdate):
            self._update(
                current_segment=event.text,
                transcribed_text=self.state.transcribed_text + event.text + '\n',
            )

    def _update(self, **changes) -> None:
        self.state = self.state.model_copy(update=changes)
        if self._on_change is not None:
            self._on_change(self.state)

    def _persist(self, result: FileTranscription) -> None:
        if self._transcript_store is None:
            return
        try:
            self._transcript_store.append(result.text, datetime.now(), result.duration_seconds)
        except Exception:
            log.warning('Failed to persist transcript', exc_info=True)

    def _insert_into_clipboard(self, text: str) -> None:
        if self._clipboard is None:
            return
        try:
            self._clipboard.insert(text)
        except Exception:
            log.warning('Failed to insert transcript into clipboard', exc_info=True)
