"""ModelSessionManager — loads/reloads the speech model and hands out session leases."""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Executor

from super_transcribe.l1_entities.errors import ContextInitializationFailed, ModelResolutionError
from super_transcribe.l1_entities.session import ModelSession, SessionStatus
from super_transcribe.l1_entities.state import SessionState
from super_transcribe.l1_entities.vendor import ModelVendor
from super_transcribe.l2_use_cases.alignment_adapter import AlignmentAdapter
from super_transcribe.l2_use_cases.ports.model_store import ModelStore
from super_transcribe.l2_use_cases.ports.preference_store import PreferenceStore
from super_transcribe.l2_use_cases.ports.speech_engine import EngineLoader
from super_transcribe.l2_use_cases.ports.vendor_adapter import VendorAdapter
from super_transcribe.l2_use_cases.streaming_adapter import StreamingAdapter

log = logging.getLogger('stx.session')


def build_adapter(vendor: ModelVendor, engine) -> VendorAdapter:
    """Select the adapter once per loaded session; callers stay vendor-agnostic."""
    if vendor is ModelVendor.STREAMING:
        return StreamingAdapter(engine)
    return AlignmentAdapter(engine)


class _SessionHandle:
    """Reference-counted owner of one loaded session.

    A retired handle releases the native model when its last lease goes away,
    so a reload never frees a model an in-flight transcription is still using.
    """

    def __init__(self, session: ModelSession) -> None:
        self.session = session
        self._lock = threading.Lock()
        self._refs = 0
        self._retired = False
        self._closed = False

    def retain(self) -> None:
        with self._lock:
            self._refs += 1

    def release(self) -> None:
        with self._lock:
            self._refs -= 1
            should_close = self._should_close()
        if should_close:
            self._close()

    def retire(self) -> None:
        with self._lock:
            self._retired = True
            should_close = self._should_close()
        if should_close:
            self._close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _should_close(self) -> bool:
        # Caller holds the lock.
        if self._retired and self._refs == 0 and not self._closed:
            self._closed = True
            return True
        return False

    def _close(self) -> None:
        log.info('Releasing %s model %s', self.session.vendor.display_name, self.session.model_path)
        try:
            self.session.adapter.close()
        except Exception:
            log.warning('Error while releasing model %s', self.session.model_path, exc_info=True)


class SessionLease:
    """Strong reference to a session for the duration of one request. Release is idempotent."""

    def __init__(self, handle: _SessionHandle) -> None:
        self._handle = handle
        self._released = False
        self._lock = threading.Lock()
        handle.retain()

    @property
    def session(self) -> ModelSession:
        return self._handle.session

    def release(self) -> None:
        with self._lock:
            if self._released:
                return
            self._released = True
        self._handle.release()

    def __enter__(self) -> SessionLease:
        return self

    def __exit__(self, *args) -> None:
        self.release()


class ModelSessionManager:
    """Owns the current session. All public coroutines run on the coordination loop.

    Loads run in the executor; the swap is a single reference assignment on the
    loop, applied only after the load succeeds. When loads overlap, the most
    recently requested one wins and a stale result is discarded.
    """

    def __init__(
        self,
        engine_loader: EngineLoader,
        preferences: PreferenceStore,
        model_store: ModelStore | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._loader = engine_loader
        self._preferences = preferences
        self._model_store = model_store
        self._executor = executor

        self.state = SessionState()
        self._current: _SessionHandle | None = None
        self._requested_generation = 0
        self._applied_generation = 0
        self._in_flight = 0

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    @property
    def current_vendor(self) -> ModelVendor | None:
        return self._current.session.vendor if self._current is not None else None

    @property
    def has_session(self) -> bool:
        return self._current is not None

    def acquire(self) -> SessionLease:
        """Take a lease on the current session. Raises ContextInitializationFailed if none."""
        if self._current is None:
            raise ContextInitializationFailed('No speech model is loaded')
        return SessionLease(self._current)

    async def load(self, model_path: str, vendor: ModelVendor) -> bool:
        """Load *model_path* and swap it in. Failures are recorded, never raised."""
        self._requested_generation += 1
        generation = self._requested_generation
        self._begin_load()
        log.info('Loading %s model: %s', vendor.display_name, model_path)

        loop = asyncio.get_running_loop()
        try:
            try:
                engine = await loop.run_in_executor(self._executor, self._loader.load, model_path, vendor)
            except Exception as exc:
                log.error('Failed to load %s model %s: %s', vendor.display_name, model_path, exc, exc_info=True)
                self.state.last_error = f'{type(exc).__name__}: {exc}'
                return False

            adapter = build_adapter(vendor, engine)
            if generation < self._applied_generation:
                log.info('Discarding superseded load of %s', model_path)
                adapter.close()
                return False

            self._swap(ModelSession(vendor=vendor, adapter=adapter, model_path=model_path), generation)
            log.info('%s model loaded: %s', vendor.display_name, model_path)
            return True
        finally:
            self._end_load()

    async def reload(self, model_path: str) -> bool:
        """Reload with the vendor read from preferences now, not from the previous load."""
        return await self.load(model_path, self._preferences.model_vendor())

    async def load_active(self) -> bool:
        """Resolve the active model through the model store, then load it."""
        if self._model_store is None:
            path = self._preferences.model_path()
            if not path:
                log.warning('No model path set in preferences')
                self.state.last_error = 'No model path set in preferences'
                return False
            return await self.reload(path)

        loop = asyncio.get_running_loop()
        try:
            path, vendor = await loop.run_in_executor(self._executor, self._model_store.resolve_active_path)
        except ModelResolutionError as exc:
            log.error('Failed to resolve model: %s', exc)
            self.state.last_error = str(exc)
            if self._current is None and not self.state.is_loading:
                self.state.status = SessionStatus.FAILED
            return False
        return await self.load(path, vendor)

    async def load_or_reload(self, model_path: str | None = None) -> bool:
        if model_path is None:
            return await self.load_active()
        return await self.reload(model_path)

    def close(self) -> None:
        """Retire the current session; the model is freed once all leases are released."""
        if self._current is not None:
            self._current.retire()
            self._current = None
        self.state.status = SessionStatus.UNLOADED
        self.state.vendor = None
        self.state.model_path = None

    # --- internals (loop thread only) ---

    def _swap(self, session: ModelSession, generation: int) -> None:
        previous = self._current
        self._current = _SessionHandle(session)
        self._applied_generation = generation
        self.state.vendor = session.vendor
        self.state.model_path = session.model_path
        self.state.last_error = ''
        if previous is not None:
            previous.retire()

    def _begin_load(self) -> None:
        self._in_flight += 1
        self.state.is_loading = True
        self.state.status = SessionStatus.LOADING

    def _end_load(self) -> None:
        self._in_flight -= 1
        loading = self._in_flight > 0
        if loading:
            status = SessionStatus.LOADING
        elif self._current is not None:
            status = SessionStatus.READY
        elif self.state.last_error:
            status = SessionStatus.FAILED
        else:
            status = SessionStatus.UNLOADED
        self.state.is_loading = loading
        self.state.status = status
