"""Gateway: whisper.cpp streaming engine — implements StreamingEngine port."""

from __future__ import annotations

import contextlib
import logging
import os
from collections.abc import Callable

import numpy as np
from pywhispercpp.model import Model

from super_transcribe.l1_entities.cancellation import AbortSignal
from super_transcribe.l1_entities.transcript import TranscriptSegment
from super_transcribe.l2_use_cases.ports.speech_engine import StreamingDecodeOptions

log = logging.getLogger('stx.whisper')

GREEDY = 0
BEAM_SEARCH = 1


@contextlib.contextmanager
def _suppress_c_stdout():
    """Redirect C-level stdout and stderr to /dev/null.

    whisper.cpp prints init/progress messages directly via C fprintf,
    bypassing Python's sys.stdout.
    """
    devnull = os.open(os.devnull, os.O_WRONLY)
    old_stdout = os.dup(1)
    old_stderr = os.dup(2)
    try:
        os.dup2(devnull, 1)
        os.dup2(devnull, 2)
        yield
    finally:
        os.dup2(old_stdout, 1)
        os.dup2(old_stderr, 2)
        os.close(devnull)
        os.close(old_stdout)
        os.close(old_stderr)


def _to_segment(seg) -> TranscriptSegment:
    # pywhispercpp reports t0/t1 in centiseconds
    return TranscriptSegment(text=seg.text.strip(), start=seg.t0 / 100.0, end=seg.t1 / 100.0)


class WhisperEngine:
    """pywhispercpp adapter. Handles model loading, C stdout suppression,
    sampling strategy switching and centisecond-to-seconds conversion."""

    def __init__(self) -> None:
        self._model: Model | None = None
        self._model_path: str | None = None
        self._strategy = GREEDY

    def close(self) -> None:
        """Explicitly release the model, suppressing C-level teardown noise."""
        if self._model is not None:
            with _suppress_c_stdout():
                del self._model
                self._model = None

    def load_model(self, model_path: str, strategy: int = GREEDY) -> None:
        with _suppress_c_stdout():
            self._model = Model(
                model_path,
                params_sampling_strategy=strategy,
                print_progress=False,
                print_realtime=False,
            )
        self._model_path = model_path
        self._strategy = strategy

    def transcribe(
        self,
        audio: np.ndarray,
        options: StreamingDecodeOptions,
        on_segment: Callable[[TranscriptSegment], None],
        abort: AbortSignal,
    ) -> list[TranscriptSegment]:
        if self._model is None:
            raise RuntimeError('Model not loaded. Call load_model() first.')

        self._use_strategy(BEAM_SEARCH if options.use_beam_search else GREEDY)

        kwargs: dict = {
            'language': options.language or 'auto',
            'translate': options.translate,
            'no_timestamps': not options.timestamps,
            'suppress_blank': options.suppress_blank,
            'temperature': options.temperature,
            'no_speech_thold': options.no_speech_threshold,
            'n_threads': options.n_threads,
            'print_progress': False,
            'print_realtime': False,
            # whisper_full polls this between encoder/decoder steps and bails out once it returns True
            'abort_callback': abort.is_set,
        }
        if options.initial_prompt:
            kwargs['initial_prompt'] = options.initial_prompt
        if options.use_beam_search:
            kwargs['beam_search'] = {'beam_size': options.beam_size, 'patience': -1.0}

        def _on_new_segment(seg) -> None:
            # a segment may already be in flight when the abort lands
            if abort.is_set():
                return
            segment = _to_segment(seg)
            if segment.text:
                on_segment(segment)

        with _suppress_c_stdout():
            raw_segments = self._model.transcribe(audio, new_segment_callback=_on_new_segment, **kwargs)

        result = [_to_segment(seg) for seg in raw_segments]
        return [seg for seg in result if seg.text]

    def _use_strategy(self, strategy: int) -> None:
        if strategy == self._strategy:
            return
        # the sampling strategy is fixed when pywhispercpp builds its params, so rebuild the model
        label = 'beam search' if strategy == BEAM_SEARCH else 'greedy'
        log.debug('Reloading %s for %s sampling', self._model_path, label)
        self.close()
        self.load_model(self._model_path, strategy)
