"""Gateway: Parakeet TDT alignment engine on MLX — implements AlignmentEngine port.

MLX only runs on Apple silicon, so every parakeet_mlx / mlx import is deferred
to the moment a Parakeet model is actually used.
"""

from __future__ import annotations

import logging

import numpy as np

from super_transcribe.l1_entities.transcript import AlignedToken
from super_transcribe.l2_use_cases.ports.speech_engine import AlignmentDecodeOptions

log = logging.getLogger('stx.parakeet')


def _load_model(model_path: str):
    import mlx.core as mx  # noqa: PLC0415 -- deferred: Apple silicon only
    from parakeet_mlx import from_pretrained  # noqa: PLC0415 -- deferred: Apple silicon only

    model = from_pretrained(model_path, dtype=mx.float16)
    # Evaluation mode: running BatchNorm stats, no training-mode randomness.
    model.train(False)
    return model


def _log_mel(audio: np.ndarray, preprocess_config):
    import mlx.core as mx  # noqa: PLC0415 -- deferred: Apple silicon only
    from parakeet_mlx.audio import get_logmel  # noqa: PLC0415 -- deferred: Apple silicon only

    mel = get_logmel(mx.array(audio).astype(mx.float16), preprocess_config)
    if mel.ndim == 2:
        mel = mx.expand_dims(mel, 0)
    return mel


def _decoding_config(options: AlignmentDecodeOptions):
    from parakeet_mlx.parakeet import DecodingConfig, Greedy  # noqa: PLC0415 -- deferred: Apple silicon only

    if options.decoding == 'greedy':
        return DecodingConfig(decoding=Greedy())
    raise ValueError(f'Unsupported decoding mode: {options.decoding}')


class ParakeetEngine:
    """Runs log-mel → encoder → TDT decode on one buffer at a time."""

    def __init__(self, model) -> None:
        self._model = model

    @classmethod
    def load(cls, model_path: str) -> ParakeetEngine:
        model = _load_model(model_path)
        log.info(
            'Parakeet model ready: sample_rate=%s vocabulary=%d',
            model.preprocessor_config.sample_rate,
            len(model.vocabulary),
        )
        return cls(model)

    @property
    def sample_rate(self) -> int:
        if self._model is None:
            raise RuntimeError('Model not loaded.')
        return int(self._model.preprocessor_config.sample_rate)

    def align(self, audio: np.ndarray, options: AlignmentDecodeOptions) -> list[AlignedToken]:
        if self._model is None:
            raise RuntimeError('Model not loaded.')

        # the TDT greedy loop reads its per-frame emission cap from the model
        self._model.max_symbols = options.max_symbols_per_step
        mel = _log_mel(audio, self._model.preprocessor_config)
        features, lengths = self._model.encoder(mel)

        # RNNT blank-as-pad: the decoder starts from the blank id, one past the vocabulary.
        blank_id = len(self._model.vocabulary)
        token_batches, _ = self._model.decode(
            features,
            lengths,
            last_token=[blank_id],
            hidden_state=None,
            config=_decoding_config(options),
        )
        tokens = token_batches[0] if token_batches else []
        return [
            AlignedToken(text=tok.text, start=float(tok.start), end=float(tok.start + tok.duration)) for tok in tokens
        ]

    def close(self) -> None:
        self._model = None
