"""Gateway: native engine loader — implements EngineLoader port."""

from __future__ import annotations

from super_transcribe.l1_entities.vendor import ModelVendor
from super_transcribe.l2_use_cases.ports.speech_engine import AlignmentEngine, StreamingEngine


class NativeEngineLoader:
    """Builds a whisper.cpp or Parakeet engine for a model path. Blocking."""

    def load(self, model_path: str, vendor: ModelVendor) -> StreamingEngine | AlignmentEngine:
        if vendor is ModelVendor.STREAMING:
            from super_transcribe.l3_interface_adapters.gateways.whisper_engine import (  # noqa: PLC0415 -- deferred: native lib loaded on first use
                WhisperEngine,
            )

            engine = WhisperEngine()
            engine.load_model(model_path)
            return engine

        from super_transcribe.l3_interface_adapters.gateways.parakeet_engine import (  # noqa: PLC0415 -- deferred: MLX stack loaded on first use
            ParakeetEngine,
        )

        return ParakeetEngine.load(model_path)
