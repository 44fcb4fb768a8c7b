"""Preference defaults and infrastructure configs — lives in L4, not domain."""

from __future__ import annotations

import copy

from pydantic import BaseModel, Field

from super_transcribe.l1_entities.config import AppPreferences
from super_transcribe.l3_interface_adapters.gateways.yaml_preference_store import deep_merge

PREFERENCE_DEFAULTS: dict = {
    'model': {
        'path': None,
        'vendor': 'whisper',
    },
    'transcription': {
        'language': 'en',
        'translate_to_english': False,
        'show_timestamps': False,
        'suppress_blank_audio': False,
        'temperature': 0.0,
        'no_speech_threshold': 0.6,
        'initial_prompt': '',
        'use_beam_search': False,
        'beam_size': 5,
        'use_asian_autocorrect': True,
    },
    'output': {
        'copy_to_clipboard': True,
        'transcripts_file': None,
    },
    'log_dir': None,
    'debug': False,
}


def build_preferences(raw: dict) -> AppPreferences:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(PREFERENCE_DEFAULTS)
    deep_merge(merged, raw)
    return AppPreferences.model_validate(merged)


class InfraConfig(BaseModel):
    """Groups runtime resource settings outside the domain layer."""

    models_dir: str | None = None  # None → platform data dir
    worker_threads: int = Field(default=2, ge=1)
    # ffmpeg gets audio_decode_timeout + audio_decode_seconds_per_mb * source size in MB
    audio_decode_timeout: float = Field(default=60.0, gt=0)
    audio_decode_seconds_per_mb: float = Field(default=2.0, ge=0)
