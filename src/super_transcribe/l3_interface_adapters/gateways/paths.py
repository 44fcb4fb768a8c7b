"""Shared path constants for configuration, models, transcripts and logs."""

from __future__ import annotations

from platformdirs import user_config_path, user_data_path, user_log_path

APP_NAME = 'super-transcribe'

CONFIG_DIR = user_config_path(APP_NAME)
DATA_DIR = user_data_path(APP_NAME)
LOG_DIR = user_log_path(APP_NAME)

DEFAULT_CONFIG_PATHS = [
    CONFIG_DIR / 'config.yaml',
    CONFIG_DIR / 'config.yml',
]

DEFAULT_TRANSCRIPTS_PATH = DATA_DIR / 'transcripts.jsonl'
