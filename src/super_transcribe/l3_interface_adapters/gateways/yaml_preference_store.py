"""Gateway: YAML preferences — implements PreferenceStore port."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import yaml

from super_transcribe.l1_entities.config import AppPreferences
from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l1_entities.vendor import ModelVendor
from super_transcribe.l3_interface_adapters.gateways.paths import DEFAULT_CONFIG_PATHS


class YamlPreferenceStore:
    """Reads preferences from YAML on every call, so edits apply to the next request.

    *build* turns the raw merged dict into validated preferences; the
    composition root supplies one that layers in the application defaults.
    """

    def __init__(
        self,
        build: Callable[[dict], AppPreferences],
        config_path: str | None = None,
        overrides: dict | None = None,
    ) -> None:
        self._build = build
        self._config_path = config_path
        self._overrides = overrides

    def load(self) -> AppPreferences:
        return self._build(load_raw(self._config_path, self._overrides))

    def transcription_settings(self) -> TranscriptionSettings:
        return self.load().transcription

    def model_vendor(self) -> ModelVendor:
        return self.load().model.vendor

    def model_path(self) -> str | None:
        return self.load().model.path


def load_raw(
    config_path: str | None = None,
    overrides: dict | None = None,
) -> dict:
    """Resolve, read, and merge YAML preferences into a plain dict."""
    data: dict = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f'Config file not found: {path}')
        data = yaml.safe_load(path.read_text(encoding='utf-8')) or {}
    else:
        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                data = yaml.safe_load(default_path.read_text(encoding='utf-8')) or {}
                break
    if overrides:
        deep_merge(data, overrides)
    return data


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base
