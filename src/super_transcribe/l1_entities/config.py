"""Preference Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

from pydantic import BaseModel

from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l1_entities.vendor import ModelVendor


class ModelPreferences(BaseModel):
    path: str | None = None  # absolute path, whisper.cpp model name or HF repo id
    vendor: ModelVendor


class OutputPreferences(BaseModel):
    copy_to_clipboard: bool
    transcripts_file: str | None = None  # None → platform data dir


class AppPreferences(BaseModel):
    model: ModelPreferences
    transcription: TranscriptionSettings
    output: OutputPreferences
    log_dir: str | None = None
    debug: bool = False
