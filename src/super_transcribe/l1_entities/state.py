"""Observable state published by the orchestrator and the session manager."""

from __future__ import annotations

from pydantic import BaseModel, Field

from super_transcribe.l1_entities.session import SessionStatus
from super_transcribe.l1_entities.vendor import ModelVendor


class TranscriptionState(BaseModel):
    is_transcribing: bool = False
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    current_segment: str = ''
    transcribed_text: str = ''


class SessionState(BaseModel):
    status: SessionStatus = SessionStatus.UNLOADED
    is_loading: bool = False
    vendor: ModelVendor | None = None
    model_path: str | None = None
    last_error: str = ''
