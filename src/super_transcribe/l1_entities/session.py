"""Model session entities."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from super_transcribe.l1_entities.vendor import ModelVendor


class SessionStatus(enum.Enum):
    UNLOADED = 'unloaded'
    LOADING = 'loading'
    READY = 'ready'
    FAILED = 'failed'


@dataclass(frozen=True)
class ModelSession:
    """A loaded model: vendor tag plus the adapter wrapping the opaque handle."""

    vendor: ModelVendor
    adapter: Any
    model_path: str
    loaded_at: datetime = field(default_factory=datetime.now)
