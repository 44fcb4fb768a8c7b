"""Per-request transcription settings — immutable once a request starts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

AUTO_LANGUAGE = 'auto'
AUTOCORRECT_LANGUAGES = frozenset({'zh', 'ja', 'ko'})


class TranscriptionSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    language: str = 'en'
    translate_to_english: bool = False
    show_timestamps: bool = False
    suppress_blank_audio: bool = False
    temperature: float = Field(default=0.0, ge=0.0, le=1.0)
    no_speech_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    initial_prompt: str = ''
    use_beam_search: bool = False
    beam_size: int = Field(default=5, ge=1, le=10)
    use_asian_autocorrect: bool = True

    @property
    def language_hint(self) -> str | None:
        """Explicit language code, or None when auto-detect is requested."""
        return None if self.language == AUTO_LANGUAGE else self.language

    @property
    def wants_autocorrect(self) -> bool:
        return self.use_asian_autocorrect and self.language in AUTOCORRECT_LANGUAGES
