"""Use case: clean raw backend text into the final user-visible string."""

from __future__ import annotations

import logging

from super_transcribe.l1_entities.settings import TranscriptionSettings
from super_transcribe.l2_use_cases.ports.autocorrector import Autocorrector

log = logging.getLogger('stx.postprocess')

NON_SPEECH_MARKERS = ('[MUSIC]', '[BLANK_AUDIO]')
NO_SPEECH_TEXT = 'No speech detected in the audio'


def strip_markers(text: str) -> str:
    for marker in NON_SPEECH_MARKERS:
        text = text.replace(marker, '')
    return text


class PostProcessor:
    def __init__(self, autocorrector: Autocorrector | None = None) -> None:
        self._autocorrector = autocorrector

    def process(self, raw: str, settings: TranscriptionSettings) -> str:
        text = strip_markers(raw).strip()

        if text and settings.wants_autocorrect and self._autocorrector is not None:
            text = self._autocorrector.format(text)
            log.debug('Applied autocorrect for language=%s', settings.language)

        return text or NO_SPEECH_TEXT
