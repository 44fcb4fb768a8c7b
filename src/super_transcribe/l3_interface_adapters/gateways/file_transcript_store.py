"""Gateway: JSON-lines transcript history — implements TranscriptStore port."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from super_transcribe.l1_entities.transcript import TranscriptRecord

log = logging.getLogger('stx.store')


class FileTranscriptStore:
    """Appends one JSON object per completed transcription."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, text: str, timestamp: datetime, duration_seconds: float) -> None:
        record = TranscriptRecord(text=text, timestamp=timestamp, duration_seconds=duration_seconds)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open('a', encoding='utf-8') as f:
            f.write(record.model_dump_json() + '\n')
        log.debug('Appended transcript (%d chars, %.1fs) to %s', len(text), duration_seconds, self._path.name)

    def read_all(self) -> list[TranscriptRecord]:
        if not self._path.exists():
            return []
        records: list[TranscriptRecord] = []
        for line in self._path.read_text(encoding='utf-8').splitlines():
            if line.strip():
                records.append(TranscriptRecord.model_validate_json(line))
        return records
