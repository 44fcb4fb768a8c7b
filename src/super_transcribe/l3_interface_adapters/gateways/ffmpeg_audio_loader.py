"""Gateway: ffmpeg-backed AudioLoader — any container/codec in, 16 kHz mono float32 out."""

from __future__ import annotations

import logging
import shutil
import subprocess  # noqa: S404 -- intentional: fixed argument list, never shell=True
from pathlib import Path

import numpy as np

from super_transcribe.l1_entities.audio_constants import SAMPLE_RATE
from super_transcribe.l1_entities.errors import AudioConversionFailed

log = logging.getLogger('stx.audio')

_BYTES_PER_SAMPLE = 4  # f32le
_MEGABYTE = 1024 * 1024


def ffmpeg_command(binary: str, path: Path) -> list[str]:
    """Decode the first audio stream of *path* to raw little-endian float32 on stdout.

    ffmpeg does the down-mix (``-ac 1``) and the resample (``-ar``) itself.
    """
    return [
        binary,
        '-nostdin',
        '-hide_banner',
        '-v', 'error',
        '-i', str(path),
        '-map', '0:a:0',
        '-ac', '1',
        '-ar', str(SAMPLE_RATE),
        '-f', 'f32le',
        'pipe:1',
    ]  # fmt: skip


class FfmpegAudioLoader:
    """AudioLoader that shells out to ffmpeg.

    Every failure, from a missing file to a stream with no decodable frames,
    surfaces as AudioConversionFailed. The subprocess timeout grows with the
    size of the source file so long recordings are not cut off.
    """

    def __init__(self, base_timeout: float = 60.0, seconds_per_mb: float = 2.0, binary: str = 'ffmpeg') -> None:
        self._base_timeout = base_timeout
        self._seconds_per_mb = seconds_per_mb
        self._binary = binary

    def timeout_for(self, size_bytes: int) -> float:
        return self._base_timeout + self._seconds_per_mb * size_bytes / _MEGABYTE

    def __call__(self, path: Path) -> np.ndarray:
        if not path.is_file():
            raise AudioConversionFailed(f'Cannot open audio file: {path}')

        binary = shutil.which(self._binary)
        if binary is None:
            raise AudioConversionFailed(
                f'{self._binary} is required to decode audio but was not found on PATH '
                '(macOS: brew install ffmpeg, Debian: apt install ffmpeg)'
            )

        timeout = self.timeout_for(path.stat().st_size)
        pcm = self._run(ffmpeg_command(binary, path), path, timeout)

        # a stream cut mid-sample leaves a ragged tail
        usable = len(pcm) - len(pcm) % _BYTES_PER_SAMPLE
        samples = np.frombuffer(pcm[:usable], dtype='<f4')
        if samples.size == 0:
            raise AudioConversionFailed(f'No readable audio frames in {path}')

        log.debug(
            'Decoded %s: %d samples (%.1fs, timeout %.0fs)', path.name, samples.size, samples.size / SAMPLE_RATE, timeout
        )
        return samples

    @staticmethod
    def _run(cmd: list[str], path: Path, timeout: float) -> bytes:
        try:
            proc = subprocess.run(cmd, capture_output=True, timeout=timeout, check=False)  # noqa: S603
        except subprocess.TimeoutExpired as exc:
            raise AudioConversionFailed(f'Decoding {path.name} did not finish within {timeout:.0f}s') from exc
        except OSError as exc:
            raise AudioConversionFailed(f'Could not start ffmpeg: {exc}') from exc

        if proc.returncode != 0:
            detail = proc.stderr.decode('utf-8', errors='replace').strip().splitlines()
            reason = detail[-1] if detail else f'exit status {proc.returncode}'
            raise AudioConversionFailed(f'Could not decode {path.name}: {reason}')
        return proc.stdout
