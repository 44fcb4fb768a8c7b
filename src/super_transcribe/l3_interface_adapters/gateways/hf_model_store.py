"""Gateway: HuggingFace-backed model store — implements ModelStore port."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from huggingface_hub import hf_hub_download, snapshot_download

from super_transcribe.l1_entities.errors import ModelResolutionError
from super_transcribe.l1_entities.vendor import ModelVendor
from super_transcribe.l2_use_cases.ports.preference_store import PreferenceStore
from super_transcribe.l3_interface_adapters.gateways.paths import DATA_DIR

log = logging.getLogger('stx.models')

WHISPER_CPP_REPO = 'ggerganov/whisper.cpp'
WHISPER_CPP_MODELS = {
    'large-v3-turbo-q8_0': 'ggml-large-v3-turbo-q8_0.bin',
    'large-v3-turbo-q5_0': 'ggml-large-v3-turbo-q5_0.bin',
    'large-v3-turbo': 'ggml-large-v3-turbo.bin',
    'large-v3-q5_0': 'ggml-large-v3-q5_0.bin',
    'large-v3': 'ggml-large-v3.bin',
    'medium-q8_0': 'ggml-medium-q8_0.bin',
    'medium-q5_0': 'ggml-medium-q5_0.bin',
    'small-q8_0': 'ggml-small-q8_0.bin',
    'small-q5_1': 'ggml-small-q5_1.bin',
    'base': 'ggml-base.bin',
    'tiny': 'ggml-tiny.bin',
}

PARAKEET_ORG = 'mlx-community'
PARAKEET_REQUIRED_FILES = ('config.json', 'model.safetensors', 'tokenizer.model', 'tokenizer.vocab', 'vocab.txt')

_VENDOR_DIRS = {
    ModelVendor.STREAMING: 'whisper-models',
    ModelVendor.ALIGNMENT: 'parakeet-models',
}


def _make_progress_class(callback: Callable[[int], None]) -> type:
    """Create a tqdm-compatible class that reports download progress via *callback*."""

    class _ProgressReporter:
        def __init__(self, *args, **kwargs):
            self.total: int = kwargs.get('total', 0) or 0
            self.n: int = 0
            if self.total > 0:
                callback(0)

        def update(self, n: int = 1) -> None:
            self.n += n
            if self.total > 0:
                callback(min(int(self.n / self.total * 100), 100))

        def close(self) -> None:
            pass

        def set_description(self, *a, **kw) -> None:
            pass

        def set_description_str(self, *a, **kw) -> None:
            pass

        def refresh(self) -> None:
            pass

        def __enter__(self):
            return self

        def __exit__(self, *args):
            self.close()

    return _ProgressReporter


class HfModelStore:
    """Resolves the active model preference to a local path, downloading from HF if needed.

    The preference may hold an absolute path, a whisper.cpp model name
    (``large-v3-turbo-q8_0``) or a Parakeet repository id
    (``mlx-community/parakeet-tdt-0.6b-v2``).
    """

    def __init__(
        self,
        preferences: PreferenceStore,
        base_dir: Path = DATA_DIR,
        on_progress: Callable[[int], None] | None = None,
    ) -> None:
        self._preferences = preferences
        self._base_dir = base_dir
        self._on_progress = on_progress

    def models_directory(self, vendor: ModelVendor) -> Path:
        directory = self._base_dir / _VENDOR_DIRS[vendor]
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def resolve_active_path(self) -> tuple[str, ModelVendor]:
        vendor = self._preferences.model_vendor()
        name = self._preferences.model_path()
        if not name:
            raise ModelResolutionError('No model selected in preferences')
        return self.resolve(name, vendor), vendor

    def resolve(self, name: str, vendor: ModelVendor) -> str:
        if Path(name).is_absolute():
            if not Path(name).exists():
                raise ModelResolutionError(f'Model file not found: {name}')
            return name

        tqdm_class = _make_progress_class(self._on_progress) if self._on_progress else None

        if vendor is ModelVendor.STREAMING:
            if name in WHISPER_CPP_MODELS:
                return self._download_whisper_cpp(name, tqdm_class=tqdm_class)
            local = self.models_directory(vendor) / name
            if local.exists():
                return str(local)
            raise ModelResolutionError(f'Unknown whisper model: {name}')

        if self.is_model_downloaded(name):
            return str(self.model_directory(name))
        if '/' not in name:
            raise ModelResolutionError(f'Not a Parakeet repository id: {name}')
        return self._download_parakeet(name, tqdm_class=tqdm_class)

    def model_directory(self, repository_id: str) -> Path:
        return self.models_directory(ModelVendor.ALIGNMENT) / repository_id

    def is_model_downloaded(self, repository_id: str) -> bool:
        directory = self.model_directory(repository_id)
        return all((directory / name).exists() for name in PARAKEET_REQUIRED_FILES)

    def available_models(self, vendor: ModelVendor) -> list[str]:
        """Installed models for *vendor*, sorted."""
        if vendor is ModelVendor.STREAMING:
            return sorted(p.name for p in self.models_directory(vendor).glob('ggml-*.bin'))

        org_dir = self.models_directory(vendor) / PARAKEET_ORG
        if not org_dir.is_dir():
            return []
        models: list[str] = []
        for entry in org_dir.iterdir():
            if not entry.is_dir() or entry.name.startswith('.'):
                continue
            repository_id = f'{PARAKEET_ORG}/{entry.name}'
            if self.is_model_downloaded(repository_id):
                models.append(repository_id)
        return sorted(models)

    def _download_whisper_cpp(self, name: str, *, tqdm_class: type | None = None) -> str:
        filename = WHISPER_CPP_MODELS[name]
        cache_dir = self.models_directory(ModelVendor.STREAMING)
        local_path = cache_dir / filename
        if local_path.exists():
            return str(local_path)
        log.info('Downloading %s from %s', filename, WHISPER_CPP_REPO)
        kwargs: dict = dict(repo_id=WHISPER_CPP_REPO, filename=filename, local_dir=cache_dir)
        if tqdm_class is not None:
            kwargs['tqdm_class'] = tqdm_class
        return hf_hub_download(**kwargs)

    def _download_parakeet(self, repository_id: str, *, tqdm_class: type | None = None) -> str:
        target = self.model_directory(repository_id)
        target.mkdir(parents=True, exist_ok=True)
        log.info('Downloading %s', repository_id)
        kwargs: dict = dict(repo_id=repository_id, local_dir=target)
        if tqdm_class is not None:
            kwargs['tqdm_class'] = tqdm_class
        path = snapshot_download(**kwargs)
        if not self.is_model_downloaded(repository_id):
            raise ModelResolutionError(f'Downloaded model is missing required files: {repository_id}')
        return str(path)
