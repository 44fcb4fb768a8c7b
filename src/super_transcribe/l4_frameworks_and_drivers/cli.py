"""CLI entry point for super-transcribe."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from super_transcribe import __version__

_VENDOR_CHOICES = ['whisper', 'parakeet']

_config_option = click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True),
    help='Path to YAML config file.',
)


def _build_overrides(
    model: str | None,
    vendor: str | None,
    language: str | None,
    timestamps: bool | None,
    copy: bool | None,
    debug: bool,
) -> dict:
    overrides: dict = {}
    if model is not None:
        overrides.setdefault('model', {})['path'] = model
    if vendor is not None:
        overrides.setdefault('model', {})['vendor'] = vendor
    if language is not None:
        overrides.setdefault('transcription', {})['language'] = language
    if timestamps is not None:
        overrides.setdefault('transcription', {})['show_timestamps'] = timestamps
    if copy is not None:
        overrides.setdefault('output', {})['copy_to_clipboard'] = copy
    if debug:
        overrides['debug'] = True
    return overrides


@click.group()
@click.version_option(version=__version__)
def cli():
    """super-transcribe -- transcribe audio files with whisper.cpp or Parakeet."""


@cli.command()
@click.argument('audio_file', type=click.Path(exists=True, dir_okay=False))
@_config_option
@click.option('-m', '--model', default=None, help='Model file path, whisper.cpp model name or Parakeet repo id.')
@click.option('--vendor', type=click.Choice(_VENDOR_CHOICES), default=None, help='Speech model family.')
@click.option('-l', '--language', default=None, help="Spoken language code, or 'auto' to detect.")
@click.option('--timestamps/--no-timestamps', default=None, help='Prefix each line with its time range.')
@click.option('--copy/--no-copy', default=None, help='Copy the transcript to the clipboard.')
@click.option('--debug', is_flag=True, default=False, help='Write debug-level logs.')
def transcribe(audio_file, config_path, model, vendor, language, timestamps, copy, debug):
    """Transcribe AUDIO_FILE and print the text to stdout."""
    from pydantic import ValidationError  # noqa: PLC0415 -- deferred: not needed for --help

    from super_transcribe.l3_interface_adapters.gateways.paths import (  # noqa: PLC0415 -- deferred: not needed for --help
        LOG_DIR,
    )
    from super_transcribe.l3_interface_adapters.gateways.yaml_preference_store import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlPreferenceStore,
        load_raw,
    )
    from super_transcribe.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
        InfraConfig,
        build_preferences,
    )
    from super_transcribe.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: not needed for --help
        setup_file_logging,
    )

    overrides = _build_overrides(model, vendor, language, timestamps, copy, debug)
    store = YamlPreferenceStore(build_preferences, config_path, overrides or None)
    try:
        raw = load_raw(config_path, overrides or None)
        prefs = build_preferences(raw)
        infra = InfraConfig.model_validate(raw)
    except FileNotFoundError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)
    except ValidationError as e:
        click.echo(f'Error: invalid configuration\n{e}', err=True)
        sys.exit(1)

    setup_file_logging(Path(prefs.log_dir) if prefs.log_dir else LOG_DIR, debug=prefs.debug)

    from super_transcribe.l4_frameworks_and_drivers.batch_runner import (  # noqa: PLC0415 -- deferred: speech stack not loaded on --help
        run_file,
    )

    run_file(audio_path=Path(audio_file), preferences=store, infra=infra)


@cli.command()
@_config_option
@click.option('--vendor', type=click.Choice(_VENDOR_CHOICES), default=None, help='Only list this model family.')
def models(config_path, vendor):
    """List installed models."""
    from super_transcribe.l1_entities.vendor import ModelVendor  # noqa: PLC0415 -- deferred: not needed for --help
    from super_transcribe.l3_interface_adapters.gateways.hf_model_store import (  # noqa: PLC0415 -- deferred: HF stack not loaded on --help
        HfModelStore,
    )
    from super_transcribe.l3_interface_adapters.gateways.paths import (  # noqa: PLC0415 -- deferred: not needed for --help
        DATA_DIR,
    )
    from super_transcribe.l3_interface_adapters.gateways.yaml_preference_store import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlPreferenceStore,
        load_raw,
    )
    from super_transcribe.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
        InfraConfig,
        build_preferences,
    )

    try:
        infra = InfraConfig.model_validate(load_raw(config_path))
    except FileNotFoundError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    store = HfModelStore(
        YamlPreferenceStore(build_preferences, config_path),
        base_dir=Path(infra.models_dir) if infra.models_dir else DATA_DIR,
    )
    vendors = [ModelVendor(vendor)] if vendor else list(ModelVendor)
    for v in vendors:
        click.echo(f'{v.display_name}:')
        installed = store.available_models(v)
        if not installed:
            click.echo('  (none installed)')
        for name in installed:
            click.echo(f'  {name}')
