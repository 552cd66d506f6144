"""CLI entry point for voice-relay."""

from __future__ import annotations

import asyncio
import sys
import threading

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from voice_relay import __version__
from voice_relay.l1_entities.capture import BackendKind
from voice_relay.l1_entities.errors import VoiceRelayError
from voice_relay.l1_entities.provider import Provider

console = Console()
err_console = Console(stderr=True)


class ConsolePermissionAdvisor:
    """Prints the microphone advisory once; never waits for input."""

    def show(self) -> None:
        err_console.print(
            '[yellow]voice-relay uses your microphone.[/yellow] '
            'If nothing is captured, grant microphone access to this terminal in your system settings.'
        )


def _fail(error: Exception) -> None:
    err_console.print(f'[red]Error:[/red] {error}', highlight=False)
    hint = getattr(error, 'hint', '')
    if hint:
        err_console.print(f'[dim]{hint}[/dim]', highlight=False)
    sys.exit(1)


def _build_container(config_path: str | None, advisor=None, overrides: dict | None = None):  # noqa: ANN001, ANN202 -- composition root
    from voice_relay.l3_interface_adapters.gateways.paths import (  # noqa: PLC0415 -- deferred: platformdirs not touched on --help
        LOG_DIR,
    )
    from voice_relay.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: audio/whisper stack not loaded on --help
        DependencyContainer,
    )
    from voice_relay.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
        InfraConfig,
        build_app_config,
    )
    from voice_relay.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: not needed for --help
        setup_file_logging,
    )

    raw = DependencyContainer.config_loader().load_raw(config_path, overrides=overrides)
    config = build_app_config(raw)
    infra = InfraConfig.model_validate(raw)
    setup_file_logging(LOG_DIR)
    return DependencyContainer(config, infra, advisor=advisor)


def _load(ctx: click.Context, advisor=None, overrides: dict | None = None):  # noqa: ANN001, ANN202
    try:
        return _build_container(ctx.obj.get('config_path'), advisor=advisor, overrides=overrides)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)


@click.group()
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Path to YAML config file.',
)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, config_path):
    """voice-relay -- capture speech and turn it into text, locally or through a cloud provider."""
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


def _capture_overrides(mode: str | None, language: str | None) -> dict | None:
    capture: dict = {}
    if mode:
        capture['strategy'] = mode
    if language:
        capture['language'] = language
    return {'capture': capture} if capture else None


@cli.command()
@click.option('-p', '--provider', type=click.Choice([p.value for p in Provider]), default=None, help='Override provider.')
@click.option('-m', '--mode', type=click.Choice([k.value for k in BackendKind]), default=None, help='Capture mode.')
@click.option('-l', '--language', default=None, help="Locale tag, e.g. 'pt-BR'.")
@click.option('--suggest', is_flag=True, help='Suggest follow-up actions for the transcript.')
@click.pass_context
def listen(ctx, provider, mode, language, suggest):
    """Capture one utterance. Enter stops; silence stops the recorder automatically."""
    container = _load(ctx, advisor=ConsolePermissionAdvisor(), overrides=_capture_overrides(mode, language))
    selected = Provider(provider) if provider else None
    transcript = asyncio.run(_run_listen(container, selected, suggest))
    if transcript is None:
        sys.exit(1)


async def _run_listen(container, provider: Provider | None, suggest: bool) -> str | None:  # noqa: ANN001
    from voice_relay.l1_entities.session_events import (  # noqa: PLC0415 -- deferred: keeps --help light
        FinalChunkAppended,
        InterimTextUpdated,
        SessionCompleted,
        SessionFailed,
    )

    controller = container.controller
    selection = container.selection(provider)
    channel = controller.subscribe()
    try:
        await controller.start(selection)
    except VoiceRelayError as e:
        _fail(e)

    loop = asyncio.get_running_loop()

    def _wait_for_enter() -> None:
        sys.stdin.readline()
        loop.call_soon_threadsafe(lambda: asyncio.ensure_future(_stop_quietly(controller)))

    threading.Thread(target=_wait_for_enter, name='vr-stdin', daemon=True).start()
    err_console.print('[bold green]● Listening[/bold green] [dim](press Enter to stop)[/dim]')

    transcript: str | None = None
    async for event in channel:
        match event:
            case InterimTextUpdated(text=text):
                err_console.print(f'[dim]… {text}[/dim]', highlight=False)
            case FinalChunkAppended(text=text):
                err_console.print(text, highlight=False)
            case SessionCompleted(transcript=text):
                transcript = text
            case SessionFailed(error=error):
                await controller.close()
                _fail(error)

    await controller.close()
    console.print(transcript or '', highlight=False)

    if suggest and transcript:
        actions = await container.suggest_actions(selection.provider).execute(
            transcript, container.config.provider.suggestion_model
        )
        for i, action in enumerate(actions, start=1):
            console.print(f'  {i}. {action}', highlight=False)
    return transcript


async def _stop_quietly(controller) -> None:  # noqa: ANN001
    try:
        await controller.stop()
    except VoiceRelayError:
        pass  # surfaced as SessionFailed on the event channel


@cli.command()
@click.option('-p', '--provider', type=click.Choice([p.value for p in Provider]), default=None, help='Override provider.')
@click.pass_context
def tui(ctx, provider):
    """Interactive capture UI."""
    from voice_relay.l4_frameworks_and_drivers.apps import (  # noqa: PLC0415 -- deferred: Textual not loaded for --help
        ListenApp,
    )
    from voice_relay.l4_frameworks_and_drivers.widgets.permission_advisory import (  # noqa: PLC0415 -- deferred: Textual not loaded for --help
        TuiPermissionAdvisor,
    )

    advisor = TuiPermissionAdvisor()
    container = _load(ctx, advisor=advisor)
    selected = Provider(provider) if provider else None
    app = ListenApp(
        controller=container.controller,
        selection=container.selection(selected),
        model_manager=container.model_manager,
        suggest_actions=container.suggest_actions(selected),
        suggestion_model=container.config.provider.suggestion_model,
        advisor=advisor,
    )
    transcript = app.run()
    if transcript:
        console.print(transcript, highlight=False)


@cli.group()
def models():
    """Manage local whisper models."""


@models.command('list')
@click.pass_context
def list_models(ctx):
    """Show known models, install state and the active selection."""
    container = _load(ctx)
    manager = container.model_manager
    descriptors = asyncio.run(manager.list_models())
    active = manager.active_model

    table = Table(title='Whisper models')
    table.add_column('Name')
    table.add_column('Size')
    table.add_column('RAM')
    table.add_column('Installed')
    table.add_column('Active')
    for d in descriptors:
        table.add_row(
            d.name,
            d.size_description,
            d.ram_description,
            'yes' if d.installed else 'no',
            '*' if d.name == active else '',
        )
    console.print(table)


@models.command('download')
@click.argument('name')
@click.pass_context
def download_model(ctx, name):
    """Download a whisper model."""
    container = _load(ctx)
    try:
        asyncio.run(_run_download(container.model_manager, name))
    except Exception as e:  # noqa: BLE001 -- hub client errors are reported the same way as ours
        _fail(e)
    console.print(f'Installed {name}')


async def _run_download(manager, name: str) -> None:  # noqa: ANN001
    stream = manager.download(name)
    with Progress(TextColumn('{task.description}'), BarColumn(), TaskProgressColumn(), console=err_console) as bar:
        task = bar.add_task(f'Downloading {name}', total=100)
        async for progress in stream:
            bar.update(task, completed=progress.percentage)


@models.command('select')
@click.argument('name')
@click.pass_context
def select_model(ctx, name):
    """Make an installed model the one used for local inference."""
    container = _load(ctx)
    try:
        container.model_manager.select_active(name)
    except VoiceRelayError as e:
        _fail(e)
    console.print(f'Active model: {name}')
