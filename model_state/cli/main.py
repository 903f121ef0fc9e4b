"""model-state CLI interface."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import click  # type: ignore[import-not-found]
from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from model_state.core.exceptions import ModelStateError
from model_state.core.models import ModelRef, PreferenceState
from model_state.core.preferences import PreferenceStore
from model_state.core.settings import get_settings
from model_state.storage.codec import serialize
from model_state.storage.store import StateStorage

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the model-state CLI.

    The level comes from ``settings.log_level``.

    Args:
        verbose: Lower the level to at most INFO
    """
    settings = get_settings()
    log_level = logging.getLevelName(settings.log_level)
    if verbose:
        log_level = min(log_level, logging.INFO)
    log_format = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
    date_format = "%H:%M:%S"

    logging.basicConfig(
        level=log_level, format=log_format, datefmt=date_format, stream=sys.stderr, force=True
    )

    if settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)


def run_async(coro: Any) -> Any:
    """Helper to run async function in sync context"""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        sys.exit(130)
    except ModelStateError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def _model_ref(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[ModelRef]:
    if value is None:
        return None
    try:
        return ModelRef.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param)


def _storage(ctx: click.Context) -> StateStorage:
    return StateStorage(ctx.obj["state_file"])


def _update(ctx: click.Context, fn: Callable[[PreferenceStore], Any]) -> PreferenceState:
    return run_async(_storage(ctx).update(fn))


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--state-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="State file to use instead of the platform default",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, state_file: Optional[Path], verbose: bool) -> None:
    """Inspect and update recent, favorite and variant model preferences"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["state_file"] = state_file if state_file is not None else get_settings().state_file_path()


@cli.command()
@click.pass_context
def path(ctx: click.Context) -> None:
    """Print the state file location"""
    click.echo(str(ctx.obj["state_file"]))


def _refs_table(title: str, refs: list[ModelRef], state: PreferenceState) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Provider", style="cyan")
    table.add_column("Model", style="green")
    table.add_column("Variant", style="magenta")
    for index, ref in enumerate(refs, start=1):
        table.add_row(str(index), ref.provider_id, ref.model_id, state.variant_for(ref) or "")
    return table


@cli.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Output format (default: from settings)",
)
@click.pass_context
def show(ctx: click.Context, output_format: Optional[str]) -> None:
    """Show recent models, favorites and variants without modifying them"""
    state: PreferenceState = run_async(_storage(ctx).load())
    output_format = output_format or get_settings().output_format

    if output_format == "json":
        click.echo(serialize(state))
        return

    if not state.recent and not state.favorite and not state.variant:
        console.print("[yellow]No model preferences recorded yet[/yellow]")
        return

    console.print(_refs_table("Recent", state.recent, state))
    console.print(_refs_table("Favorites", state.favorite, state))

    if state.variant:
        variants = Table(title="Variants")
        variants.add_column("Model", style="cyan")
        variants.add_column("Variant", style="magenta")
        for key, name in state.variant.items():
            variants.add_row(key, name)
        console.print(variants)


@cli.command()
@click.argument("model", callback=_model_ref)
@click.pass_context
def use(ctx: click.Context, model: ModelRef) -> None:
    """Record MODEL (provider/model) as the most recently used"""
    _update(ctx, lambda store: store.record_used(model))
    console.print(f"[green]Using {model}[/green]")


@cli.command()
@click.argument("model", callback=_model_ref)
@click.pass_context
def favorite(ctx: click.Context, model: ModelRef) -> None:
    """Add MODEL (provider/model) to favorites, or remove it if present"""
    state = _update(ctx, lambda store: store.toggle_favorite(model))
    if model in state.favorite:
        console.print(f"[green]Added {model} to favorites[/green]")
    else:
        console.print(f"[yellow]Removed {model} from favorites[/yellow]")


@cli.command()
@click.argument("model", callback=_model_ref)
@click.argument("name", required=False)
@click.option("--clear", is_flag=True, help="Remove the stored variant")
@click.pass_context
def variant(ctx: click.Context, model: ModelRef, name: Optional[str], clear: bool) -> None:
    """Show, set or clear the preferred variant for MODEL"""
    if name is not None and clear:
        raise click.UsageError("Pass either NAME or --clear, not both")

    if name is None and not clear:
        state: PreferenceState = run_async(_storage(ctx).load())
        current = state.variant_for(model)
        if current is None:
            console.print(f"[dim]No variant set for {model}[/dim]")
        else:
            click.echo(current)
        return

    _update(ctx, lambda store: store.set_variant(model, name))
    if clear:
        console.print(f"[yellow]Cleared variant for {model}[/yellow]")
    else:
        console.print(f"[green]Variant for {model} set to {name}[/green]")


@cli.command("cycle-favorite")
@click.option("--reverse", is_flag=True, help="Cycle backwards")
@click.pass_context
def cycle_favorite(ctx: click.Context, reverse: bool) -> None:
    """Switch to the next favorite model and record it as used"""
    storage = _storage(ctx)
    store = PreferenceStore(run_async(storage.load()))
    ref = store.cycle_favorite(-1 if reverse else 1)
    if ref is None:
        console.print("[yellow]No favorite models to cycle through[/yellow]")
        return

    store.record_used(ref)
    run_async(storage.save(store.state))
    console.print(f"[green]Using {ref}[/green]")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
