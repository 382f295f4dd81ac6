"""Command line interface for previewing retry delays.

Adds commands:
- schedule
- compute
- config show
"""

from __future__ import annotations

import random

import click
from rich.console import Console
from rich.table import Table

from httpbackoff import __version__
from httpbackoff.backoff import BackoffCalculator
from httpbackoff.config import ConfigManager
from httpbackoff.exceptions import ConfigurationError
from httpbackoff.logging_config import get_logger, setup_logging
from httpbackoff.models import BackoffConfig
from httpbackoff.response import RETRY_AFTER_HEADER, ResponseInfo

logger = get_logger("cli")

_config_option = click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to an httpbackoff.toml file",
)
_min_delay_option = click.option(
    "--min-delay",
    type=click.FloatRange(min=0.0),
    default=None,
    help="Delay in seconds for attempt 0 (overrides config)",
)
_max_delay_option = click.option(
    "--max-delay",
    type=click.FloatRange(min=0.0),
    default=None,
    help="Maximum exponential delay in seconds (overrides config)",
)
_seed_option = click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed the jitter source for reproducible output",
)


def _load_manager(config_file: str | None) -> ConfigManager:
    try:
        manager = ConfigManager(config_file)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    setup_logging(manager.config.observability)
    return manager


def _build_calculator(
    config_file: str | None,
    min_delay: float | None,
    max_delay: float | None,
    seed: int | None,
) -> BackoffCalculator:
    manager = _load_manager(config_file)
    overrides = {
        key: value
        for key, value in (("min_delay", min_delay), ("max_delay", max_delay))
        if value is not None
    }
    try:
        backoff = BackoffConfig(**{**manager.config.backoff.model_dump(), **overrides})
    except ValueError as e:
        raise click.ClickException(f"Invalid backoff bounds: {e}") from e
    rng = random.Random(seed) if seed is not None else None
    return BackoffCalculator.from_config(backoff, rng=rng)


@click.group()
@click.version_option(__version__, prog_name="httpbackoff")
def cli() -> None:
    """Preview HTTP retry backoff delays."""


@cli.command("schedule")
@click.option(
    "--attempts",
    type=click.IntRange(min=1),
    default=8,
    show_default=True,
    help="Number of retry attempts to show",
)
@_min_delay_option
@_max_delay_option
@_seed_option
@_config_option
def schedule(
    attempts: int,
    min_delay: float | None,
    max_delay: float | None,
    seed: int | None,
    config_file: str | None,
) -> None:
    """Show the delay before each retry attempt."""
    calculator = _build_calculator(config_file, min_delay, max_delay, seed)
    console = Console()

    console.print(
        f"Backoff schedule (min {calculator.min_delay:g}s, "
        f"max {calculator.max_delay:g}s)",
        style="bold",
    )
    table = Table()
    table.add_column("Attempt", justify="right", style="cyan")
    table.add_column("Delay (s)", justify="right", style="green")
    table.add_column("Capped")

    for attempt, delay in enumerate(calculator.schedule(attempts)):
        capped = calculator.is_capped(attempt)
        table.add_row(str(attempt), f"{delay:.3f}", "yes" if capped else "")

    console.print(table)


@cli.command("compute")
@click.argument("attempt", type=int)
@click.option(
    "--status",
    type=int,
    default=None,
    help="Status code of the response that prompted the retry",
)
@click.option(
    "--retry-after",
    default=None,
    help="Retry-After header value of that response",
)
@_min_delay_option
@_max_delay_option
@_seed_option
@_config_option
def compute(
    attempt: int,
    status: int | None,
    retry_after: str | None,
    min_delay: float | None,
    max_delay: float | None,
    seed: int | None,
    config_file: str | None,
) -> None:
    """Print the delay in seconds before retry ATTEMPT (0-based)."""
    if retry_after is not None and status is None:
        raise click.UsageError("--retry-after requires --status")

    calculator = _build_calculator(config_file, min_delay, max_delay, seed)
    response = None
    if status is not None:
        headers = {RETRY_AFTER_HEADER: retry_after} if retry_after is not None else {}
        response = ResponseInfo(status_code=status, headers=headers)

    click.echo(f"{calculator.next_delay(attempt, response):.6f}")


@cli.group("config")
def config_group() -> None:
    """Inspect configuration."""


@config_group.command("show")
@_config_option
def show_config(config_file: str | None) -> None:
    """Print the effective configuration as TOML."""
    manager = _load_manager(config_file)
    logger.debug("Showing configuration from %s", manager.config_file or "defaults")
    click.echo(manager.export())


def main() -> None:
    """Console script entry point."""
    cli()
