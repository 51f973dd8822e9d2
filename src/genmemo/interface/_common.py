"""Shared helpers for CLI command modules."""

import logging
from typing import Any

import typer

from genmemo.application.config import AppConfig, resolve_config
from genmemo.domain.models import Error, NotAuthenticated, NothingToSync, Success, SyncResult


def _resolve_with_overrides(verbose: int | None = None, **overrides: Any) -> AppConfig:
    """Resolve config with CLI overrides, dropping options the user did not pass."""
    cli_overrides = {k: v for k, v in overrides.items() if v is not None}
    if verbose is not None:
        cli_overrides["verbose"] = verbose
    config = resolve_config(cli_overrides)

    if config.verbose >= 2:
        logging.getLogger("genmemo").setLevel(logging.DEBUG)
    return config


def report_sync_result(action: str, collection_id: str, result: SyncResult) -> None:
    """Print a sync result and exit non-zero on failure."""
    if isinstance(result, Success):
        typer.secho(f"{action}: {result.count} records ({collection_id})", fg="green")
    elif isinstance(result, NothingToSync):
        typer.secho(f"{action}: nothing to sync ({collection_id})", fg="yellow")
    elif isinstance(result, NotAuthenticated):
        typer.secho("Not authenticated. Set GENMEMO_TOKEN or pass --token.", fg="red")
        raise typer.Exit(2)
    elif isinstance(result, Error):
        typer.secho(f"{action} failed: {result.message}", fg="red")
        raise typer.Exit(1)
