"""GenMemo CLI: review commands, sync subgroup, and config."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from genmemo.application.config import resolve_config
from genmemo.interface._common import _resolve_with_overrides, report_sync_result

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="genmemo: spaced-repetition review and offline-first progress sync.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

sync_app = typer.Typer(help="Upload and download progress.", no_args_is_help=True)
app.add_typer(sync_app, name="sync")

config_app = typer.Typer(help="Manage genmemo configuration.")
app.add_typer(config_app, name="config")

DataDirOption = Annotated[
    Path | None, typer.Option("--data-dir", help="Directory holding the progress store.")
]


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for genmemo."""
    ctx.ensure_object(dict)
    ctx.obj["verbose_bonus"] = verbose


def _services(ctx: typer.Context, **overrides):
    from genmemo.application.factory import get_ledger, get_review_service

    config = _resolve_with_overrides(verbose=ctx.obj.get("verbose_bonus", 1), **overrides)
    ledger = get_ledger(config)
    return config, ledger, get_review_service(config, ledger)


# ---------------------------------------------------------------------------
# Review commands
# ---------------------------------------------------------------------------


@app.command()
def select(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Collection (category or package) ID.")],
    count: Annotated[int | None, typer.Option("--count", "-n", help="Items to select.")] = None,
    seed: Annotated[int | None, typer.Option(help="Seed for a reproducible order.")] = None,
    data_dir: DataDirOption = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """[bold green]Select[/bold green] items for a review session."""
    config, _, service = _services(ctx, seed=seed, data_dir=data_dir)
    records = service.select_session(collection, count if count is not None else config.session_size)

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "key": r.item_key,
                        "mastery": r.item.mastery,
                        "due": r.item.next_review_due.isoformat(),
                    }
                    for r in records
                ],
                indent=2,
            )
        )
        return

    if not records:
        typer.secho("No items to review.", fg="yellow")
        return
    for r in records:
        typer.echo(f"#{r.item_key}  tier={r.item.mastery}  due={r.item.next_review_due}")


@app.command()
def answer(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Collection ID.")],
    key: Annotated[int, typer.Argument(help="Item key (row id or question index).")],
    correct: Annotated[
        bool, typer.Option("--correct/--wrong", help="Whether the answer was right.")
    ] = True,
    data_dir: DataDirOption = None,
):
    """Record an answer for one item."""
    _, _, service = _services(ctx, data_dir=data_dir)
    item = service.process_answer(collection, key, correct)
    typer.echo(
        f"#{key}  tier={item.mastery}  streak={item.streak}  "
        f"interval={item.interval_days:g}d  next={item.next_review_due}"
    )


@app.command()
def decay(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Collection ID.")],
    data_dir: DataDirOption = None,
):
    """Apply decay to items left overdue."""
    _, _, service = _services(ctx, data_dir=data_dir)
    changed = service.apply_decay_to_overdue(collection)
    typer.echo(f"Decayed {changed} overdue items.")


@app.command()
def due(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Collection ID.")],
    total: Annotated[
        int | None,
        typer.Option(help="Package size; unreviewed question indices count as due."),
    ] = None,
    data_dir: DataDirOption = None,
):
    """List items due today."""
    _, _, service = _services(ctx, data_dir=data_dir)
    keys = service.due_keys(collection, total)
    typer.echo(f"Due: {len(keys)}")
    if keys:
        typer.echo(" ".join(str(k) for k in keys))


@app.command()
def stats(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Collection ID.")],
    data_dir: DataDirOption = None,
):
    """Show collection statistics."""
    _, _, service = _services(ctx, data_dir=data_dir)
    summary = service.collection_stats(collection)
    average = f"{summary.average_mastery:.2f}" if summary.average_mastery is not None else "-"
    typer.echo(
        f"Items: {summary.total}  Due: {summary.due}  "
        f"Mastered: {summary.mastered}  Avg tier: {average}"
    )


@app.command("add")
def add_items(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Collection ID.")],
    keys: Annotated[list[int], typer.Argument(help="Item keys to add.")],
    data_dir: DataDirOption = None,
):
    """Add items to a collection (new items are due today)."""
    from genmemo.application.factory import get_catalog

    _, ledger, _ = _services(ctx, data_dir=data_dir)
    catalog = get_catalog(ledger)
    for key in keys:
        catalog.add_item(collection, key)
    typer.echo(f"Added {len(keys)} items to {collection}.")


@app.command("remove-collection")
def remove_collection(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Collection ID.")],
    data_dir: DataDirOption = None,
):
    """Delete a collection (local items are kept as uncategorized)."""
    from genmemo.application.factory import get_catalog

    _, ledger, _ = _services(ctx, data_dir=data_dir)
    affected = get_catalog(ledger).delete_collection(collection)
    typer.echo(f"Removed {collection} ({affected} items affected).")


# ---------------------------------------------------------------------------
# Sync subgroup
# ---------------------------------------------------------------------------


def _run_sync(ctx: typer.Context, action: str, collection: str, token, server_url, data_dir):
    import asyncio

    from genmemo.application.factory import get_ledger, get_reconciler

    config = _resolve_with_overrides(
        verbose=ctx.obj.get("verbose_bonus", 1),
        token=token,
        server_url=server_url,
        data_dir=data_dir,
    )
    reconciler = get_reconciler(config, get_ledger(config))

    async def run():
        try:
            operation = getattr(reconciler, action)
            return await operation(collection)
        finally:
            await reconciler.close()

    result = asyncio.run(run())
    report_sync_result(action.capitalize(), collection, result)


TokenOption = Annotated[str | None, typer.Option(help="Auth token (overrides config).")]
ServerOption = Annotated[str | None, typer.Option(help="GenMemo server URL.")]


@sync_app.command("upload")
def sync_upload(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Package ID.")],
    token: TokenOption = None,
    server_url: ServerOption = None,
    data_dir: DataDirOption = None,
):
    """Upload pending local progress."""
    _run_sync(ctx, "upload", collection, token, server_url, data_dir)


@sync_app.command("download")
def sync_download(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Package ID.")],
    token: TokenOption = None,
    server_url: ServerOption = None,
    data_dir: DataDirOption = None,
):
    """Download remote progress (remote wins on conflicts)."""
    _run_sync(ctx, "download", collection, token, server_url, data_dir)


@sync_app.command("run")
def sync_run(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Package ID.")],
    token: TokenOption = None,
    server_url: ServerOption = None,
    data_dir: DataDirOption = None,
):
    """Upload pending progress, then download."""
    _run_sync(ctx, "sync", collection, token, server_url, data_dir)


@sync_app.command("pending")
def sync_pending(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="Package ID.")],
    data_dir: DataDirOption = None,
):
    """List item keys waiting to be uploaded."""
    _, ledger, _ = _services(ctx, data_dir=data_dir)
    pending = sorted(ledger.all_pending_for(collection))
    typer.echo(f"Pending: {len(pending)}")
    if pending:
        typer.echo(" ".join(str(k) for k in pending))


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    if d.get("token"):
        d["token"] = "***"
    typer.echo(json.dumps(d, indent=2))
