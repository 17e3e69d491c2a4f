# ruff: noqa: I001
"""CLI for the ``stock_ledger`` package.

Exposes callable command handlers (``cmd_history``, ``cmd_classify``) and a
Typer-based console interface around them. Environment variables (notably
``DATABASE_URL``) are loaded from a local ``.env`` using ``python-dotenv``
before any command runs. Business logic lives in ``stock_ledger.api``,
``stock_ledger.fetch`` and ``stock_ledger.history``.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .deletions import is_deletion
from .kinds import format_type_label, normalize
from .logging_setup import configure_logging
from .models import (
    ALL_KINDS,
    DEFAULT_PAGE_SIZE,
    EmptyState,
    FetchScope,
    FilterState,
    HistoryPage,
    TransactionRecord,
)

console = Console()
err_console = Console(stderr=True)


# ---- Rendering helpers ------------------------------------------------------


def _format_timestamp(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else "N/A"


def _render_page(page: HistoryPage) -> Table:
    table = Table(show_lines=False)
    table.add_column("Date", no_wrap=True)
    table.add_column("Type")
    table.add_column("Item")
    table.add_column("Qty", justify="right")
    table.add_column("Box")
    table.add_column("User")
    table.add_column("Notes")

    for row in page.page_records:
        notes = [row.attribution_label] if row.attribution_label else []
        if row.show_reason_badge:
            notes.append(row.display_reason)
        table.add_row(
            _format_timestamp(row.record.created_at),
            row.kind_label,
            row.item_label,
            str(row.record.quantity),
            row.box_label,
            row.user_label,
            " / ".join(notes),
            style="red" if row.highlight else None,
        )
    return table


# ---- Command handlers -------------------------------------------------------


def cmd_history(
    *,
    box_id: str | None = None,
    kind: str = ALL_KINDS,
    item: str = "",
    start: datetime | None = None,
    end: datetime | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    limit: int | None = None,
    database_url: str | None = None,
) -> int:
    """Fetch, filter and print one page of transaction history.

    Returns a process exit code: ``0`` on success (including an empty page),
    ``1`` when the history could not be fetched, ``2`` for invalid arguments.
    """

    # Deferred imports keep ``classify`` usable without a database stack.
    from .history import TransactionHistory
    from .sources import SqlTransactionSource

    try:
        filters = FilterState(
            kind=kind,
            item_query=item,
            start_date=start,
            end_date=end,
            page=page,
            page_size=page_size,
        )
        scope = FetchScope(box_id=box_id, limit=limit)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        return 2

    view = TransactionHistory(
        SqlTransactionSource(database_url=database_url), scope=scope, filters=filters
    )
    asyncio.run(view.refresh())
    result = view.projection()

    if result.empty_state is EmptyState.LOAD_FAILED:
        err_console.print("[red]Failed to fetch transaction history[/red]")
        return 1
    if result.empty_state is EmptyState.NO_MATCHES:
        console.print("No transactions found")
        return 0

    console.print(_render_page(result))
    console.print(
        f"Page {result.current_page} of {result.total_pages} "
        f"({result.total_filtered_count} transactions)"
    )
    return 0


def cmd_classify(raw_type: str, *, deletion_flag: bool | None = None) -> int:
    """Print the canonical kind, display label and deletion status of ``raw_type``."""

    kind = normalize(raw_type, deletion_flag)
    record = TransactionRecord(raw_type=raw_type, is_deletion_flag=deletion_flag)
    console.print(f"kind: {kind.value}")
    console.print(f"label: {format_type_label(raw_type)}")
    console.print(f"deletion: {'yes' if is_deletion(record, kind) else 'no'}")
    return 0


# ---- Typer-based console interface ------------------------------------------


app = typer.Typer(
    name="stock-ledger",
    no_args_is_help=True,
    add_completion=False,
    help="Browse and classify inventory stock movements.",
)


@app.command("history")
def history_cmd(
    box_id: Annotated[
        str | None, typer.Option(help="Only show movements of this box.")
    ] = None,
    kind: Annotated[
        str,
        typer.Option(help="Kind filter: all, in, out, transfer, update, create, delete."),
    ] = ALL_KINDS,
    item: Annotated[
        str, typer.Option(help="Item name fragment or numeric item id.")
    ] = "",
    start: Annotated[
        datetime | None,
        typer.Option(formats=["%Y-%m-%d"], help="First day to include (YYYY-MM-DD)."),
    ] = None,
    end: Annotated[
        datetime | None,
        typer.Option(formats=["%Y-%m-%d"], help="Last day to include (YYYY-MM-DD)."),
    ] = None,
    page: Annotated[int, typer.Option(min=1, help="Page to show.")] = 1,
    page_size: Annotated[
        int, typer.Option(min=1, help="Rows per page (10, 25, 50 or 100 in the web view).")
    ] = DEFAULT_PAGE_SIZE,
    limit: Annotated[
        int | None, typer.Option(min=1, help="Keep at most this many fetched records.")
    ] = None,
    database_url: Annotated[
        str | None, typer.Option(help="Override DATABASE_URL (falls back to env var).")
    ] = None,
) -> None:
    """Show one page of filtered transaction history."""

    code = cmd_history(
        box_id=box_id,
        kind=kind,
        item=item,
        start=start,
        end=end,
        page=page,
        page_size=page_size,
        limit=limit,
        database_url=database_url,
    )
    if code:
        raise typer.Exit(code)


@app.command("classify")
def classify_cmd(
    raw_type: Annotated[str, typer.Argument(help="Raw transaction type string.")],
    deletion_flag: Annotated[
        bool | None,
        typer.Option(
            "--deletion-flag/--no-deletion-flag",
            help="Upstream is_deletion flag, when known.",
        ),
    ] = None,
) -> None:
    """Classify a raw transaction type string."""

    cmd_classify(raw_type, deletion_flag=deletion_flag)


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    # override=False keeps the existing environment authoritative
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover - exercised via the console script
    app()
