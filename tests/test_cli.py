from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest
from typer.testing import CliRunner

import stock_ledger.cli as cli_mod
from stock_ledger.cli import app
from tests.helpers.db import bootstrap_sqlite_db, seed_boxes, seed_transactions

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_global_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    # configure_logging() stops propagation to the root logger, which would
    # hide records from caplog in later tests.
    monkeypatch.setattr(cli_mod, "configure_logging", lambda *a, **kw: None)


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    url = bootstrap_sqlite_db(tmp_path / "cli.db")
    seed_boxes(database_url=url, boxes={"B1": "Shelf A"})
    seed_transactions(
        database_url=url,
        rows=[
            {"item_id": 1, "item_name": "Bolt", "transaction_type": "STOCK_IN",
             "box_id": "B1", "created_at": datetime(2024, 3, 1, 9, tzinfo=UTC)},
            {"item_id": 1, "item_name": "Bolt", "transaction_type": "SOFT_DELETE",
             "box_id": "B1", "created_at": datetime(2024, 3, 2, 9, tzinfo=UTC),
             "is_deletion": True},
        ],
    )
    return url


def test_classify_prints_kind_label_and_deletion():
    result = runner.invoke(app, ["classify", "BULK_SOFT_DELETE"])

    assert result.exit_code == 0, result.output
    assert "kind: bulk_soft_delete" in result.output
    assert "label: BULK SOFT DELETE" in result.output
    assert "deletion: yes" in result.output


def test_classify_honors_deletion_flag():
    result = runner.invoke(app, ["classify", "ARCHIVED", "--deletion-flag"])

    assert result.exit_code == 0, result.output
    assert "kind: delete" in result.output
    assert "deletion: yes" in result.output


def test_history_renders_table_and_footer(db_url: str):
    result = runner.invoke(app, ["history", "--database-url", db_url])

    assert result.exit_code == 0, result.output
    assert "Bolt" in result.output
    assert "Shelf A" in result.output
    assert "Page 1 of 1 (2 transactions)" in result.output


def test_history_uses_database_url_from_env(db_url: str, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DATABASE_URL", db_url)

    result = runner.invoke(app, ["history", "--kind", "delete", "--box-id", "B1"])

    assert result.exit_code == 0, result.output
    assert "SOFT DELETE" in result.output
    assert "(1 transactions)" in result.output


def test_history_no_matches(db_url: str):
    result = runner.invoke(app, ["history", "--database-url", db_url, "--kind", "out"])

    assert result.exit_code == 0, result.output
    assert "No transactions found" in result.output


def test_history_failure_exits_non_zero():
    result = runner.invoke(app, ["history"])

    assert result.exit_code == 1
    assert "Failed to fetch transaction history" in result.output


def test_history_rejects_bad_date():
    result = runner.invoke(app, ["history", "--start", "03/01/2024"])

    assert result.exit_code != 0
