from __future__ import annotations

import asyncio
import logging
from datetime import date

from stock_ledger.errors import FetchFailure, SourceUnavailable
from stock_ledger.fetch import coerce_payload, fetch_transaction_result, fetch_transactions
from stock_ledger.models import FetchScope, FilterState
from stock_ledger.sources import HistoryQuery
from tests.helpers.source_stub import SourceStub, tx


def _fetch(source: SourceStub, scope: FetchScope | None = None, filters: FilterState | None = None):
    return asyncio.run(
        fetch_transaction_result(source, scope or FetchScope(), filters or FilterState())
    )


def test_box_scope_issues_only_the_box_query():
    source = SourceStub(box=[tx(1), tx(2, "STOCK_OUT")])

    result = _fetch(source, FetchScope(box_id="B-7"), FilterState(kind="delete"))

    assert source.calls == [("box_transactions", "B-7")]
    assert [r.id for r in result.records] == [1, 2]
    assert result.failure is None
    assert result.used_fallback is False


def test_global_query_carries_server_side_filters():
    source = SourceStub(history=[tx(1)])
    filters = FilterState(
        kind="out", item_query="17", start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
    )

    _fetch(source, filters=filters)

    assert source.calls == [
        (
            "stock_history",
            HistoryQuery(
                item_id=17, kind="out", start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
            ),
        )
    ]


def test_non_numeric_item_query_and_all_kinds_are_not_sent():
    source = SourceStub()

    _fetch(source, filters=FilterState(item_query="bolt"))

    assert source.calls == [("stock_history", HistoryQuery())]


def test_empty_delete_query_falls_back_to_deletion_history():
    source = SourceStub(
        history=[],
        deletions=[tx(8, "ITEM_DELETED"), tx(9, "SOFT_DELETE", is_deletion=True)],
    )

    result = _fetch(source, filters=FilterState(kind="delete", item_query="42"))

    assert source.call_names() == ["stock_history", "deletion_history"]
    assert source.calls[1] == ("deletion_history", 42)
    assert [r.id for r in result.records] == [8, 9]
    assert result.used_fallback is True
    assert result.failure is None


def test_fallback_not_used_when_primary_has_rows():
    source = SourceStub(history=[tx(1, "DELETE")], deletions=[tx(2, "DELETE")])

    result = _fetch(source, filters=FilterState(kind="delete"))

    assert source.call_names() == ["stock_history"]
    assert [r.id for r in result.records] == [1]


def test_fallback_not_used_for_other_kinds():
    source = SourceStub(history=[], deletions=[tx(2, "DELETE")])

    result = _fetch(source, filters=FilterState(kind="out"))

    assert source.call_names() == ["stock_history"]
    assert result.records == []
    assert result.failure is None


def test_empty_fallback_keeps_empty_primary():
    source = SourceStub(history=[], deletions=[])

    result = _fetch(source, filters=FilterState(kind="delete"))

    assert result.records == []
    assert result.used_fallback is False
    assert result.failure is None


def test_failed_primary_is_rescued_by_fallback():
    source = SourceStub(deletions=[tx(3, "DELETE")])
    source.script("stock_history", SourceUnavailable("backend down"))

    result = _fetch(source, filters=FilterState(kind="delete"))

    assert [r.id for r in result.records] == [3]
    assert result.failure is None


def test_transport_error_becomes_empty_result(caplog):
    source = SourceStub()
    source.script("stock_history", ConnectionError("reset by peer"))

    with caplog.at_level(logging.WARNING, logger="stock_ledger"):
        result = _fetch(source)

    assert result.records == []
    assert result.failure is FetchFailure.SOURCE_UNAVAILABLE
    assert any("history query failed" in r.getMessage() for r in caplog.records)


def test_non_list_payload_is_malformed():
    source = SourceStub(box={"error": "nope"})

    result = _fetch(source, FetchScope(box_id=1))

    assert result.records == []
    assert result.failure is FetchFailure.MALFORMED_PAYLOAD


def test_fallback_failure_reported_when_primary_was_empty():
    source = SourceStub(history=[])
    source.script("deletion_history", SourceUnavailable("timeout"))

    result = _fetch(source, filters=FilterState(kind="delete"))

    assert result.records == []
    assert result.failure is FetchFailure.SOURCE_UNAVAILABLE


def test_limit_truncates_after_fallback():
    source = SourceStub(history=[], deletions=[tx(i, "DELETE") for i in range(5)])

    result = _fetch(source, FetchScope(limit=2), FilterState(kind="delete"))

    assert [r.id for r in result.records] == [0, 1]


def test_fetch_transactions_returns_records_only():
    source = SourceStub(history=[tx(1), tx(2)])
    source.script("stock_history", RuntimeError("boom"))

    assert asyncio.run(fetch_transactions(source, FetchScope(), FilterState())) == []
    records = asyncio.run(fetch_transactions(source, FetchScope(), FilterState()))
    assert [r.id for r in records] == [1, 2]


def test_coerce_payload_drops_non_mapping_elements(caplog):
    with caplog.at_level(logging.WARNING, logger="stock_ledger"):
        records = coerce_payload([tx(1), "garbage", 7, tx(2)])

    assert [r.id for r in records] == [1, 2]
    assert sum("dropping upstream record" in r.getMessage() for r in caplog.records) == 2
