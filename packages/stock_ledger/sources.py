# ruff: noqa: I001
"""Upstream query contracts and the SQL-backed implementation.

A :class:`TransactionSource` answers the three queries the fetch layer issues:

- ``box_transactions(box_id)``: every movement of one box, any kind;
- ``stock_history(query)``: global history, best-effort filtered server-side;
- ``deletion_history(item_id=...)``: the broad deletion query used as a
  fallback when a deletion-filtered history comes back empty.

Return values are untyped (``Any``): sources relay whatever the
backend produced and the aggregator validates it.

:class:`SqlTransactionSource` implements the contract on the ``inventory_db``
schema. Its ORM work is synchronous and runs in a worker thread so the caller's
event loop stays responsive.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from typing import Any, Protocol, TypeVar

from sqlalchemy import Select, or_, select, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_db.client import session_scope
from inventory_db.models.inventory import InvBox, InvCustomer, InvItemTransaction

from .errors import SourceUnavailable
from .logging_setup import get_logger
from .models import ALL_KINDS, FilterState

_logger = get_logger("stock_ledger.sources")

T = TypeVar("T")

DEFAULT_QUERY_LIMIT = 100


@dataclass(frozen=True, slots=True)
class HistoryQuery:
    """Server-side filters for the global history query; unset fields are not applied."""

    item_id: int | None = None
    kind: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    @classmethod
    def from_filters(cls, filters: FilterState) -> HistoryQuery:
        return cls(
            item_id=filters.numeric_item_id,
            kind=None if filters.kind == ALL_KINDS else filters.kind,
            start_date=filters.start_date,
            end_date=filters.end_date,
        )


class TransactionSource(Protocol):
    async def box_transactions(self, box_id: int | str) -> Any: ...

    async def stock_history(self, query: HistoryQuery) -> Any: ...

    async def deletion_history(self, *, item_id: int | None = None) -> Any: ...


# ---------------------------------------------------------------------------
# SQL implementation
# ---------------------------------------------------------------------------


def _resolve_query_limit(override: int | None) -> int:
    """Row cap per query: explicit value, else ``STOCK_LEDGER_QUERY_LIMIT``, else 100."""

    if override is not None:
        return override
    env_val = os.getenv("STOCK_LEDGER_QUERY_LIMIT")
    try:
        limit = int(env_val) if env_val else None
    except ValueError:
        limit = None
    return limit if limit is not None and limit > 0 else DEFAULT_QUERY_LIMIT


def _kind_condition(kind: str):
    """Server-side predicate for a kind filter value (best effort, re-checked client-side)."""

    tx_type = InvItemTransaction.transaction_type
    if kind == "delete":
        return _deletion_condition()
    if kind == "in":
        return or_(
            tx_type.in_(["STOCK_IN", "NEW_ITEM"]),
            tx_type.ilike("%IN%"),
            tx_type.ilike("%ADD%"),
        )
    if kind == "out":
        return or_(
            tx_type == "STOCK_OUT",
            tx_type.ilike("%OUT%"),
            tx_type.ilike("%REMOVE%"),
        )
    return tx_type.ilike(f"%{kind}%")


def _deletion_condition():
    return or_(
        InvItemTransaction.is_deletion.is_(true()),
        InvItemTransaction.transaction_type.ilike("%DELETE%"),
    )


def _day_bounds(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    lower = datetime.combine(start, time.min, tzinfo=UTC) if start else None
    upper = datetime.combine(end, time.max, tzinfo=UTC) if end else None
    return lower, upper


def _base_select() -> Select:
    return (
        select(InvItemTransaction, InvBox.box_number, InvCustomer)
        .outerjoin(InvBox, InvItemTransaction.box_id == InvBox.id)
        .outerjoin(InvCustomer, InvItemTransaction.customer_id == InvCustomer.id)
    )


def _row_to_payload(
    tx: InvItemTransaction, box_number: str | None, customer: InvCustomer | None
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": tx.id,
        "created_at": tx.created_at.isoformat() if tx.created_at else None,
        "item_id": tx.item_id,
        "item_name": tx.item_name,
        "transaction_type": tx.transaction_type,
        "quantity": tx.quantity,
        "previous_quantity": tx.previous_quantity,
        "new_quantity": tx.new_quantity,
        "details": tx.details,
        "notes": tx.notes,
        "reason": tx.reason,
        "box_id": tx.box_id,
        "box_name": box_number,
        "customer_id": tx.customer_id,
        "created_by": tx.created_by,
        "is_deletion": bool(tx.is_deletion),
    }
    if customer is not None:
        payload["customer_info"] = {
            "id": customer.id,
            "name": customer.name,
            "contact_person": customer.contact_person,
        }
    return payload


class SqlTransactionSource:
    """:class:`TransactionSource` reading ``inv_item_transactions``.

    Parameters
    ----------
    database_url:
        Optional override; falls back to ``DATABASE_URL``.
    query_limit:
        Maximum rows per query (newest first). Defaults to
        ``STOCK_LEDGER_QUERY_LIMIT`` when set, otherwise 100.
    """

    def __init__(self, *, database_url: str | None = None, query_limit: int | None = None) -> None:
        self._database_url = database_url
        self._query_limit = _resolve_query_limit(query_limit)

    async def box_transactions(self, box_id: int | str) -> list[dict[str, Any]]:
        stmt = _base_select().where(InvItemTransaction.box_id == str(box_id))
        return await self._run("box_transactions", stmt)

    async def stock_history(self, query: HistoryQuery) -> list[dict[str, Any]]:
        stmt = _base_select()
        if query.item_id is not None:
            stmt = stmt.where(InvItemTransaction.item_id == query.item_id)
        if query.kind:
            stmt = stmt.where(_kind_condition(query.kind))
        lower, upper = _day_bounds(query.start_date, query.end_date)
        if lower is not None:
            stmt = stmt.where(InvItemTransaction.created_at >= lower)
        if upper is not None:
            stmt = stmt.where(InvItemTransaction.created_at <= upper)
        return await self._run("stock_history", stmt)

    async def deletion_history(self, *, item_id: int | None = None) -> list[dict[str, Any]]:
        stmt = _base_select().where(_deletion_condition())
        if item_id is not None:
            stmt = stmt.where(InvItemTransaction.item_id == item_id)
        return await self._run("deletion_history", stmt)

    async def _run(self, name: str, stmt: Select) -> list[dict[str, Any]]:
        stmt = stmt.order_by(
            InvItemTransaction.created_at.desc(), InvItemTransaction.id.desc()
        ).limit(self._query_limit)

        def _query(session: Session) -> list[dict[str, Any]]:
            return [_row_to_payload(*row) for row in session.execute(stmt).all()]

        _logger.debug("running %s query (limit=%d)", name, self._query_limit)
        return await asyncio.to_thread(self._in_session, _query)

    def _in_session(self, work: Callable[[Session], T]) -> T:
        try:
            with session_scope(database_url=self._database_url) as session:
                return work(session)
        except (SQLAlchemyError, RuntimeError) as e:
            raise SourceUnavailable(f"transaction query failed: {e}") from e


__all__ = [
    "DEFAULT_QUERY_LIMIT",
    "HistoryQuery",
    "SqlTransactionSource",
    "TransactionSource",
]
