"""Compound inclusion test for annotated records.

A record is kept when every active criterion holds:

- kind: ``"all"`` disables it; ``"delete"`` defers entirely to the deletion
  classifier; any other value is resolved to a :class:`KindFamily`;
- item: case-insensitive substring of ``item_name`` or ``str(item_id)``;
- dates: ``start_date`` from 00:00 UTC inclusive, and ``end_date`` through
  00:00 UTC of the following day inclusive.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

from .kinds import canonical_token
from .models import ALL_KINDS, AnnotatedRecord, FilterState, TransactionKind

DELETE_FILTER = "delete"


@dataclass(frozen=True, slots=True)
class KindFamily:
    """Which rows a kind filter value selects.

    ``kinds`` are compared with the normalized kind; ``aliases`` are exact
    legacy type tokens and ``fragments`` substrings of the type token, both
    checked against the raw upstream type.
    """

    kinds: frozenset[TransactionKind]
    aliases: frozenset[str] = frozenset()
    fragments: tuple[str, ...] = ()

    def matches(self, kind: TransactionKind, raw_type: str) -> bool:
        if kind in self.kinds:
            return True
        token = canonical_token(raw_type)
        return token in self.aliases or any(f in token for f in self.fragments)


KIND_FAMILIES: dict[str, KindFamily] = {
    "in": KindFamily(frozenset({TransactionKind.STOCK_IN}), aliases=frozenset({"new_item"})),
    "out": KindFamily(frozenset({TransactionKind.STOCK_OUT})),
    "transfer": KindFamily(frozenset({TransactionKind.TRANSFER}), fragments=("transfer",)),
    "update": KindFamily(frozenset({TransactionKind.UPDATE}), fragments=("update",)),
    "create": KindFamily(
        frozenset({TransactionKind.CREATE}),
        aliases=frozenset({"new_item"}),
        fragments=("create",),
    ),
}


def kind_family(kind_filter: str) -> KindFamily:
    """Resolve a filter value; unlisted values match their kind or a type substring."""

    family = KIND_FAMILIES.get(kind_filter)
    if family is not None:
        return family
    token = canonical_token(kind_filter)
    try:
        kinds = frozenset({TransactionKind(token)})
    except ValueError:
        kinds = frozenset()
    return KindFamily(kinds, fragments=(token,) if token else ())


def _day_start(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=UTC)


def matches_kind(row: AnnotatedRecord, kind_filter: str) -> bool:
    if kind_filter == ALL_KINDS:
        return True
    if kind_filter == DELETE_FILTER:
        return row.is_deletion
    return kind_family(kind_filter).matches(row.transaction_kind, row.record.raw_type)


def matches_item(row: AnnotatedRecord, item_query: str) -> bool:
    term = item_query.strip().lower()
    if not term:
        return True
    name = (row.record.item_name or "").lower()
    item_id = "" if row.record.item_id is None else str(row.record.item_id).lower()
    return term in name or term in item_id


def matches_dates(row: AnnotatedRecord, start_date: date | None, end_date: date | None) -> bool:
    created = row.record.created_at
    # Rows without a usable timestamp are never excluded by a date bound.
    if created is None:
        return True
    if start_date is not None and created < _day_start(start_date):
        return False
    if end_date is not None and created > _day_start(end_date) + timedelta(days=1):
        return False
    return True


def matches(row: AnnotatedRecord, state: FilterState) -> bool:
    """Return True when ``row`` satisfies every active criterion in ``state``."""

    return (
        matches_kind(row, state.kind)
        and matches_item(row, state.item_query)
        and matches_dates(row, state.start_date, state.end_date)
    )


def select(rows: Iterable[AnnotatedRecord], state: FilterState) -> list[AnnotatedRecord]:
    """Keep matching rows, preserving input order."""

    return [row for row in rows if matches(row, state)]


__all__ = [
    "DELETE_FILTER",
    "KIND_FAMILIES",
    "KindFamily",
    "kind_family",
    "matches",
    "matches_dates",
    "matches_item",
    "matches_kind",
    "select",
]
