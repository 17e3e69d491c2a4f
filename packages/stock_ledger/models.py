"""Data models and value objects for ``stock_ledger``.

Upstream stock-movement rows arrive from two backend query shapes (box-scoped
and global history) with overlapping but inconsistent keys. This module
defines the canonical record those rows are coerced into, the derived
annotated view, and the immutable filter/scope values that drive a filter
session.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .pagination import page_window

# ---------------------------------------------------------------------------
# Canonical kinds
# ---------------------------------------------------------------------------


class TransactionKind(StrEnum):
    """Closed set of canonical transaction kinds.

    Values double as the canonical token strings, so normalizing
    ``kind.value`` always yields ``kind`` again.
    """

    STOCK_IN = "in"
    STOCK_OUT = "out"
    TRANSFER = "transfer"
    UPDATE = "update"
    CREATE = "create"
    DELETE = "delete"
    SOFT_DELETE = "soft_delete"
    PERMANENT_DELETE = "permanent_delete"
    BULK_SOFT_DELETE = "bulk_soft_delete"
    BULK_PERMANENT_DELETE = "bulk_permanent_delete"
    UNKNOWN = "unknown"


DELETE_FAMILY: frozenset[TransactionKind] = frozenset(
    {
        TransactionKind.DELETE,
        TransactionKind.SOFT_DELETE,
        TransactionKind.PERMANENT_DELETE,
        TransactionKind.BULK_SOFT_DELETE,
        TransactionKind.BULK_PERMANENT_DELETE,
    }
)


# ---------------------------------------------------------------------------
# Upstream record
# ---------------------------------------------------------------------------

# Upstream key aliases, first non-empty wins. The box-scoped query and the
# global history query disagree on several column names.
_ALIASES: dict[str, tuple[str, ...]] = {
    "raw_type": ("raw_type", "transaction_type", "type"),
    "reason_code": ("reason_code", "reason"),
    "is_deletion_flag": ("is_deletion_flag", "is_deletion"),
    "box_name": ("box_name", "to_box_name", "box_number"),
    "user_name": ("user_name", "user_full_name", "created_by"),
}

_TRUE_STRINGS = frozenset({"true", "t", "yes", "1"})
_FALSE_STRINGS = frozenset({"false", "f", "no", "0"})


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class TransactionRecord(BaseModel):
    """One stock-movement event as returned by an upstream query.

    Construction never fails on missing or malformed scalar fields: each field
    falls back to a neutral default instead (``quantity`` to 1, an unparsable
    ``created_at`` to ``None``, and so on). Keys not modeled here are kept as
    extras so renderers can still reach them.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: Any = None
    created_at: datetime | None = None
    item_id: Any = None
    item_name: str | None = None
    box_id: Any = None
    box_name: str | None = None
    quantity: int = 1
    raw_type: str = ""
    is_deletion_flag: bool | None = None
    reason_code: str | None = None
    customer_id: str | None = None
    customer_info: dict[str, Any] | None = None
    details: str | None = None
    notes: str | None = None
    user_name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _resolve_aliases(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        resolved = dict(data)
        for field, keys in _ALIASES.items():
            for key in keys:
                value = data.get(key)
                if not _is_blank(value):
                    resolved[field] = value
                    break
        return resolved

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, v: Any) -> datetime | None:
        if isinstance(v, datetime):
            parsed = v
        elif isinstance(v, date):
            parsed = datetime(v.year, v.month, v.day)
        elif isinstance(v, str) and v.strip():
            try:
                parsed = datetime.fromisoformat(v.strip())
            except ValueError:
                return None
        else:
            return None
        # Naive timestamps are taken as UTC, matching how the backend stores them.
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, v: Any) -> int:
        if isinstance(v, bool) or _is_blank(v):
            return 1
        if isinstance(v, int):
            return v
        try:
            return int(float(v))
        except (TypeError, ValueError, OverflowError):
            return 1

    @field_validator("raw_type", mode="before")
    @classmethod
    def _coerce_raw_type(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("is_deletion_flag", mode="before")
    @classmethod
    def _coerce_flag(cls, v: Any) -> bool | None:
        if isinstance(v, bool):
            return v
        if isinstance(v, int):
            return v != 0
        if isinstance(v, str):
            s = v.strip().lower()
            if s in _TRUE_STRINGS:
                return True
            if s in _FALSE_STRINGS:
                return False
        return None

    @field_validator("reason_code", "customer_id", mode="before")
    @classmethod
    def _coerce_code(cls, v: Any) -> str | None:
        if _is_blank(v) or isinstance(v, bool):
            return None
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        return str(v).strip()

    @field_validator("customer_info", mode="before")
    @classmethod
    def _coerce_customer_info(cls, v: Any) -> dict[str, Any] | None:
        return dict(v) if isinstance(v, Mapping) else None

    @field_validator("item_name", "box_name", "details", "notes", "user_name", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        return v if isinstance(v, str) else str(v)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> TransactionRecord:
        return cls.model_validate(payload)


# ---------------------------------------------------------------------------
# Annotated view
# ---------------------------------------------------------------------------

_ATTRIBUTED_REASONS = frozenset({"CONSUMED", "SOLD"})


@dataclass(frozen=True, slots=True)
class AnnotatedRecord:
    """A record plus the fields derived from it for one filter session.

    Produced by :func:`stock_ledger.api.annotate`; the wrapped record is never
    modified.
    """

    record: TransactionRecord
    transaction_kind: TransactionKind
    is_deletion: bool
    attribution_label: str
    kind_label: str
    badge_variant: str
    display_reason: str

    @property
    def highlight(self) -> bool:
        return self.is_deletion

    @property
    def show_reason_badge(self) -> bool:
        # CONSUMED/SOLD are already conveyed by the attribution badge.
        if not self.display_reason:
            return False
        return not self.attribution_label or self.display_reason not in _ATTRIBUTED_REASONS

    @property
    def item_label(self) -> str:
        return self.record.item_name or "N/A"

    @property
    def box_label(self) -> str:
        if self.record.box_name:
            return self.record.box_name
        if not _is_blank(self.record.box_id):
            return f"Box #{self.record.box_id}"
        return "N/A"

    @property
    def user_label(self) -> str:
        return self.record.user_name or "System"


# ---------------------------------------------------------------------------
# Filter session values
# ---------------------------------------------------------------------------

ALL_KINDS = "all"
DEFAULT_PAGE_SIZE = 10
PAGE_SIZE_OPTIONS: tuple[int, ...] = (10, 25, 50, 100)


def _positive_int(name: str, value: Any) -> None:
    # Booleans are ints; disallow them explicitly.
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer")


def _as_date(name: str, value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise ValueError(f"{name} must be a date or None")


@dataclass(frozen=True, slots=True)
class FilterState:
    """Immutable set of active filter criteria and the page being viewed.

    Every transition returns a new instance. Changing the kind, the item
    query, the date range or the page size sends the view back to page 1.
    """

    kind: str = ALL_KINDS
    item_query: str = ""
    start_date: date | None = None
    end_date: date | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        kind = (self.kind or "").strip().lower() or ALL_KINDS
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "item_query", self.item_query or "")
        object.__setattr__(self, "start_date", _as_date("start_date", self.start_date))
        object.__setattr__(self, "end_date", _as_date("end_date", self.end_date))
        _positive_int("page", self.page)
        _positive_int("page_size", self.page_size)

    def with_kind(self, kind: str) -> FilterState:
        return replace(self, kind=kind, page=1)

    def with_item_query(self, item_query: str) -> FilterState:
        return replace(self, item_query=item_query, page=1)

    def with_date_range(self, start_date: date | None, end_date: date | None) -> FilterState:
        return replace(self, start_date=start_date, end_date=end_date, page=1)

    def with_page(self, page: int) -> FilterState:
        return replace(self, page=page)

    def with_page_size(self, page_size: int) -> FilterState:
        return replace(self, page_size=page_size, page=1)

    def reset(self) -> FilterState:
        """Clear every criterion, keeping only the page size."""

        return FilterState(page_size=self.page_size)

    @property
    def numeric_item_id(self) -> int | None:
        """The item query as an item id when it is all ASCII digits, else ``None``."""

        q = self.item_query.strip()
        return int(q) if q.isascii() and q.isdigit() else None


@dataclass(frozen=True, slots=True)
class FetchScope:
    """Where to fetch from: one box, or the global history when ``box_id`` is unset.

    ``limit`` caps the number of fetched records kept for the session.
    """

    box_id: int | str | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.limit is not None:
            _positive_int("limit", self.limit)

    @property
    def is_box_bound(self) -> bool:
        return not _is_blank(self.box_id)


# ---------------------------------------------------------------------------
# Projection handed to renderers
# ---------------------------------------------------------------------------


class EmptyState(StrEnum):
    NO_MATCHES = "no_matches"
    LOAD_FAILED = "load_failed"


@dataclass(frozen=True, slots=True)
class HistoryPage:
    """One rendered page of a filter session."""

    page_records: list[AnnotatedRecord]
    total_filtered_count: int
    total_pages: int
    current_page: int
    page_size: int
    empty_state: EmptyState | None = None

    @property
    def first_item(self) -> int:
        if self.total_filtered_count == 0:
            return 0
        return (self.current_page - 1) * self.page_size + 1

    @property
    def last_item(self) -> int:
        return min(self.current_page * self.page_size, self.total_filtered_count)

    def page_range(self, max_visible: int = 5) -> list[int]:
        """Page numbers the pager shows as buttons."""

        return page_window(self.current_page, self.total_pages, max_visible=max_visible)


__all__ = [
    "ALL_KINDS",
    "AnnotatedRecord",
    "DEFAULT_PAGE_SIZE",
    "DELETE_FAMILY",
    "EmptyState",
    "FetchScope",
    "FilterState",
    "HistoryPage",
    "PAGE_SIZE_OPTIONS",
    "TransactionKind",
    "TransactionRecord",
]
