"""Public orchestration for the ``stock_ledger`` package.

The synchronous half of the pipeline lives here: normalize and classify raw
records into :class:`AnnotatedRecord` views, then filter and paginate them
into a :class:`HistoryPage`. Everything in this module is pure and is
recomputed on each relevant state change; fetching happens in
:mod:`stock_ledger.fetch`.
"""

from __future__ import annotations

from collections.abc import Iterable

from .attribution import display_reason, extract_attribution
from .deletions import is_deletion
from .errors import FetchFailure
from .filters import select
from .kinds import badge_variant, format_type_label, normalize
from .models import (
    AnnotatedRecord,
    EmptyState,
    FilterState,
    HistoryPage,
    TransactionRecord,
)
from .pagination import clamp_page, paginate, total_pages


def annotate(record: TransactionRecord) -> AnnotatedRecord:
    """Derive kind, deletion status, attribution and display fields for ``record``."""

    kind = normalize(record.raw_type, record.is_deletion_flag)
    return AnnotatedRecord(
        record=record,
        transaction_kind=kind,
        is_deletion=is_deletion(record, kind),
        attribution_label=extract_attribution(record, kind),
        kind_label=format_type_label(record.raw_type),
        badge_variant=badge_variant(record.raw_type, kind),
        display_reason=display_reason(record.reason_code),
    )


def annotate_all(records: Iterable[TransactionRecord]) -> list[AnnotatedRecord]:
    return [annotate(r) for r in records]


def select_page(
    rows: Iterable[AnnotatedRecord],
    filters: FilterState,
    *,
    failure: FetchFailure | None = None,
) -> HistoryPage:
    """Filter ``rows`` and cut out the page ``filters`` asks for.

    The requested page is clamped to ``[1, total_pages]``. ``failure`` is the
    outcome of the fetch that produced ``rows``; with no rows to show it turns
    the empty state into ``LOAD_FAILED`` instead of ``NO_MATCHES``.
    """

    filtered = select(rows, filters)
    pages = total_pages(len(filtered), filters.page_size)
    current = clamp_page(filters.page, pages)
    page_slice = paginate(filtered, current, filters.page_size)

    empty_state: EmptyState | None = None
    if not filtered:
        empty_state = EmptyState.LOAD_FAILED if failure is not None else EmptyState.NO_MATCHES

    return HistoryPage(
        page_records=page_slice.slice,
        total_filtered_count=len(filtered),
        total_pages=pages,
        current_page=current,
        page_size=filters.page_size,
        empty_state=empty_state,
    )


__all__ = ["annotate", "annotate_all", "select_page"]
