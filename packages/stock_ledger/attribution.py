"""Derive the "who/why" label shown for stock-out and deletion rows.

Each strategy is an independent extractor ``(record, kind) -> str | None``;
:func:`extract_attribution` runs them in a fixed order and returns the first
non-empty answer:

1. structured ``customer_info`` (``contact_person``, else ``name``);
2. a ``CONSUMED by <X>`` / ``SOLD to <X>`` phrase in ``details``;
3. a customer id combined with a CONSUMED/SOLD reason -> ``Customer #<id>``;
4. the same phrases in ``notes``;
5. a bare CONSUMED/SOLD reason on a stock-out -> ``Consumed`` / ``Sold``.

Reason codes ``"1"`` and ``"7"`` are legacy literals for CONSUMED and SOLD.
No other codes are mapped.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from .kinds import normalize
from .models import TransactionKind, TransactionRecord

type Extractor = Callable[[TransactionRecord, TransactionKind], str | None]

_PHRASE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"CONSUMED by ([^.]+)", re.IGNORECASE),
    re.compile(r"SOLD to ([^.]+)", re.IGNORECASE),
)

CONSUMED = "CONSUMED"
SOLD = "SOLD"
_REASON_CODES: dict[str, str] = {
    "1": CONSUMED,
    CONSUMED: CONSUMED,
    "7": SOLD,
    SOLD: SOLD,
}


def reason_category(reason_code: str | None) -> str | None:
    """Return ``"CONSUMED"``, ``"SOLD"``, or ``None`` for any other reason."""

    if reason_code is None:
        return None
    return _REASON_CODES.get(reason_code.strip().upper())


def display_reason(reason_code: str | None) -> str:
    """Reason text for display, with the legacy numeric codes spelled out."""

    if reason_code is None:
        return ""
    code = reason_code.strip()
    if code in ("1", "7"):
        return _REASON_CODES[code]
    return code


def _match_phrase(text: str | None) -> str | None:
    if not text:
        return None
    for pattern in _PHRASE_PATTERNS:
        m = pattern.search(text)
        if m:
            value = m.group(1).strip()
            if value:
                return value
    return None


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def from_customer_info(record: TransactionRecord, _kind: TransactionKind) -> str | None:
    info = record.customer_info or {}
    for key in ("contact_person", "name"):
        value = info.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def from_details(record: TransactionRecord, _kind: TransactionKind) -> str | None:
    return _match_phrase(record.details)


def from_customer_reason(record: TransactionRecord, _kind: TransactionKind) -> str | None:
    if record.customer_id and reason_category(record.reason_code) is not None:
        return f"Customer #{record.customer_id}"
    return None


def from_notes(record: TransactionRecord, _kind: TransactionKind) -> str | None:
    return _match_phrase(record.notes)


def from_stock_out_reason(record: TransactionRecord, kind: TransactionKind) -> str | None:
    if kind is not TransactionKind.STOCK_OUT:
        return None
    category = reason_category(record.reason_code)
    if category == CONSUMED:
        return "Consumed"
    if category == SOLD:
        return "Sold"
    return None


EXTRACTORS: tuple[Extractor, ...] = (
    from_customer_info,
    from_details,
    from_customer_reason,
    from_notes,
    from_stock_out_reason,
)


def extract_attribution(
    record: TransactionRecord,
    kind: TransactionKind | None = None,
    *,
    extractors: Sequence[Extractor] = EXTRACTORS,
) -> str:
    """Run ``extractors`` in order; return the first non-empty label or ``""``."""

    if kind is None:
        kind = normalize(record.raw_type, record.is_deletion_flag)
    for extractor in extractors:
        label = extractor(record, kind)
        if label:
            return label
    return ""


__all__ = [
    "EXTRACTORS",
    "Extractor",
    "display_reason",
    "extract_attribution",
    "from_customer_info",
    "from_customer_reason",
    "from_details",
    "from_notes",
    "from_stock_out_reason",
    "reason_category",
]
