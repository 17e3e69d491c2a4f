"""Map free-form upstream type strings onto :class:`TransactionKind`.

Classification is an ordered table of ``(predicate, kind)`` rules evaluated
first-match-wins over a separator-normalized token:

1. exact canonical tokens (``in``, ``soft_delete``, ``bulk_permanent_delete``...)
   plus a few legacy spellings the backend still emits;
2. an explicit deletion flag on the record;
3. substring heuristics, in fixed priority: ``delete`` (``soft`` refines to
   SoftDelete), then ``in``/``add``/``create``, then ``out``/``remove``, then
   ``transfer``;
4. otherwise ``UNKNOWN``.

Under this order ``TRANSFER_IN`` lands in StockIn and ``TRANSFER_OUT`` in
StockOut; the kind filter compensates for transfers (see ``filters``).
"""

from __future__ import annotations

import re
from collections.abc import Callable

from .models import TransactionKind

_SEPARATORS_RE = re.compile(r"[\s_\-]+")

type KindPredicate = Callable[[str, bool], bool]
"""Rule predicate over ``(token, deletion_flag)``."""


def canonical_token(raw_type: object) -> str:
    """Lower-case ``raw_type`` and fold runs of ``_``, ``-`` and whitespace into ``_``."""

    if raw_type is None:
        return ""
    return _SEPARATORS_RE.sub("_", str(raw_type).strip().lower()).strip("_")


# Exact tokens, after separator folding. Legacy spellings sit alongside the
# canonical values of the enum.
_EXACT_TOKENS: dict[str, TransactionKind] = {
    **{kind.value: kind for kind in TransactionKind if kind is not TransactionKind.UNKNOWN},
    "stock_in": TransactionKind.STOCK_IN,
    "stock_out": TransactionKind.STOCK_OUT,
    "new_item": TransactionKind.CREATE,
}


def _is_token(expected: str) -> KindPredicate:
    return lambda token, _flag: token == expected


def _flagged(_token: str, flag: bool) -> bool:
    return flag


def _contains_all(*parts: str) -> KindPredicate:
    return lambda token, _flag: all(p in token for p in parts)


def _contains_any(*parts: str) -> KindPredicate:
    return lambda token, _flag: any(p in token for p in parts)


KIND_RULES: tuple[tuple[KindPredicate, TransactionKind], ...] = (
    *((_is_token(token), kind) for token, kind in _EXACT_TOKENS.items()),
    (_flagged, TransactionKind.DELETE),
    (_contains_all("delete", "soft"), TransactionKind.SOFT_DELETE),
    (_contains_any("delete"), TransactionKind.DELETE),
    (_contains_any("in", "add", "create"), TransactionKind.STOCK_IN),
    (_contains_any("out", "remove"), TransactionKind.STOCK_OUT),
    (_contains_any("transfer"), TransactionKind.TRANSFER),
)


def normalize(raw_type: str | None, is_deletion_flag: bool | None = None) -> TransactionKind:
    """Classify ``raw_type`` into exactly one canonical kind (never unset)."""

    token = canonical_token(raw_type)
    flag = is_deletion_flag is True
    for predicate, kind in KIND_RULES:
        if predicate(token, flag):
            return kind
    return TransactionKind.UNKNOWN


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

_LABEL_OVERRIDES: dict[str, str] = {
    "in": "STOCK IN",
    "out": "STOCK OUT",
}


def format_type_label(raw_type: str | None) -> str:
    """Display label for an upstream type string.

    ``"BULK_SOFT_DELETE"`` renders as ``"BULK SOFT DELETE"``.
    """

    token = canonical_token(raw_type)
    if not token:
        return "UNKNOWN"
    return _LABEL_OVERRIDES.get(token) or token.replace("_", " ").upper()


def format_kind(kind: TransactionKind) -> str:
    """Display label for a canonical kind; ``UNKNOWN`` for the catch-all."""

    return format_type_label(kind.value)


_BADGE_BY_KIND: dict[TransactionKind, str] = {
    TransactionKind.STOCK_IN: "success",
    TransactionKind.CREATE: "success",
    TransactionKind.STOCK_OUT: "danger",
    TransactionKind.TRANSFER: "info",
    TransactionKind.UPDATE: "primary",
    TransactionKind.DELETE: "danger",
    TransactionKind.SOFT_DELETE: "warning",
    TransactionKind.BULK_SOFT_DELETE: "warning",
    TransactionKind.PERMANENT_DELETE: "danger",
    TransactionKind.BULK_PERMANENT_DELETE: "danger",
    TransactionKind.UNKNOWN: "secondary",
}

# Directional transfers keep their own colors even though the heuristics
# bucket them under stock in/out.
_BADGE_BY_TOKEN: dict[str, str] = {
    "transfer_in": "info",
    "transfer_out": "warning",
}


def badge_variant(raw_type: str | None, kind: TransactionKind) -> str:
    """Badge color name for a row of the given type."""

    return _BADGE_BY_TOKEN.get(canonical_token(raw_type)) or _BADGE_BY_KIND[kind]


__all__ = [
    "KIND_RULES",
    "badge_variant",
    "canonical_token",
    "format_kind",
    "format_type_label",
    "normalize",
]
