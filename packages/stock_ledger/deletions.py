"""Deletion classification, independent of the normalized kind.

A generic kind matcher can mis-bucket a deletion (e.g. an ``ITEM_DELETED``
row flagged upstream but typed oddly), so the check looks at three signals
and accepts any of them.
"""

from __future__ import annotations

from .kinds import normalize
from .models import DELETE_FAMILY, TransactionKind, TransactionRecord


def is_deletion(record: TransactionRecord, kind: TransactionKind | None = None) -> bool:
    """Return True when ``record`` represents any deletion variant.

    ``kind`` is the record's normalized kind when the caller already has it;
    otherwise it is computed here.
    """

    if record.is_deletion_flag is True:
        return True
    if kind is None:
        kind = normalize(record.raw_type, record.is_deletion_flag)
    return kind in DELETE_FAMILY or "delete" in record.raw_type.lower()


__all__ = ["is_deletion"]
