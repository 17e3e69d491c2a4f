from __future__ import annotations

import pytest

from stock_ledger.kinds import (
    badge_variant,
    canonical_token,
    format_kind,
    format_type_label,
    normalize,
)
from stock_ledger.models import TransactionKind as K

# Raw upstream strings seen in the wild, with the kind they must classify as.
CLASSIFICATION_TABLE: tuple[tuple[str | None, bool | None, K], ...] = (
    # Exact tokens, any separator and case
    ("in", None, K.STOCK_IN),
    ("IN", None, K.STOCK_IN),
    ("STOCK_IN", None, K.STOCK_IN),
    ("stock-out", None, K.STOCK_OUT),
    ("transfer", None, K.TRANSFER),
    ("UPDATE", None, K.UPDATE),
    ("create", None, K.CREATE),
    ("NEW_ITEM", None, K.CREATE),
    ("delete", None, K.DELETE),
    ("soft-delete", None, K.SOFT_DELETE),
    ("Soft Delete", None, K.SOFT_DELETE),
    ("permanent-delete", None, K.PERMANENT_DELETE),
    ("BULK_SOFT_DELETE", None, K.BULK_SOFT_DELETE),
    ("bulk permanent delete", None, K.BULK_PERMANENT_DELETE),
    # Exact match beats the deletion flag
    ("STOCK_OUT", True, K.STOCK_OUT),
    # Flag applies when nothing matched exactly
    ("ARCHIVED", True, K.DELETE),
    ("", True, K.DELETE),
    # Substring heuristics, in priority order
    ("ITEM_DELETED", None, K.DELETE),
    ("SOFT_DELETED_ITEM", None, K.SOFT_DELETE),
    ("ADD_STOCK", None, K.STOCK_IN),
    ("CREATED_FROM_SCAN", None, K.STOCK_IN),
    ("REMOVE", None, K.STOCK_OUT),
    ("CHECKOUT", None, K.STOCK_OUT),
    ("TRANSFER_IN", None, K.STOCK_IN),
    ("TRANSFER_OUT", None, K.STOCK_OUT),
    ("BOX_TRANSFER", None, K.TRANSFER),
    # Nothing matches
    ("MOVE", None, K.UNKNOWN),
    ("", None, K.UNKNOWN),
    (None, None, K.UNKNOWN),
    ("ARCHIVED", False, K.UNKNOWN),
)


@pytest.mark.parametrize("raw, flag, expected", CLASSIFICATION_TABLE)
def test_normalize_fixture_table(raw: str | None, flag: bool | None, expected: K):
    assert normalize(raw, flag) is expected


@pytest.mark.parametrize("kind", list(K))
def test_normalize_is_idempotent_on_canonical_tokens(kind: K):
    assert normalize(kind.value) is kind
    assert normalize(normalize(kind.value).value) is kind


def test_canonical_token_folds_separators():
    assert canonical_token("  Bulk - Soft__Delete ") == "bulk_soft_delete"
    assert canonical_token(None) == ""


def test_format_type_label():
    assert format_type_label("BULK_SOFT_DELETE") == "BULK SOFT DELETE"
    assert format_type_label("soft-delete") == "SOFT DELETE"
    assert format_type_label("in") == "STOCK IN"
    assert format_type_label("OUT") == "STOCK OUT"
    assert format_type_label("") == "UNKNOWN"
    assert format_type_label(None) == "UNKNOWN"


def test_format_kind_renders_unknown():
    assert format_kind(K.UNKNOWN) == "UNKNOWN"
    assert format_kind(K.PERMANENT_DELETE) == "PERMANENT DELETE"


def test_badge_variant_keeps_transfer_direction_colors():
    assert badge_variant("TRANSFER_IN", normalize("TRANSFER_IN")) == "info"
    assert badge_variant("TRANSFER_OUT", normalize("TRANSFER_OUT")) == "warning"
    assert badge_variant("STOCK_IN", K.STOCK_IN) == "success"
    assert badge_variant("STOCK_OUT", K.STOCK_OUT) == "danger"
    assert badge_variant("SOFT_DELETE", K.SOFT_DELETE) == "warning"
    assert badge_variant("MOVE", K.UNKNOWN) == "secondary"
