from __future__ import annotations

from stock_ledger.attribution import (
    display_reason,
    extract_attribution,
    from_details,
    from_notes,
    reason_category,
)
from stock_ledger.kinds import normalize
from stock_ledger.models import TransactionKind, TransactionRecord


def _rec(**fields) -> TransactionRecord:
    return TransactionRecord.from_payload(fields)


def test_stock_out_with_consumed_code_and_no_customer():
    record = _rec(transaction_type="STOCK_OUT", reason="1")

    assert normalize(record.raw_type) is TransactionKind.STOCK_OUT
    assert extract_attribution(record) == "Consumed"


def test_stock_out_sold_literal():
    assert extract_attribution(_rec(transaction_type="STOCK_OUT", reason="sold")) == "Sold"
    assert extract_attribution(_rec(transaction_type="STOCK_OUT", reason=7)) == "Sold"


def test_contact_person_beats_details_phrase():
    record = _rec(
        transaction_type="STOCK_OUT",
        customer_info={"contact_person": "Dana", "name": "Acme"},
        details="CONSUMED by Lab 3.",
    )
    assert extract_attribution(record) == "Dana"


def test_customer_name_used_without_contact_person():
    record = _rec(
        transaction_type="STOCK_OUT", customer_info={"contact_person": " ", "name": "Acme"}
    )
    assert extract_attribution(record) == "Acme"


def test_details_phrase_is_trimmed_and_stops_at_period():
    record = _rec(
        transaction_type="STOCK_OUT", details="Removed 2 units. consumed by  Lab 3 . Thanks"
    )
    assert extract_attribution(record) == "Lab 3"
    assert from_details(_rec(details="SOLD to Northwind"), TransactionKind.STOCK_OUT) == "Northwind"


def test_customer_id_with_reason_beats_notes():
    record = _rec(
        transaction_type="STOCK_OUT",
        customer_id="C-9",
        reason="CONSUMED",
        notes="SOLD to Someone else",
    )
    assert extract_attribution(record) == "Customer #C-9"


def test_customer_id_without_matching_reason_falls_through_to_notes():
    record = _rec(transaction_type="STOCK_OUT", customer_id="C-9", reason="3", notes="sold to Bob")
    assert extract_attribution(record) == "Bob"
    assert from_notes(record, TransactionKind.STOCK_OUT) == "Bob"


def test_bare_reason_only_applies_to_stock_out():
    record = _rec(transaction_type="DELETE", reason="1")
    assert extract_attribution(record) == ""


def test_no_signal_yields_empty_string():
    assert extract_attribution(_rec(transaction_type="STOCK_IN")) == ""


def test_custom_extractor_chain_short_circuits():
    calls: list[str] = []

    def first(_record, _kind):
        calls.append("first")
        return "from first"

    def second(_record, _kind):  # pragma: no cover - must not run
        calls.append("second")
        return "from second"

    assert extract_attribution(_rec(), extractors=(first, second)) == "from first"
    assert calls == ["first"]


def test_reason_codes_are_preserved_exactly():
    assert reason_category("1") == "CONSUMED"
    assert reason_category("7") == "SOLD"
    assert reason_category("consumed") == "CONSUMED"
    assert reason_category("2") is None
    assert reason_category(None) is None
    assert display_reason("1") == "CONSUMED"
    assert display_reason("7") == "SOLD"
    assert display_reason("DAMAGED") == "DAMAGED"
    assert display_reason(None) == ""
