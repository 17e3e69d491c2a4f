"""Fetch aggregator: pick the upstream query, apply the deletion fallback, validate.

Errors never escape this module. A transport failure or a payload that is not
a list becomes an empty result tagged with a :class:`FetchFailure`, so callers
can still tell "nothing matched" from "could not load".
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from .errors import FetchFailure, MalformedPayload
from .filters import DELETE_FILTER
from .logging_setup import get_logger
from .models import FetchScope, FilterState, TransactionRecord
from .sources import HistoryQuery, TransactionSource

_logger = get_logger("stock_ledger.fetch")


@dataclass(frozen=True, slots=True)
class FetchResult:
    records: list[TransactionRecord]
    failure: FetchFailure | None = None
    used_fallback: bool = False


def coerce_payload(payload: Any) -> list[TransactionRecord]:
    """Validate an upstream payload into records.

    Raises :class:`MalformedPayload` when ``payload`` is not a list. Elements
    that are not mappings are dropped with a warning.
    """

    if not isinstance(payload, list):
        raise MalformedPayload(f"expected a list of records, got {type(payload).__name__}")
    records: list[TransactionRecord] = []
    for pos, item in enumerate(payload):
        try:
            records.append(TransactionRecord.model_validate(item))
        except ValidationError as e:
            _logger.warning("dropping upstream record at position %d: %s", pos, e)
    return records


async def _run_query(
    name: str, call: Callable[[], Awaitable[Any]]
) -> tuple[list[TransactionRecord], FetchFailure | None]:
    try:
        payload = await call()
        return coerce_payload(payload), None
    except MalformedPayload as e:
        _logger.warning("%s query returned a malformed payload: %s", name, e)
        return [], FetchFailure.MALFORMED_PAYLOAD
    except Exception as e:  # noqa: BLE001
        _logger.warning("%s query failed: %s", name, e, exc_info=True)
        return [], FetchFailure.SOURCE_UNAVAILABLE


async def fetch_transaction_result(
    source: TransactionSource,
    scope: FetchScope,
    filters: FilterState,
) -> FetchResult:
    """Fetch records for ``scope`` and report how the fetch went.

    - Box-bound scopes issue only the box query (no server-side filters).
    - Otherwise the global history query runs with the item id (numeric item
      queries only), kind and date range from ``filters``.
    - When the kind filter is ``delete`` and that query yields nothing, the
      broad deletion query runs; a non-empty answer replaces the empty one.
    - ``scope.limit`` truncates the final list.
    """

    used_fallback = False
    if scope.is_box_bound:
        _logger.debug("fetching box %s transactions", scope.box_id)
        records, failure = await _run_query("box", lambda: source.box_transactions(scope.box_id))
    else:
        query = HistoryQuery.from_filters(filters)
        _logger.debug("fetching stock history %s", query)
        records, failure = await _run_query("history", lambda: source.stock_history(query))

        if filters.kind == DELETE_FILTER and not records:
            fallback, fallback_failure = await _run_query(
                "deletion fallback", lambda: source.deletion_history(item_id=query.item_id)
            )
            if fallback:
                _logger.info("deletion fallback query supplied %d records", len(fallback))
                records, failure, used_fallback = fallback, None, True
            elif failure is None:
                failure = fallback_failure

    if scope.limit is not None and len(records) > scope.limit:
        records = records[: scope.limit]
    return FetchResult(records=records, failure=failure, used_fallback=used_fallback)


async def fetch_transactions(
    source: TransactionSource,
    scope: FetchScope,
    filters: FilterState,
) -> list[TransactionRecord]:
    """Return the fetched records only; failures read as an empty list."""

    result = await fetch_transaction_result(source, scope, filters)
    return result.records


__all__ = [
    "FetchResult",
    "coerce_payload",
    "fetch_transaction_result",
    "fetch_transactions",
]
