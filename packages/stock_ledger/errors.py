"""Error types raised inside the fetch layer.

Both are absorbed at the aggregator boundary (see ``stock_ledger.fetch``) and
turned into an empty record list tagged with a :class:`FetchFailure`; callers
of the public fetch functions never see them.
"""

from __future__ import annotations

from enum import StrEnum


class StockLedgerError(Exception):
    """Base class for package errors."""


class SourceUnavailable(StockLedgerError, RuntimeError):
    """Transport or backend failure while running an upstream query."""


class MalformedPayload(StockLedgerError, ValueError):
    """An upstream query answered with something other than a list of records."""


class FetchFailure(StrEnum):
    SOURCE_UNAVAILABLE = "source_unavailable"
    MALFORMED_PAYLOAD = "malformed_payload"


__all__ = [
    "FetchFailure",
    "MalformedPayload",
    "SourceUnavailable",
    "StockLedgerError",
]
