"""Public interface for the ``stock_ledger`` package.

Re-exports the classification pipeline, the fetch layer, the filter session
and the public models as the stable import surface. There is no runtime logic
here, only symbol re-exports.
"""

from .api import annotate, annotate_all, select_page
from .attribution import extract_attribution
from .deletions import is_deletion
from .errors import FetchFailure, MalformedPayload, SourceUnavailable, StockLedgerError
from .fetch import FetchResult, fetch_transaction_result, fetch_transactions
from .filters import matches, select
from .history import TransactionHistory
from .kinds import normalize
from .models import (
    DELETE_FAMILY,
    PAGE_SIZE_OPTIONS,
    AnnotatedRecord,
    EmptyState,
    FetchScope,
    FilterState,
    HistoryPage,
    TransactionKind,
    TransactionRecord,
)
from .pagination import PageSlice, page_window, paginate
from .sources import HistoryQuery, SqlTransactionSource, TransactionSource

__all__ = [
    # Pipeline
    "annotate",
    "annotate_all",
    "extract_attribution",
    "is_deletion",
    "matches",
    "normalize",
    "page_window",
    "paginate",
    "select",
    "select_page",
    # Fetching
    "fetch_transaction_result",
    "fetch_transactions",
    "FetchResult",
    "HistoryQuery",
    "SqlTransactionSource",
    "TransactionSource",
    "TransactionHistory",
    # Errors
    "FetchFailure",
    "MalformedPayload",
    "SourceUnavailable",
    "StockLedgerError",
    # Models / types
    "AnnotatedRecord",
    "DELETE_FAMILY",
    "EmptyState",
    "FetchScope",
    "FilterState",
    "HistoryPage",
    "PAGE_SIZE_OPTIONS",
    "PageSlice",
    "TransactionKind",
    "TransactionRecord",
]
