"""Filter session over one fetched transaction history.

A :class:`TransactionHistory` owns the fetched record list and the current
:class:`FilterState`. Filtering and pagination are recomputed from those two
on every :meth:`TransactionHistory.projection` call; fetching only happens in
:meth:`TransactionHistory.refresh`.

Overlapping refreshes settle in whatever order the source answers, and by
default the last one to settle wins. With ``discard_stale=True`` each refresh
takes a new request epoch and a response whose epoch is no longer current is
dropped instead of applied.
"""

from __future__ import annotations

from collections.abc import Callable

from .api import annotate_all, select_page
from .errors import FetchFailure
from .fetch import FetchResult, fetch_transaction_result
from .logging_setup import get_logger
from .models import AnnotatedRecord, FetchScope, FilterState, HistoryPage
from .sources import TransactionSource

_logger = get_logger("stock_ledger.history")

type CountCallback = Callable[[int], None]


class TransactionHistory:
    """One filter session: fetched records plus the filters applied to them.

    Parameters
    ----------
    source:
        Where records are fetched from.
    scope:
        Box scope and optional record cap. Defaults to the global history.
    filters:
        Initial filter state.
    on_count_change:
        Called with the filtered record count whenever it differs from the
        count reported by the previous projection (and on the first one).
    discard_stale:
        Drop responses from refreshes superseded by a later one.
    """

    def __init__(
        self,
        source: TransactionSource,
        *,
        scope: FetchScope | None = None,
        filters: FilterState | None = None,
        on_count_change: CountCallback | None = None,
        discard_stale: bool = False,
    ) -> None:
        self._source = source
        self._scope = scope or FetchScope()
        self._filters = filters or FilterState()
        self._on_count_change = on_count_change
        self._discard_stale = discard_stale
        self._records: list[AnnotatedRecord] = []
        self._failure: FetchFailure | None = None
        self._epoch = 0
        self._in_flight = 0
        self._last_count: int | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def scope(self) -> FetchScope:
        return self._scope

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def records(self) -> list[AnnotatedRecord]:
        return list(self._records)

    @property
    def failure(self) -> FetchFailure | None:
        return self._failure

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    def update_filters(self, filters: FilterState) -> None:
        """Swap the filter state. Does not refetch; see :meth:`apply_filters`."""

        self._filters = filters

    def set_scope(self, scope: FetchScope) -> None:
        self._scope = scope

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def refresh(self) -> FetchResult | None:
        """Fetch with the current scope and filters and replace the record list.

        Returns the applied result, or ``None`` when the response was stale
        and ``discard_stale`` is set.
        """

        self._epoch += 1
        epoch = self._epoch
        scope, filters = self._scope, self._filters
        self._in_flight += 1
        try:
            result = await fetch_transaction_result(self._source, scope, filters)
        finally:
            self._in_flight -= 1

        if self._discard_stale and epoch != self._epoch:
            _logger.info(
                "discarding stale history response (epoch %d, current %d, %d records)",
                epoch,
                self._epoch,
                len(result.records),
            )
            return None

        self._records = annotate_all(result.records)
        self._failure = result.failure
        _logger.debug(
            "history refreshed: %d records (failure=%s, fallback=%s)",
            len(self._records),
            result.failure,
            result.used_fallback,
        )
        return result

    async def apply_filters(self, filters: FilterState) -> FetchResult | None:
        """Swap the filter state and refetch with it."""

        self.update_filters(filters)
        return await self.refresh()

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def projection(self) -> HistoryPage:
        """Filter and paginate the current records for rendering."""

        page = select_page(self._records, self._filters, failure=self._failure)
        if page.total_filtered_count != self._last_count:
            self._last_count = page.total_filtered_count
            if self._on_count_change is not None:
                self._on_count_change(page.total_filtered_count)
        return page

    def clear(self) -> None:
        """Forget fetched records. With ``discard_stale`` a refresh in flight is dropped."""

        self._epoch += 1
        self._records = []
        self._failure = None
        self._last_count = None


__all__ = ["CountCallback", "TransactionHistory"]
