"""Pytest configuration for test isolation.

The SQL source and the CLI read ``DATABASE_URL`` and ``STOCK_LEDGER_*`` from
the environment, and ``inventory_db.client`` caches one engine per URL for
the life of the process. A developer shell (or a ``.env`` loaded by an earlier
CLI test) would otherwise leak into every test, and cached engines would keep
SQLite files of finished tests open.

An autouse fixture clears those variables per test and disposes cached engines
afterwards.
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from inventory_db.client import dispose_engines

_ENV_PREFIXES = ("STOCK_LEDGER_",)
_ENV_NAMES = ("DATABASE_URL",)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in list(os.environ):
        if name in _ENV_NAMES or name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    yield
    dispose_engines()
