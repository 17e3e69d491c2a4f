"""Shared SQLAlchemy models registry for the inventory database.

Currently includes the stock-movement models read by ``stock_ledger``.
"""

from .inventory import Base, InvBox, InvCustomer, InvItemTransaction

__all__ = [
    "Base",
    "InvBox",
    "InvCustomer",
    "InvItemTransaction",
]
