"""inventory_db: shared database library (SQLAlchemy) for the inventory workspace.

Public exports
--------------
- ``Base`` and ``metadata`` for schema creation
- ORM models in ``inventory_db.models.inventory`` (re-exported for convenience)
- Engine/session helpers in ``inventory_db.client``
"""

from __future__ import annotations

from .models.inventory import Base, InvBox, InvCustomer, InvItemTransaction

metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "InvBox",
    "InvCustomer",
    "InvItemTransaction",
]
