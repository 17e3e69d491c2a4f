from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: inv_boxes
# ---------------------------


class InvBox(Base):
    __tablename__ = "inv_boxes"

    # Box ids are strings upstream (scanned labels may carry prefixes).
    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    box_number: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


# ---------------------------
# Reference: inv_customers
# ---------------------------


class InvCustomer(Base):
    __tablename__ = "inv_customers"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String, nullable=True)


# ---------------------------
# Core: inv_item_transactions
# ---------------------------


class InvItemTransaction(Base):
    __tablename__ = "inv_item_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    item_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Free-form upstream type string ("STOCK_OUT", "bulk_soft_delete", ...).
    transaction_type: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    previous_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    new_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Legacy removal reason; "1" and "7" are CONSUMED and SOLD.
    reason: Mapped[str | None] = mapped_column(String(50), nullable=True)
    box_id: Mapped[str | None] = mapped_column(
        String(50), ForeignKey("inv_boxes.id"), nullable=True
    )
    customer_id: Mapped[str | None] = mapped_column(
        String(50), ForeignKey("inv_customers.id"), nullable=True
    )
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    is_deletion: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )

    __table_args__ = (
        Index("idx_inv_item_transactions_item_id", "item_id"),
        Index("idx_inv_item_transactions_transaction_type", "transaction_type"),
        Index("idx_inv_item_transactions_created_at", "created_at"),
    )
