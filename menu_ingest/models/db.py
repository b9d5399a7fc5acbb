"""SQLAlchemy ORM models for the menu catalog.

Menu item ids are strings minted by the ingestion pipeline, not database
sequences, so the upsert can key on them directly.
"""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Identity, Index, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class MenuItemRow(Base):
    __tablename__ = "menu_items"
    __table_args__ = (
        Index("idx_menu_items_category", "category"),
        Index("idx_menu_items_available", "available"),
        Index("idx_menu_items_updated", "updated_at"),
    )

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    subcategory: Mapped[str | None] = mapped_column(String(100), nullable=True)
    available: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")
    tags: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, server_default="{}")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class MenuUpdateRow(Base):
    """Audit log of catalog changes (one row per ingestion batch)."""

    __tablename__ = "menu_updates"
    __table_args__ = (
        Index("idx_menu_updates_user_id", "user_id"),
        Index("idx_menu_updates_menu_type", "menu_type"),
        Index("idx_menu_updates_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger, Identity(), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    menu_type: Mapped[str] = mapped_column(String(50), nullable=False)
    operation: Mapped[str] = mapped_column(String(20), nullable=False)
    changes: Mapped[dict] = mapped_column(JSONB, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
