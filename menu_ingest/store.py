"""PostgreSQL implementations of the catalog store and the audit sink.

``bulk_upsert`` sends the whole batch as one ``INSERT ... ON CONFLICT (id)
DO UPDATE ... RETURNING`` inside a single transaction, so a batch is either
fully written or not at all.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from menu_ingest.models.contracts import AuditRecord, DraftMenuItem, PersistedMenuItem
from menu_ingest.models.db import MenuItemRow, MenuUpdateRow

logger = structlog.get_logger()

_UPSERT_COLUMNS = ("name", "description", "price", "category", "subcategory", "available", "tags")


def build_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, pool_pre_ping=True)


def _row_values(item: DraftMenuItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "price": item.price,
        "category": item.category,
        "subcategory": item.subcategory,
        "available": item.available,
        "tags": sorted(item.tags),
    }


class SqlMenuItemStore:
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def bulk_upsert(self, items: list[DraftMenuItem]) -> list[PersistedMenuItem]:
        if not items:
            return []

        stmt = insert(MenuItemRow).values([_row_values(item) for item in items])
        stmt = stmt.on_conflict_do_update(
            index_elements=[MenuItemRow.id],
            set_={
                **{column: stmt.excluded[column] for column in _UPSERT_COLUMNS},
                "updated_at": func.now(),
            },
        ).returning(*MenuItemRow.__table__.columns)

        async with self._engine.begin() as conn:
            result = await conn.execute(stmt)
            rows = result.mappings().all()

        by_id = {row["id"]: row for row in rows}
        # RETURNING order is not guaranteed; report back in submission order
        saved = [
            PersistedMenuItem(
                id=row["id"],
                name=row["name"],
                description=row["description"],
                price=row["price"],
                category=row["category"],
                subcategory=row["subcategory"],
                available=row["available"],
                tags=set(row["tags"] or []),
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for item in items
            if (row := by_id.get(item.id)) is not None
        ]
        logger.debug("menu_items_upserted", submitted=len(items), returned=len(rows))
        return saved


class SqlAuditLog:
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def record(self, entry: AuditRecord) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(
                insert(MenuUpdateRow).values(
                    user_id=entry.actor_id,
                    menu_type=entry.menu_type,
                    operation=entry.operation,
                    changes=entry.changes,
                    created_at=entry.timestamp,
                )
            )
