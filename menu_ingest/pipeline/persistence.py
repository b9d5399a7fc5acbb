"""Atomic batch write of extracted menu items, plus its audit record."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from menu_ingest.errors import PersistenceError
from menu_ingest.models.contracts import AuditRecord, DraftMenuItem, MenuCategory, PersistedMenuItem
from menu_ingest.pipeline.side_effects import BestEffortAuditSink

if TYPE_CHECKING:
    from menu_ingest.pipeline.ports import AuditSink, MenuItemStore

logger = structlog.get_logger()


class BulkUpsertCoordinator:
    """Writes one batch through the store and logs it to the audit trail.

    The store's ``bulk_upsert`` is trusted to be all-or-nothing; this class
    adds no retries or compensation. The audit write happens after a
    successful upsert and can never fail it.
    """

    def __init__(self, store: MenuItemStore, audit: AuditSink) -> None:
        self._store = store
        self._audit = (
            audit if isinstance(audit, BestEffortAuditSink) else BestEffortAuditSink(audit)
        )

    async def persist(
        self,
        items: list[DraftMenuItem],
        actor_id: str,
        menu_type: MenuCategory,
    ) -> list[PersistedMenuItem]:
        batch = [item.model_copy(deep=True) for item in items]
        try:
            saved = await self._store.bulk_upsert(batch)
        except Exception as exc:
            logger.error(
                "menu_bulk_upsert_failed",
                actor_id=actor_id,
                menu_type=menu_type,
                items_count=len(batch),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            raise PersistenceError(f"Bulk upsert of {len(batch)} items failed: {exc}") from exc

        await self._audit.record(
            AuditRecord(
                actor_id=actor_id,
                menu_type=menu_type,
                changes={"items_count": len(batch), "items": [item.id for item in batch]},
                timestamp=datetime.now(tz=UTC),
            )
        )
        logger.info(
            "menu_bulk_upsert_complete",
            actor_id=actor_id,
            menu_type=menu_type,
            items_submitted=len(batch),
            items_saved=len(saved),
        )
        return saved
