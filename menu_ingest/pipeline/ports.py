"""Collaborator contracts consumed by the ingestion pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from menu_ingest.models.contracts import (
        AlertSeverity,
        AuditRecord,
        DraftMenuItem,
        PersistedMenuItem,
        RecognitionResult,
    )


@runtime_checkable
class Preprocessor(Protocol):
    """Normalizes raw upload bytes into recognizer-friendly image bytes."""

    def __call__(self, image_data: bytes) -> bytes: ...


@runtime_checkable
class Recognizer(Protocol):
    """Text-recognition service. Raises RecognitionError on failure."""

    async def recognize(self, image_data: bytes) -> RecognitionResult: ...


@runtime_checkable
class MenuItemStore(Protocol):
    """Catalog storage. ``bulk_upsert`` is atomic per call."""

    async def bulk_upsert(self, items: list[DraftMenuItem]) -> list[PersistedMenuItem]: ...


@runtime_checkable
class AuditSink(Protocol):
    async def record(self, entry: AuditRecord) -> None: ...


@runtime_checkable
class AlertSink(Protocol):
    async def notify(self, message: str, severity: AlertSeverity) -> None: ...


@runtime_checkable
class DeployHook(Protocol):
    async def menu_updated(self, menu_type: str, items_count: int, actor_id: str) -> None: ...
