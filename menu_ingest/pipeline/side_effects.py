"""Best-effort wrappers for side channels that must never fail an ingestion.

Audit writes, operator alerts and the deploy trigger are fire-and-log: the
wrapper calls the real sink, logs any exception with context, and returns
normally. Callers depend on these wrappers instead of sprinkling try/except
around each call site.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from menu_ingest.models.contracts import AlertSeverity, AuditRecord
    from menu_ingest.pipeline.ports import AlertSink, AuditSink, DeployHook

logger = structlog.get_logger()


class BestEffortAuditSink:
    def __init__(self, sink: AuditSink) -> None:
        self._sink = sink

    async def record(self, entry: AuditRecord) -> None:
        try:
            await self._sink.record(entry)
        except Exception as exc:
            logger.error(
                "audit_record_failed",
                actor_id=entry.actor_id,
                menu_type=entry.menu_type,
                items_count=entry.changes.get("items_count"),
                error_type=type(exc).__name__,
                exc_info=True,
            )


class BestEffortAlertSink:
    def __init__(self, sink: AlertSink) -> None:
        self._sink = sink

    async def notify(self, message: str, severity: AlertSeverity = "info") -> None:
        try:
            await self._sink.notify(message, severity)
        except Exception as exc:
            logger.error(
                "alert_notify_failed",
                severity=severity,
                error_type=type(exc).__name__,
                exc_info=True,
            )


class BestEffortDeployHook:
    def __init__(self, hook: DeployHook) -> None:
        self._hook = hook

    async def menu_updated(self, menu_type: str, items_count: int, actor_id: str) -> None:
        try:
            await self._hook.menu_updated(menu_type, items_count, actor_id)
        except Exception as exc:
            logger.warning(
                "deploy_hook_failed",
                menu_type=menu_type,
                error_type=type(exc).__name__,
                error=str(exc),
            )
