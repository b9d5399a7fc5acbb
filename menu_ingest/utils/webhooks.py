"""Outbound webhooks: operator alerts and the post-ingest deploy trigger.

Both are no-ops when their URL is not configured. Non-2xx responses are
logged here; network errors propagate to the BestEffort wrappers, which log
and swallow them.
"""

from __future__ import annotations

from datetime import UTC, datetime

import httpx
import structlog

from menu_ingest.models.contracts import AlertSeverity

logger = structlog.get_logger()


async def _post_json(url: str, body: dict, timeout: float) -> httpx.Response:
    async with httpx.AsyncClient(timeout=timeout) as client:
        return await client.post(url, json=body)


class WebhookAlertSink:
    def __init__(self, url: str, service_name: str, *, timeout: float = 10.0) -> None:
        self.url = url
        self.service_name = service_name
        self._timeout = timeout

    async def notify(self, message: str, severity: AlertSeverity = "info") -> None:
        if not self.url:
            logger.debug("alert_webhook_not_configured", severity=severity)
            return
        response = await _post_json(
            self.url,
            {
                "text": f"{self.service_name} alert: {message}",
                "severity": severity,
                "timestamp": datetime.now(tz=UTC).isoformat(),
                "service": self.service_name,
            },
            self._timeout,
        )
        if response.status_code >= 400:
            logger.error("alert_webhook_rejected", status=response.status_code)


class WebhookDeployHook:
    def __init__(self, url: str, *, timeout: float = 10.0) -> None:
        self.url = url
        self._timeout = timeout

    async def menu_updated(self, menu_type: str, items_count: int, actor_id: str) -> None:
        if not self.url:
            return
        response = await _post_json(
            self.url,
            {
                "trigger": "menu_update",
                "menu_type": menu_type,
                "items_count": items_count,
                "user": actor_id,
            },
            self._timeout,
        )
        if response.status_code >= 400:
            logger.warning("deploy_webhook_rejected", status=response.status_code)
        else:
            logger.info("deploy_webhook_triggered", menu_type=menu_type, items_count=items_count)
