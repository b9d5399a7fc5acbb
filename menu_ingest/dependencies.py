"""Build the production collaborators for the ingestion pipeline from settings."""

from __future__ import annotations

from functools import partial

from sqlalchemy.ext.asyncio import AsyncEngine

from menu_ingest.config import Settings
from menu_ingest.metrics import IngestionMetrics
from menu_ingest.pipeline.orchestrator import IngestionOrchestrator, IngestionServices
from menu_ingest.pipeline.ports import Recognizer
from menu_ingest.store import SqlAuditLog, SqlMenuItemStore
from menu_ingest.utils.image import prepare_for_ocr
from menu_ingest.utils.webhooks import WebhookAlertSink, WebhookDeployHook


def build_recognizer(settings: Settings) -> Recognizer:
    if settings.ocr_provider == "claude":
        from menu_ingest.utils.claude_ocr import ClaudeMenuRecognizer

        return ClaudeMenuRecognizer(settings.anthropic_api_key, settings.ocr_claude_model)

    from menu_ingest.utils.ocr_client import HttpMenuRecognizer

    return HttpMenuRecognizer(
        settings.ocr_endpoint, settings.ocr_api_key, timeout=settings.ocr_timeout_seconds
    )


def build_orchestrator(
    settings: Settings,
    engine: AsyncEngine,
    metrics: IngestionMetrics,
) -> IngestionOrchestrator:
    services = IngestionServices(
        preprocess=partial(
            prepare_for_ocr,
            max_width=settings.preprocess_max_width,
            quality=settings.preprocess_jpeg_quality,
        ),
        recognizer=build_recognizer(settings),
        store=SqlMenuItemStore(engine),
        audit=SqlAuditLog(engine),
        alerts=WebhookAlertSink(
            settings.alert_webhook_url,
            settings.service_name,
            timeout=settings.webhook_timeout_seconds,
        ),
        deploy_hook=WebhookDeployHook(
            settings.deploy_webhook_url, timeout=settings.webhook_timeout_seconds
        ),
        metrics=metrics,
        ocr_timeout_seconds=settings.ocr_timeout_seconds,
        max_upload_bytes=settings.max_upload_bytes,
    )
    return IngestionOrchestrator(services)
