"""End-to-end ingestion of one menu photo.

validate -> preprocess -> recognize (timeout-bounded) -> parse -> persist.

Validation failures are raised before any external call. A recognition
result with nothing usable in it is a soft failure: ``success=False`` with
suggestions, no alert. Recognition and storage failures alert the operator
channel and are raised as UpstreamError / PersistenceError. Nothing is retried;
the caller re-submits the image.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

import structlog

from menu_ingest.errors import (
    PersistenceError,
    PreprocessingError,
    RecognitionError,
    UpstreamError,
    ValidationError,
)
from menu_ingest.metrics import IngestionMetrics
from menu_ingest.models.contracts import (
    MENU_CATEGORIES,
    IngestionData,
    IngestionResponse,
    MenuCategory,
    MenuUpload,
    ProcessedItemSummary,
)
from menu_ingest.pipeline.identifiers import IdentifierAllocator
from menu_ingest.pipeline.parser import parse_recognition_result
from menu_ingest.pipeline.persistence import BulkUpsertCoordinator
from menu_ingest.pipeline.side_effects import BestEffortAlertSink, BestEffortDeployHook

if TYPE_CHECKING:
    from menu_ingest.models.contracts import RecognitionResult
    from menu_ingest.pipeline.ports import (
        AlertSink,
        AuditSink,
        DeployHook,
        MenuItemStore,
        Preprocessor,
        Recognizer,
    )

logger = structlog.get_logger()

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB
OCR_TIMEOUT_SECONDS = 120.0
ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png", "image/webp", "image/tiff")

NO_ITEMS_MESSAGE = "No menu items could be extracted from the image"
SOFT_FAILURE_SUGGESTIONS = (
    "Ensure the image is clear and well-lit",
    "Make sure text is not obscured or rotated",
    "Try a higher resolution image",
)


@dataclass
class IngestionServices:
    """Collaborators for one orchestrator. Built once at app startup."""

    preprocess: Preprocessor
    recognizer: Recognizer
    store: MenuItemStore
    audit: AuditSink
    alerts: AlertSink
    deploy_hook: DeployHook | None = None
    metrics: IngestionMetrics = field(default_factory=IngestionMetrics)
    ocr_timeout_seconds: float = OCR_TIMEOUT_SECONDS
    max_upload_bytes: int = MAX_UPLOAD_BYTES


def validate_upload(
    upload: MenuUpload, max_upload_bytes: int = MAX_UPLOAD_BYTES
) -> tuple[bytes, MenuCategory]:
    """Check file presence, size, type and menu type, in that order."""
    if not upload.image_data:
        raise ValidationError("No image file provided", code="missing_file")

    if len(upload.image_data) > max_upload_bytes:
        mb = max_upload_bytes // (1024 * 1024)
        raise ValidationError(
            f"Image exceeds {mb} MB limit", code="file_too_large", status_code=413
        )

    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            "Invalid file type. Only JPEG, PNG, WebP, and TIFF are allowed.",
            code="invalid_file_type",
        )

    if upload.menu_type not in MENU_CATEGORIES:
        raise ValidationError("Invalid or missing menu type", code="invalid_menu_type")

    return upload.image_data, cast("MenuCategory", upload.menu_type)


class IngestionOrchestrator:
    def __init__(self, services: IngestionServices) -> None:
        self._services = services
        self._alerts = BestEffortAlertSink(services.alerts)
        self._deploy_hook = (
            BestEffortDeployHook(services.deploy_hook) if services.deploy_hook else None
        )
        self._coordinator = BulkUpsertCoordinator(services.store, services.audit)

    @property
    def metrics(self) -> IngestionMetrics:
        return self._services.metrics

    async def process(self, upload: MenuUpload, actor_id: str) -> IngestionResponse:
        """Run the full pipeline for one upload and shape the response."""
        started = time.monotonic()
        try:
            image_data, menu_type = validate_upload(upload, self._services.max_upload_bytes)
        except ValidationError as exc:
            logger.info("ocr_upload_rejected", actor_id=actor_id, code=exc.code)
            self.metrics.record("validation_error")
            raise

        log = logger.bind(actor_id=actor_id, menu_type=menu_type)
        log.info(
            "ocr_processing_started",
            file_name=upload.filename,
            file_size=len(image_data),
            content_type=upload.content_type,
        )

        try:
            prepared = await asyncio.to_thread(self._services.preprocess, image_data)
        except PreprocessingError as exc:
            log.warning("ocr_preprocess_failed", error=str(exc))
            self.metrics.record("validation_error")
            raise ValidationError(
                "Could not read image. Please upload a valid menu photo.", code="invalid_image"
            ) from exc

        result = await self._recognize(prepared, menu_type, actor_id, started)

        drafts = parse_recognition_result(result, menu_type, IdentifierAllocator(menu_type))
        if not drafts:
            elapsed = _elapsed_ms(started)
            log.warning(
                "ocr_no_items_extracted",
                text_length=len(result.text or ""),
                structured_count=len(result.structured_records or []),
                processing_time_ms=elapsed,
            )
            self.metrics.record("soft_failure", processing_ms=elapsed)
            return IngestionResponse(
                success=False,
                message=NO_ITEMS_MESSAGE,
                extracted_text=result.text or "",
                suggestions=list(SOFT_FAILURE_SUGGESTIONS),
            )

        try:
            saved = await self._coordinator.persist(drafts, actor_id, menu_type)
        except PersistenceError as exc:
            log.error(
                "ocr_processing_error",
                error=exc.message,
                processing_time_ms=_elapsed_ms(started),
            )
            self.metrics.record("persistence_error", processing_ms=_elapsed_ms(started))
            await self._alerts.notify(
                f"Saving {len(drafts)} {menu_type} items failed for {actor_id}: {exc.message}",
                "critical",
            )
            raise

        elapsed = _elapsed_ms(started)
        log.info(
            "ocr_processing_completed",
            items_extracted=len(drafts),
            items_saved=len(saved),
            processing_time_ms=elapsed,
        )
        self.metrics.record("succeeded", processing_ms=elapsed, items_saved=len(saved))

        if self._deploy_hook is not None:
            await self._deploy_hook.menu_updated(menu_type, len(saved), actor_id)

        return IngestionResponse(
            success=True,
            data=IngestionData(
                menu_type=menu_type,
                items_processed=len(drafts),
                items_saved=len(saved),
                processing_time_ms=elapsed,
                items=[
                    ProcessedItemSummary(
                        id=item.id, name=item.name, price=item.price, category=item.category
                    )
                    for item in saved
                ],
            ),
            message=f"Successfully processed {len(saved)} menu items",
        )

    async def _recognize(
        self,
        image_data: bytes,
        menu_type: MenuCategory,
        actor_id: str,
        started: float,
    ) -> RecognitionResult:
        """Call the recognizer under the timeout; alert and raise on any failure."""
        timeout = self._services.ocr_timeout_seconds
        try:
            return await asyncio.wait_for(
                self._services.recognizer.recognize(image_data), timeout=timeout
            )
        except TimeoutError as exc:
            detail = f"OCR request timed out after {timeout:.0f}s"
            cause: Exception = exc
        except RecognitionError as exc:
            status = f" Status: {exc.status_code}" if exc.status_code is not None else ""
            detail = f"{exc}{status}"
            cause = exc

        logger.error(
            "ocr_recognition_failed",
            actor_id=actor_id,
            menu_type=menu_type,
            error=detail,
            processing_time_ms=_elapsed_ms(started),
        )
        self.metrics.record("upstream_error", processing_ms=_elapsed_ms(started))
        await self._alerts.notify(
            f"OCR processing failed for {menu_type} by {actor_id}. {detail}", "critical"
        )
        raise UpstreamError(detail) from cause


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
