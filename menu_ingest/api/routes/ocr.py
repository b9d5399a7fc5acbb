"""OCR ingestion endpoints — thin HTTP wrapper around IngestionOrchestrator.

Authentication and role checks happen upstream of this service; the acting
user's id arrives in the ``X-Actor-ID`` header and is only used for the audit
trail and alerts.
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, File, Form, Header, Request, UploadFile
from fastapi.responses import JSONResponse

from menu_ingest.config import settings
from menu_ingest.errors import IngestionError
from menu_ingest.models.contracts import (
    MENU_CATEGORIES,
    ErrorResponse,
    MenuUpload,
    OcrCapabilities,
    OcrStatusResponse,
)
from menu_ingest.pipeline.orchestrator import IngestionOrchestrator

logger = structlog.get_logger()

router = APIRouter(tags=["ocr"])

UPLOAD_CHUNK_BYTES = 65_536


def _error(status: int, code: str, message: str, *, retryable: bool = False) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(error=code, message=message, retryable=retryable).model_dump(),
    )


def _error_for(exc: IngestionError) -> JSONResponse:
    # Server-side failures keep their detail out of production responses
    if exc.status_code >= 500 and settings.environment == "production":
        message = exc.public_message
    else:
        message = exc.message
    return _error(exc.status_code, exc.code, message, retryable=exc.retryable)


def _orchestrator(request: Request) -> IngestionOrchestrator:
    return request.app.state.orchestrator


async def _read_capped(file: UploadFile, limit: int) -> bytes:
    """Read the upload, stopping one chunk past ``limit`` so oversize is still detectable."""
    chunks: list[bytes] = []
    total = 0
    while chunk := await file.read(UPLOAD_CHUNK_BYTES):
        total += len(chunk)
        chunks.append(chunk)
        if total > limit:
            break
    return b"".join(chunks)


@router.post("/ocr/process")
async def process_menu_image(
    request: Request,
    actor_id: Annotated[str, Header(alias="X-Actor-ID", min_length=1)],
    image: Annotated[UploadFile | None, File()] = None,
    menu_type: Annotated[str | None, Form(alias="menuType")] = None,
) -> JSONResponse:
    """Upload a menu photo -> OCR -> parse -> save items for ``menuType``."""
    orchestrator = _orchestrator(request)

    upload = MenuUpload(menu_type=menu_type)
    if image is not None:
        upload = MenuUpload(
            image_data=await _read_capped(image, settings.max_upload_bytes),
            content_type=image.content_type,
            filename=image.filename,
            menu_type=menu_type,
        )

    try:
        response = await orchestrator.process(upload, actor_id)
    except IngestionError as exc:
        return _error_for(exc)

    return JSONResponse(
        content=response.model_dump(mode="json", by_alias=True, exclude_unset=True)
    )


@router.get("/ocr/status", response_model=OcrStatusResponse)
async def ocr_status(request: Request) -> OcrStatusResponse:
    """Capabilities of the ingestion endpoint plus process-level counters."""
    orchestrator = _orchestrator(request)
    return OcrStatusResponse(
        capabilities=OcrCapabilities(
            supported_formats=["JPEG", "PNG", "WebP", "TIFF"],
            max_file_size=f"{settings.max_upload_bytes // (1024 * 1024)}MB",
            supported_menu_types=list(MENU_CATEGORIES),
            features=[
                "price_extraction",
                "description_parsing",
                "automatic_categorization",
                "batch_processing",
            ],
        ),
        metrics=orchestrator.metrics.snapshot(),
    )
