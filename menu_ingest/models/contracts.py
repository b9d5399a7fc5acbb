"""Contract models for the menu ingestion pipeline.

Internal models use snake_case. Models that cross the HTTP boundary serialize
with camelCase aliases (``by_alias=True``) because the admin client reads
``menuType``, ``itemsProcessed`` and friends.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, get_args

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# === Shared Types ===

MenuCategory = Literal["wine_list", "featured_menu", "signature_cocktails", "tavern_menu"]
MENU_CATEGORIES: tuple[str, ...] = get_args(MenuCategory)

AlertSeverity = Literal["info", "warn", "critical"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# === Upstream recognition payload ===


class RecognitionResult(BaseModel):
    """Raw output of the text-recognition service.

    Either field may be missing. Upstream providers disagree on naming, so
    both the ``text``/``extracted_text`` and ``structured_data``/``items``
    spellings are accepted.
    """

    model_config = ConfigDict(extra="ignore")

    text: str | None = Field(
        default=None, validation_alias=AliasChoices("text", "extracted_text")
    )
    structured_records: list[Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("structured_records", "structured_data", "items"),
    )


# === Menu items ===


class DraftMenuItem(BaseModel):
    """Extracted, not-yet-persisted menu entry."""

    id: str
    name: str
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    category: MenuCategory
    subcategory: str | None = None
    tags: set[str] = set()
    available: bool = True


class PersistedMenuItem(DraftMenuItem):
    """Menu entry as reported back by the store, with write timestamps."""

    created_at: datetime
    updated_at: datetime


class AuditRecord(BaseModel):
    """One row of the menu change log, written once per ingestion batch."""

    actor_id: str
    menu_type: MenuCategory
    operation: Literal["bulk_update"] = "bulk_update"
    changes: dict[str, Any]
    timestamp: datetime


# === Orchestrator input ===


class MenuUpload(BaseModel):
    """An uploaded image plus its declared menu type, before validation."""

    image_data: bytes | None = None
    content_type: str | None = None
    filename: str | None = None
    menu_type: str | None = None


# === API Responses ===


class ProcessedItemSummary(_CamelModel):
    id: str
    name: str
    price: float | None = None
    category: MenuCategory


class IngestionData(_CamelModel):
    menu_type: MenuCategory
    items_processed: int
    items_saved: int
    processing_time_ms: int
    items: list[ProcessedItemSummary] = []


class IngestionResponse(_CamelModel):
    """Envelope for both the success and the soft-failure outcome.

    ``suggestions`` and ``extracted_text`` are only set on soft failure and
    are dropped from the JSON when unset (``exclude_unset=True``).
    """

    success: bool
    data: IngestionData | None = None
    message: str
    suggestions: list[str] | None = None
    extracted_text: str | None = None


class OcrCapabilities(BaseModel):
    supported_formats: list[str]
    max_file_size: str
    supported_menu_types: list[str]
    features: list[str]


class MetricsSnapshot(BaseModel):
    started_at: datetime
    requests_total: int = 0
    succeeded: int = 0
    soft_failures: int = 0
    validation_errors: int = 0
    upstream_errors: int = 0
    persistence_errors: int = 0
    items_saved_total: int = 0
    average_processing_ms: float | None = None


class OcrStatusResponse(BaseModel):
    success: bool = True
    status: str = "operational"
    capabilities: OcrCapabilities
    metrics: MetricsSnapshot


class ErrorResponse(BaseModel):
    error: str
    message: str
    retryable: bool = False
