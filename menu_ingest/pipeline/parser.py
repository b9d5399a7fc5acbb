"""Pick an extractor for a recognition payload and drop unusable drafts."""

from __future__ import annotations

import structlog

from menu_ingest.models.contracts import DraftMenuItem, MenuCategory, RecognitionResult
from menu_ingest.pipeline.extraction import extract_from_text, extract_structured
from menu_ingest.pipeline.identifiers import IdentifierAllocator

log = structlog.get_logger("parser")

MIN_NAME_LENGTH = 3


def is_usable(draft: DraftMenuItem) -> bool:
    return bool(draft.name) and len(draft.name.strip()) >= MIN_NAME_LENGTH


def parse_recognition_result(
    result: RecognitionResult,
    category: MenuCategory,
    ids: IdentifierAllocator | None = None,
) -> list[DraftMenuItem]:
    """Structured records win when present; otherwise parse the raw text.

    An empty list is a valid result meaning nothing could be extracted.
    """
    ids = ids or IdentifierAllocator(category)

    if result.structured_records:
        source = "structured"
        drafts = extract_structured(result.structured_records, category, ids)
    else:
        source = "text"
        drafts = extract_from_text(result.text, category, ids)

    kept = [draft for draft in drafts if is_usable(draft)]
    log.debug(
        "recognition_result_parsed",
        source=source,
        category=category,
        extracted=len(drafts),
        kept=len(kept),
    )
    return kept
