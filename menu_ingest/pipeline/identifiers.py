"""Batch-scoped identifiers for extracted menu items.

Format: ``<category>_<source>_<batch ms>_<position>[_<suffix>]``. Ids are
unique within a batch only; uploading the same menu twice creates new ids.
"""

from __future__ import annotations

import secrets
import time
from typing import Literal

from menu_ingest.models.contracts import MenuCategory

SUFFIX_BYTES = 3  # 6 hex chars


class IdentifierAllocator:
    """Mints ids for one batch. Create one per ingestion request."""

    def __init__(self, category: MenuCategory, batch_started_ms: int | None = None) -> None:
        self.category = category
        self.batch_started_ms = (
            batch_started_ms if batch_started_ms is not None else time.time_ns() // 1_000_000
        )

    def allocate(self, position: int, *, source: Literal["ocr", "manual"] = "ocr") -> str:
        """Id for the item at ``position``; structured ("ocr") ids get a random suffix."""
        base = f"{self.category}_{source}_{self.batch_started_ms}_{position}"
        if source == "ocr":
            return f"{base}_{secrets.token_hex(SUFFIX_BYTES)}"
        return base
