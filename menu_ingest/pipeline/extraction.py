"""Turn recognition output into draft menu items.

Two extractors, one per upstream shape:

- ``extract_structured``: the OCR service already split the menu into records
  (name/title, description/desc, price, category). Every record becomes a
  draft, in order; nothing is dropped here.
- ``extract_from_text``: fallback for raw text. A line with a dollar amount
  starts a new item; longer lines that follow are its wrapped description.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from menu_ingest.models.contracts import DraftMenuItem, MenuCategory
from menu_ingest.pipeline.identifiers import IdentifierAllocator
from menu_ingest.pipeline.pricing import normalize_price
from menu_ingest.pipeline.tagging import classify_tags

log = structlog.get_logger("extraction")

PRICE_PATTERN = re.compile(r"\$([0-9]+(?:\.[0-9]{2})?)")
# Price plus everything after it, removed to leave the item name
_PRICE_AND_TAIL = re.compile(r"\$[0-9]+(?:\.[0-9]{2})?.*$")
MIN_PRICE_LINE_LENGTH = 5
MIN_DESCRIPTION_LINE_LENGTH = 10


def _text_field(record: Mapping[str, Any], *keys: str) -> str | None:
    """First truthy value among ``keys``, stringified and stripped."""
    for key in keys:
        value = record.get(key)
        if value:
            text = str(value).strip()
            if text:
                return text
    return None


def extract_structured(
    records: Iterable[Any],
    category: MenuCategory,
    ids: IdentifierAllocator,
) -> list[DraftMenuItem]:
    """Map each upstream record to a draft item, preserving input order."""
    drafts: list[DraftMenuItem] = []
    for position, record in enumerate(records):
        if not isinstance(record, Mapping):
            log.warning("malformed_structured_record", position=position, data=repr(record)[:200])
            record = {}

        name = _text_field(record, "name", "title") or f"Item {position + 1}"
        description = _text_field(record, "description", "desc")
        drafts.append(
            DraftMenuItem(
                id=ids.allocate(position, source="ocr"),
                name=name,
                description=description,
                price=normalize_price(record.get("price")),
                category=category,
                subcategory=_text_field(record, "category"),
                tags=classify_tags(f"{name} {description or ''}", category),
                available=True,
            )
        )
    return drafts


@dataclass
class _PendingItem:
    name: str
    price: float | None
    description: str | None = None

    def add_description(self, line: str) -> None:
        self.description = f"{self.description} {line}" if self.description else line


def _price_line(line: str) -> re.Match[str] | None:
    """Price match if ``line`` looks like the first line of a menu item."""
    match = PRICE_PATTERN.search(line)
    if match and len(line) > MIN_PRICE_LINE_LENGTH:
        return match
    return None


def segment_lines(text: str) -> Iterator[_PendingItem]:
    """Walk the non-empty lines and yield items as each one is completed.

    States: no current item, or building ``current``. A price line closes the
    current item and opens the next; a long non-price line extends the
    current item's description; every other line is ignored.
    """
    current: _PendingItem | None = None
    for raw in text.split("\n"):
        line = raw.strip()
        if not line:
            continue

        match = _price_line(line)
        if match is not None:
            if current is not None and current.name:
                yield current
            current = _PendingItem(
                name=_PRICE_AND_TAIL.sub("", line).strip(),
                price=normalize_price(match.group(1)),
            )
        elif current is not None and len(line) > MIN_DESCRIPTION_LINE_LENGTH:
            current.add_description(line)

    if current is not None and current.name:
        yield current


def extract_from_text(
    text: str | None,
    category: MenuCategory,
    ids: IdentifierAllocator,
) -> list[DraftMenuItem]:
    """Fallback extraction from raw OCR text. Tags are not applied here."""
    if not text:
        return []
    return [
        DraftMenuItem(
            id=ids.allocate(position, source="manual"),
            name=pending.name,
            description=pending.description,
            price=pending.price,
            category=category,
            tags=set(),
            available=True,
        )
        for position, pending in enumerate(segment_lines(text))
    ]
