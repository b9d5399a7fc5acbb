"""Process-scoped ingestion counters.

One ``IngestionMetrics`` is created by the app at startup and handed to the
orchestrator; read it with ``snapshot()``. Updates happen on the event loop
thread only, so no locking is needed.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from menu_ingest.models.contracts import MetricsSnapshot

Outcome = Literal[
    "succeeded", "soft_failure", "validation_error", "upstream_error", "persistence_error"
]


class IngestionMetrics:
    def __init__(self) -> None:
        self._started_at = datetime.now(tz=UTC)
        self._counts: dict[str, int] = {
            "succeeded": 0,
            "soft_failure": 0,
            "validation_error": 0,
            "upstream_error": 0,
            "persistence_error": 0,
        }
        self._items_saved = 0
        self._timed_requests = 0
        self._total_processing_ms = 0

    def record(
        self, outcome: Outcome, *, processing_ms: int | None = None, items_saved: int = 0
    ) -> None:
        self._counts[outcome] += 1
        self._items_saved += items_saved
        if processing_ms is not None:
            self._timed_requests += 1
            self._total_processing_ms += processing_ms

    def snapshot(self) -> MetricsSnapshot:
        average = (
            self._total_processing_ms / self._timed_requests if self._timed_requests else None
        )
        return MetricsSnapshot(
            started_at=self._started_at,
            requests_total=sum(self._counts.values()),
            succeeded=self._counts["succeeded"],
            soft_failures=self._counts["soft_failure"],
            validation_errors=self._counts["validation_error"],
            upstream_errors=self._counts["upstream_error"],
            persistence_errors=self._counts["persistence_error"],
            items_saved_total=self._items_saved,
            average_processing_ms=average,
        )
