"""Shared fixtures: in-memory collaborators and an ASGI test client.

The ASGI transport does not run the app lifespan, so the ``client`` fixture
wires ``app.state`` by hand with fake collaborators instead of a database.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import httpx
import pytest

from menu_ingest.errors import RecognitionError
from menu_ingest.main import app
from menu_ingest.metrics import IngestionMetrics
from menu_ingest.models.contracts import (
    AuditRecord,
    DraftMenuItem,
    PersistedMenuItem,
    RecognitionResult,
)
from menu_ingest.pipeline.orchestrator import IngestionOrchestrator, IngestionServices

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


class FakeRecognizer:
    def __init__(
        self,
        result: RecognitionResult | None = None,
        error: Exception | None = None,
    ) -> None:
        self.result = result or RecognitionResult()
        self.error = error
        self.calls: list[bytes] = []

    async def recognize(self, image_data: bytes) -> RecognitionResult:
        self.calls.append(image_data)
        if self.error is not None:
            raise self.error
        return self.result


class FakeStore:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.batches: list[list[DraftMenuItem]] = []

    async def bulk_upsert(self, items: list[DraftMenuItem]) -> list[PersistedMenuItem]:
        self.batches.append(list(items))
        if self.error is not None:
            raise self.error
        return [
            PersistedMenuItem(**item.model_dump(), created_at=FIXED_NOW, updated_at=FIXED_NOW)
            for item in items
        ]


class FakeAuditSink:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[AuditRecord] = []

    async def record(self, entry: AuditRecord) -> None:
        self.calls.append(entry)
        if self.error is not None:
            raise self.error


class FakeAlertSink:
    def __init__(self) -> None:
        self.alerts: list[tuple[str, str]] = []

    async def notify(self, message: str, severity: str) -> None:
        self.alerts.append((message, severity))


class FakeDeployHook:
    def __init__(self) -> None:
        self.calls: list[tuple[str, int, str]] = []

    async def menu_updated(self, menu_type: str, items_count: int, actor_id: str) -> None:
        self.calls.append((menu_type, items_count, actor_id))


class PassthroughPreprocessor:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, image_data: bytes) -> bytes:
        self.calls += 1
        return image_data


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def audit() -> FakeAuditSink:
    return FakeAuditSink()


@pytest.fixture
def alerts() -> FakeAlertSink:
    return FakeAlertSink()


@pytest.fixture
def deploy_hook() -> FakeDeployHook:
    return FakeDeployHook()


@pytest.fixture
def services(recognizer, store, audit, alerts, deploy_hook) -> IngestionServices:
    return IngestionServices(
        preprocess=PassthroughPreprocessor(),
        recognizer=recognizer,
        store=store,
        audit=audit,
        alerts=alerts,
        deploy_hook=deploy_hook,
        metrics=IngestionMetrics(),
    )


@pytest.fixture
def orchestrator(services) -> IngestionOrchestrator:
    return IngestionOrchestrator(services)


@pytest.fixture
async def client(orchestrator):
    """HTTP client bound to the FastAPI app with fake collaborators."""
    app.state.orchestrator = orchestrator
    app.state.engine = MagicMock()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def upstream_failure(status: int = 503) -> RecognitionError:
    return RecognitionError("OCR service returned an error", status_code=status)
