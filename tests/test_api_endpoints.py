"""Integration tests for the OCR endpoints.

Drives POST /api/ocr/process and GET /api/ocr/status through the ASGI app
with in-memory collaborators (see conftest). Verifies status codes, the
camelCase response envelope, and the ErrorResponse shape for failures.
"""

import io
from unittest.mock import patch

import pytest
from conftest import FakeRecognizer, FakeStore, upstream_failure

from menu_ingest.main import app
from menu_ingest.models.contracts import ErrorResponse, RecognitionResult
from menu_ingest.pipeline.orchestrator import IngestionOrchestrator

ACTOR = {"X-Actor-ID": "manager-7"}
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 256


def _files(data: bytes = JPEG, content_type: str = "image/jpeg") -> dict:
    return {"image": ("menu.jpg", io.BytesIO(data), content_type)}


class TestProcessSuccess:
    """Upload -> recognize -> parse -> save."""

    @pytest.mark.asyncio
    async def test_structured_records_saved(self, client, recognizer, store):
        recognizer.result = RecognitionResult(
            structured_records=[
                {"name": "Smoked Manhattan", "price": "$16", "description": "Top shelf rye"},
                {"name": "Ok", "price": "$3"},
            ]
        )

        resp = await client.post(
            "/api/ocr/process",
            headers=ACTOR,
            files=_files(),
            data={"menuType": "signature_cocktails"},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Successfully processed 1 menu items"
        data = body["data"]
        assert data["menuType"] == "signature_cocktails"
        assert data["itemsProcessed"] == 1
        assert data["itemsSaved"] == 1
        assert isinstance(data["processingTimeMs"], int)
        [item] = data["items"]
        assert item["name"] == "Smoked Manhattan"
        assert item["price"] == 16.0
        assert item["category"] == "signature_cocktails"
        assert "suggestions" not in body
        assert "extractedText" not in body
        assert store.batches[0][0].tags == {"signature", "premium"}

    @pytest.mark.asyncio
    async def test_upload_bytes_reach_recognizer(self, client, recognizer):
        recognizer.result = RecognitionResult(text="Pale Ale $7.00")
        await client.post(
            "/api/ocr/process", headers=ACTOR, files=_files(), data={"menuType": "tavern_menu"}
        )
        assert recognizer.calls == [JPEG]


class TestProcessSoftFailure:
    @pytest.mark.asyncio
    async def test_no_items_returns_200_with_suggestions(self, client, recognizer):
        recognizer.result = RecognitionResult(text="CHALKBOARD SPECIALS")

        resp = await client.post(
            "/api/ocr/process", headers=ACTOR, files=_files(), data={"menuType": "featured_menu"}
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == "No menu items could be extracted from the image"
        assert len(body["suggestions"]) == 3
        assert body["extractedText"] == "CHALKBOARD SPECIALS"
        assert "data" not in body


class TestProcessValidation:
    """Rejected uploads never reach the recognizer."""

    @pytest.mark.asyncio
    async def test_missing_file(self, client, recognizer):
        resp = await client.post(
            "/api/ocr/process", headers=ACTOR, data={"menuType": "tavern_menu"}
        )
        assert resp.status_code == 400
        er = ErrorResponse.model_validate(resp.json())
        assert er.error == "missing_file"
        assert er.retryable is False
        assert recognizer.calls == []

    @pytest.mark.asyncio
    async def test_wrong_content_type(self, client, recognizer):
        resp = await client.post(
            "/api/ocr/process",
            headers=ACTOR,
            files=_files(b"%PDF-1.4", "application/pdf"),
            data={"menuType": "tavern_menu"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_file_type"
        assert recognizer.calls == []

    @pytest.mark.asyncio
    async def test_unknown_menu_type(self, client, recognizer):
        resp = await client.post(
            "/api/ocr/process", headers=ACTOR, files=_files(), data={"menuType": "brunch"}
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_menu_type"
        assert recognizer.calls == []

    @pytest.mark.asyncio
    async def test_oversized_upload_is_413(self, client, recognizer):
        resp = await client.post(
            "/api/ocr/process",
            headers=ACTOR,
            files=_files(b"\xff" * (11 * 1024 * 1024)),
            data={"menuType": "tavern_menu"},
        )
        assert resp.status_code == 413
        assert resp.json()["error"] == "file_too_large"
        assert recognizer.calls == []

    @pytest.mark.asyncio
    async def test_missing_actor_header_is_422(self, client, recognizer):
        resp = await client.post(
            "/api/ocr/process", files=_files(), data={"menuType": "tavern_menu"}
        )
        assert resp.status_code == 422
        er = ErrorResponse.model_validate(resp.json())
        assert er.error == "validation_error"
        assert "X-Actor-ID" in er.message
        assert recognizer.calls == []


class TestProcessServerErrors:
    @pytest.mark.asyncio
    async def test_upstream_failure_is_502(self, client, services, alerts):
        services.recognizer = FakeRecognizer(error=upstream_failure(503))
        app.state.orchestrator = IngestionOrchestrator(services)

        resp = await client.post(
            "/api/ocr/process", headers=ACTOR, files=_files(), data={"menuType": "tavern_menu"}
        )

        assert resp.status_code == 502
        er = ErrorResponse.model_validate(resp.json())
        assert er.error == "ocr_failed"
        assert er.retryable is True
        assert "503" in er.message
        assert len(alerts.alerts) == 1

    @pytest.mark.asyncio
    async def test_persistence_failure_is_500(self, client, services, recognizer):
        recognizer.result = RecognitionResult(structured_records=[{"name": "Pale Ale"}])
        services.store = FakeStore(error=ConnectionError("db unreachable"))
        app.state.orchestrator = IngestionOrchestrator(services)

        resp = await client.post(
            "/api/ocr/process", headers=ACTOR, files=_files(), data={"menuType": "tavern_menu"}
        )

        assert resp.status_code == 500
        assert resp.json()["error"] == "persistence_failed"
        assert resp.json()["retryable"] is True

    @pytest.mark.asyncio
    async def test_production_hides_server_error_detail(self, client, services):
        services.recognizer = FakeRecognizer(error=upstream_failure(503))
        app.state.orchestrator = IngestionOrchestrator(services)

        with patch("menu_ingest.api.routes.ocr.settings.environment", "production"):
            resp = await client.post(
                "/api/ocr/process",
                headers=ACTOR,
                files=_files(),
                data={"menuType": "tavern_menu"},
            )

        assert resp.status_code == 502
        assert resp.json()["message"] == "OCR processing failed"

    @pytest.mark.asyncio
    async def test_production_keeps_validation_detail(self, client):
        with patch("menu_ingest.api.routes.ocr.settings.environment", "production"):
            resp = await client.post(
                "/api/ocr/process", headers=ACTOR, files=_files(), data={"menuType": "brunch"}
            )
        assert resp.json()["message"] == "Invalid or missing menu type"


class TestStatusEndpoint:
    @pytest.mark.asyncio
    async def test_capabilities(self, client):
        resp = await client.get("/api/ocr/status")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["status"] == "operational"
        caps = body["capabilities"]
        assert caps["supported_formats"] == ["JPEG", "PNG", "WebP", "TIFF"]
        assert caps["max_file_size"] == "10MB"
        assert set(caps["supported_menu_types"]) == {
            "wine_list",
            "featured_menu",
            "signature_cocktails",
            "tavern_menu",
        }

    @pytest.mark.asyncio
    async def test_metrics_reflect_processed_requests(self, client, recognizer):
        recognizer.result = RecognitionResult(structured_records=[{"name": "Pale Ale"}])
        await client.post(
            "/api/ocr/process", headers=ACTOR, files=_files(), data={"menuType": "tavern_menu"}
        )
        await client.post(
            "/api/ocr/process", headers=ACTOR, files=_files(), data={"menuType": "brunch"}
        )

        metrics = (await client.get("/api/ocr/status")).json()["metrics"]

        assert metrics["requests_total"] == 2
        assert metrics["succeeded"] == 1
        assert metrics["validation_errors"] == 1
        assert metrics["items_saved_total"] == 1
