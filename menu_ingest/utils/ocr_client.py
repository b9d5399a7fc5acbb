"""HTTP client for the hosted OCR endpoint.

POSTs the base64 image with menu-aware options and returns whatever the
service sends back as a RecognitionResult. Every transport or status failure
is raised as RecognitionError; the orchestrator decides how to surface it.
"""

from __future__ import annotations

import base64

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from menu_ingest.errors import RecognitionError
from menu_ingest.models.contracts import RecognitionResult

logger = structlog.get_logger()

OCR_OPTIONS = {
    "language": "en",
    "output_format": "structured",
    "menu_context": True,
    "extract_prices": True,
    "extract_descriptions": True,
}


class HttpMenuRecognizer:
    def __init__(
        self,
        endpoint: str,
        api_key: str,
        *,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    def build_payload(self, image_data: bytes) -> dict:
        return {"image": base64.b64encode(image_data).decode(), **OCR_OPTIONS}

    async def recognize(self, image_data: bytes) -> RecognitionResult:
        if self._client is not None:
            return await self._post(self._client, image_data)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._post(client, image_data)

    async def _post(self, client: httpx.AsyncClient, image_data: bytes) -> RecognitionResult:
        try:
            response = await client.post(
                self.endpoint,
                json=self.build_payload(image_data),
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise RecognitionError(f"Timeout calling OCR service: {self.endpoint[:100]}") from exc
        except httpx.RequestError as exc:
            raise RecognitionError(
                f"Network error calling OCR service: {type(exc).__name__}"
            ) from exc

        if response.status_code >= 400:
            logger.error(
                "ocr_service_error_response",
                status=response.status_code,
                body=response.text[:500],
            )
            raise RecognitionError(
                "OCR service returned an error", status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise RecognitionError("OCR service returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise RecognitionError(
                f"OCR service returned {type(payload).__name__}, expected object"
            )

        try:
            return RecognitionResult.model_validate(payload)
        except PydanticValidationError as exc:
            raise RecognitionError(
                f"OCR payload has unexpected shape: {exc.error_count()} errors"
            ) from exc
