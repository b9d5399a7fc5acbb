"""Claude vision transcription as an alternative OCR provider.

Selected with ``OCR_PROVIDER=claude``. Claude is forced to answer through the
``transcribe_menu`` tool so the result has the same shape as the hosted OCR
service: the raw ``text`` plus a list of ``items`` records.
"""

from __future__ import annotations

import base64
from typing import Any

import anthropic
import structlog
from pydantic import ValidationError as PydanticValidationError

from menu_ingest.errors import RecognitionError
from menu_ingest.models.contracts import RecognitionResult

log = structlog.get_logger("claude_ocr")

MAX_TOKENS = 8192

SYSTEM_PROMPT = (
    "You transcribe photographs of printed restaurant and bar menus. "
    "Copy the menu text exactly as printed, one printed line per line, and list "
    "every menu item you can read with its name, description, price and section "
    "heading. Do not invent items, prices or descriptions that are not printed."
)

TRANSCRIBE_MENU_TOOL: dict[str, Any] = {
    "name": "transcribe_menu",
    "description": "Record the transcribed menu text and the menu items found in it.",
    "input_schema": {
        "type": "object",
        "properties": {
            "text": {
                "type": "string",
                "description": "Full menu text, line by line, as printed",
            },
            "items": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string", "description": "Item name as printed"},
                        "description": {
                            "type": "string",
                            "description": "Description or ingredients, if printed",
                        },
                        "price": {
                            "type": "string",
                            "description": "Price exactly as printed (e.g. '$14', '12.50')",
                        },
                        "category": {
                            "type": "string",
                            "description": "Section heading the item is listed under",
                        },
                    },
                    "required": ["name"],
                },
            },
        },
        "required": ["text", "items"],
    },
}


def build_messages(image_data: bytes, media_type: str = "image/jpeg") -> list[dict[str, Any]]:
    return [
        {
            "role": "user",
            "content": [
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": media_type,
                        "data": base64.b64encode(image_data).decode(),
                    },
                },
                {"type": "text", "text": "Transcribe this menu."},
            ],
        }
    ]


def extract_transcription(response: anthropic.types.Message) -> dict[str, Any]:
    """Extract the transcribe_menu tool input from the response."""
    for block in response.content:
        if block.type == "tool_use" and block.name == "transcribe_menu":
            return block.input  # type: ignore[return-value]
    return {}


class ClaudeMenuRecognizer:
    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self.model = model
        self._client = client or anthropic.AsyncAnthropic(api_key=api_key)

    async def recognize(self, image_data: bytes) -> RecognitionResult:
        try:
            response = await self._client.messages.create(  # type: ignore[call-overload]
                model=self.model,
                max_tokens=MAX_TOKENS,
                system=SYSTEM_PROMPT,
                tools=[TRANSCRIBE_MENU_TOOL],
                tool_choice={"type": "tool", "name": "transcribe_menu"},
                messages=build_messages(image_data),
            )
        except anthropic.APIStatusError as e:
            log.error("claude_ocr_api_error", status=e.status_code)
            raise RecognitionError(f"Claude API error: {e}", status_code=e.status_code) from e
        except anthropic.APIError as e:
            log.error("claude_ocr_request_failed", error_type=type(e).__name__)
            raise RecognitionError(f"Claude request failed: {type(e).__name__}") from e

        data = extract_transcription(response)
        if not data:
            log.warning("claude_ocr_no_tool_call", stop_reason=response.stop_reason)
            raise RecognitionError("Claude did not return a transcribe_menu tool call")

        try:
            result = RecognitionResult(
                text=data.get("text") or None,
                structured_records=data.get("items") or None,
            )
        except PydanticValidationError as e:
            log.warning("claude_ocr_bad_tool_input", error_count=e.error_count())
            raise RecognitionError(
                f"Claude transcription has unexpected shape: {e.error_count()} errors"
            ) from e

        log.info(
            "claude_ocr_complete",
            text_length=len(result.text or ""),
            item_count=len(result.structured_records or []),
        )
        return result
