"""Gemini-backed remote collaborator for try-on, enhancement and suggestions."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from google import genai
from google.genai import types

from config.settings import AppConfig
from modules.prompts.request_builder import GenerationRequest
from modules.services.error_classifier import EmptyResponseError, SafetyBlockedError

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5


@dataclass(slots=True)
class GeneratedImage:
    """Raw image payload returned by the model."""

    data: bytes
    mime_type: str


class GeminiTryOnClient:
    """Thin async facade around ``google-genai``.

    ``generate`` returns a :class:`GeneratedImage` or raises; SDK errors are
    propagated untouched so the caller can classify them.
    """

    def __init__(self, config: AppConfig, client: Optional[Any] = None) -> None:
        self.config = config
        self._client = client

    def _ensure_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self.config.gemini_api_key:
            raise RuntimeError("GEMINI_API_KEY is not configured.")

        http_options: dict[str, Any] = {}
        if self.config.request_timeout:
            http_options["timeout"] = int(self.config.request_timeout * 1000)
        base_url = self.config.metadata.get("gemini_base_url")
        if base_url:
            http_options["base_url"] = base_url
        self._client = genai.Client(
            api_key=self.config.gemini_api_key,
            http_options=http_options or None,
        )
        return self._client

    @staticmethod
    def _build_contents(request: GenerationRequest) -> List[types.Part]:
        parts = [
            types.Part.from_bytes(data=asset.data, mime_type=asset.mime_type)
            for asset in request.attachments
        ]
        parts.append(types.Part.from_text(text=request.instructions))
        return parts

    async def generate(self, request: GenerationRequest) -> GeneratedImage:
        """Run an image-producing request (try-on or enhancement)."""
        client = self._ensure_client()
        response = await client.aio.models.generate_content(
            model=self.config.image_model,
            contents=self._build_contents(request),
            config=types.GenerateContentConfig(
                response_modalities=["IMAGE", "TEXT"],
                temperature=self.config.temperature,
            ),
        )
        return self._extract_image(response)

    async def suggest(self, request: GenerationRequest) -> List[str]:
        """Ask the text model for accessory suggestions."""
        client = self._ensure_client()
        response = await client.aio.models.generate_content(
            model=self.config.text_model,
            contents=self._build_contents(request),
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=types.Schema(
                    type=types.Type.OBJECT,
                    properties={
                        "suggestions": types.Schema(
                            type=types.Type.ARRAY,
                            items=types.Schema(type=types.Type.STRING),
                        )
                    },
                ),
            ),
        )
        return self._parse_suggestions(getattr(response, "text", None))

    def _extract_image(self, response: Any) -> GeneratedImage:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            raise EmptyResponseError("The model did not return any candidate.")

        candidate = candidates[0]
        reason = getattr(candidate, "finish_reason", None)
        reason_name = str(getattr(reason, "name", reason)) if reason is not None else ""
        if reason_name == "SAFETY":
            raise SafetyBlockedError(finish_reason=reason_name)

        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is None or not inline.data:
                continue
            data = inline.data
            if isinstance(data, str):
                data = base64.b64decode(data)
            return GeneratedImage(data=data, mime_type=inline.mime_type or "image/png")

        logger.debug("Candidate finished with %s but carried no image part", reason_name or "no reason")
        raise EmptyResponseError("The model response did not contain an image.")

    @staticmethod
    def _parse_suggestions(text: Optional[str]) -> List[str]:
        cleaned = (text or "").strip()
        if not cleaned:
            return []
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()[1:]
            if lines and lines[-1].startswith("```"):
                lines = lines[:-1]
            cleaned = "\n".join(lines).strip()

        data = json.loads(cleaned)
        items = data.get("suggestions") if isinstance(data, dict) else None
        if not isinstance(items, list):
            return []
        suggestions = [str(item).strip() for item in items if str(item).strip()]
        return suggestions[:MAX_SUGGESTIONS]
