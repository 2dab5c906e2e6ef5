"""Thin async wrapper over the Google GenAI SDK.

Agents and the bulk processor depend on ``LLMClient`` rather than the SDK
directly, so tests can pass an in-process fake with the same methods.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from google import genai
from google.genai import types

from storefront.core.config import settings
from storefront.core.logging import get_logger

logger = get_logger(__name__)

_client: Optional[genai.Client] = None

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def _get_client() -> genai.Client:
    """Lazy-init a Google AI Studio genai client."""
    global _client
    if _client is None:
        if not settings.google_api_key:
            raise ValueError("GOOGLE_API_KEY is required for AI features")
        _client = genai.Client(api_key=settings.google_api_key)
    return _client


@dataclass
class LLMResponse:
    text: str
    tokens_used: int = 0


@dataclass
class GeneratedImage:
    data: bytes
    mime_type: str


def extract_json_object(text: str) -> Optional[dict]:
    """First ``{...}`` block of a model reply, parsed; None if absent or invalid."""
    match = _JSON_OBJECT.search(text or "")
    if not match:
        return None
    try:
        value = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def extract_json_array(text: str) -> Optional[list]:
    """First ``[...]`` block of a model reply, parsed; None if absent or invalid."""
    match = _JSON_ARRAY.search(text or "")
    if not match:
        return None
    try:
        value = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, list) else None


async def _load_image(url: str, http: httpx.AsyncClient) -> types.Part:
    response = await http.get(url)
    response.raise_for_status()
    mime = response.headers.get("content-type", "image/jpeg").split(";")[0]
    return types.Part.from_bytes(data=response.content, mime_type=mime)


class LLMClient:
    """Text, vision and image-editing calls against Gemini models."""

    def __init__(self, client: Optional[genai.Client] = None):
        self._client = client

    @property
    def client(self) -> genai.Client:
        return self._client or _get_client()

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        image_urls: Optional[list[str]] = None,
        json_output: bool = False,
    ) -> LLMResponse:
        contents: list[Any] = []
        if image_urls:
            async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as http:
                for url in image_urls:
                    contents.append(await _load_image(url, http))
        contents.append(prompt)

        config = None
        if json_output:
            config = types.GenerateContentConfig(response_mime_type="application/json")

        response = await self.client.aio.models.generate_content(
            model=model or settings.llm_model_flash,
            contents=contents,
            config=config,
        )
        usage = getattr(response, "usage_metadata", None)
        tokens = (getattr(usage, "total_token_count", None) or 0) if usage else 0
        return LLMResponse(text=response.text or "", tokens_used=tokens)

    async def edit_image(self, prompt: str, source_url: str) -> GeneratedImage:
        """Send the source photo plus an edit instruction to the image model."""
        async with httpx.AsyncClient(timeout=60.0, follow_redirects=True) as http:
            image_part = await _load_image(source_url, http)

        logger.info("Calling image model: %s", settings.llm_model_vision)
        response = await self.client.aio.models.generate_content(
            model=settings.llm_model_vision,
            contents=[image_part, prompt],
        )

        for part in response.candidates[0].content.parts:
            if part.inline_data and part.inline_data.mime_type.startswith("image/"):
                return GeneratedImage(data=part.inline_data.data, mime_type=part.inline_data.mime_type)

        raise RuntimeError("The model did not return an edited image")


_default_llm: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    global _default_llm
    if _default_llm is None:
        _default_llm = LLMClient()
    return _default_llm
