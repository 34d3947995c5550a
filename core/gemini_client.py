# core/gemini_client.py
"""
Handles all direct interactions with the Google Generative Language API:
query embeddings, plan generation and card image generation. Includes retry
logic with exponential backoff and embedding caching.
"""

# Standard library imports
import asyncio
import base64
import json
import random
from dataclasses import dataclass, field
from typing import Any

import httpx

# Third-party imports
import numpy as np
import structlog
from async_lru import alru_cache
from pydantic import ValidationError

# Local imports
from config import settings
from models import DesignConcept, PlanResult, ReferenceItem
from prompt_renderer import render_prompt

logger = structlog.get_logger(__name__)


class GenerationError(RuntimeError):
    """Base error for failed generation requests."""


class MissingAPIKeyError(GenerationError):
    """Raised when no Google API key is configured."""


class GeminiAPIError(GenerationError):
    """Raised when the API answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ImageNotGeneratedError(GenerationError):
    """Raised when a design response contains no image part."""


@dataclass
class DesignRequest:
    """Inputs for a single card image generation call."""

    page_type: str
    content: Any
    concept: DesignConcept | None = None
    aspect_ratio: str = settings.DEFAULT_ASPECT_RATIO
    feedback: str | None = None
    ref_images: list[str] = field(default_factory=list)
    cover_palette: str | None = None


def _content_to_text(content: Any) -> str:
    if isinstance(content, (dict, list)):
        return json.dumps(content, ensure_ascii=False, indent=2)
    return str(content)


def _extract_error_message(response: httpx.Response, default: str) -> str:
    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError):
        return default
    if isinstance(data, dict):
        message = (data.get("error") or {}).get("message")
        if message:
            return str(message)
    return default


class GeminiService:
    """Utility class for interacting with Gemini generation and embedding endpoints."""

    def __init__(
        self,
        timeout: float = settings.HTTPX_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        # Use a single async client for all requests to reuse connections
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self.request_count = 0
        logger.info(f"GeminiService initialized against {settings.GEMINI_API_BASE}.")

    @property
    def api_key(self) -> str:
        return settings.GOOGLE_API_KEY

    def _model_url(self, model_name: str, method: str) -> str:
        return f"{settings.GEMINI_API_BASE}/models/{model_name}:{method}"

    async def _backoff_delay(self, attempt: int) -> None:
        """Sleep for an exponentially increasing delay with jitter."""
        delay = settings.LLM_RETRY_DELAY_SECONDS * (2**attempt)
        jitter = random.uniform(0, delay / 2)
        await asyncio.sleep(delay + jitter)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _post_with_retries(
        self, model_name: str, method: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        """POST to a model endpoint, retrying transient failures."""
        if not self.api_key:
            raise MissingAPIKeyError("GOOGLE_API_KEY is not configured.")

        url = self._model_url(model_name, method)
        last_exc: Exception | None = None
        for attempt in range(settings.LLM_RETRY_ATTEMPTS):
            try:
                self.request_count += 1
                response = await self._client.post(
                    url,
                    params={"key": self.api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                if response.is_error:
                    message = _extract_error_message(
                        response, f"Gemini API error ({response.status_code})"
                    )
                    raise GeminiAPIError(message, status_code=response.status_code)
                return response.json()
            except GeminiAPIError as e_api:
                last_exc = e_api
                logger.warning(
                    f"Gemini '{model_name}' (Attempt {attempt + 1}/{settings.LLM_RETRY_ATTEMPTS}): {e_api}"
                )
                status = e_api.status_code or 0
                if 400 <= status < 500 and status != 429:
                    logger.error(
                        f"Gemini '{model_name}': Client-side error {status}. Aborting retries."
                    )
                    break
            except httpx.TimeoutException as e_timeout:
                last_exc = e_timeout
                logger.warning(
                    f"Gemini '{model_name}' (Attempt {attempt + 1}/{settings.LLM_RETRY_ATTEMPTS}): Request timed out: {e_timeout}"
                )
            except httpx.RequestError as e_req:
                last_exc = e_req
                logger.warning(
                    f"Gemini '{model_name}' (Attempt {attempt + 1}/{settings.LLM_RETRY_ATTEMPTS}): Request error: {e_req}"
                )
            except json.JSONDecodeError as e_json:
                last_exc = e_json
                logger.warning(
                    f"Gemini '{model_name}' (Attempt {attempt + 1}/{settings.LLM_RETRY_ATTEMPTS}): Failed to decode JSON response: {e_json}"
                )

            if attempt < settings.LLM_RETRY_ATTEMPTS - 1:
                await self._backoff_delay(attempt)

        logger.error(
            f"Gemini '{model_name}': All retry attempts failed. Last error: {last_exc}"
        )
        if isinstance(last_exc, GenerationError):
            raise last_exc
        raise GeminiAPIError(str(last_exc)) from last_exc

    def _validate_embedding(
        self, embedding_list: list[float | int], expected_dim: int, dtype: str
    ) -> np.ndarray | None:
        """Helper to validate and convert a list to a 1D numpy embedding."""
        try:
            embedding = np.array(embedding_list).astype(dtype)
            if embedding.ndim > 1:
                logger.warning(
                    f"Embedding had unexpected ndim > 1: {embedding.ndim}. Flattening."
                )
                embedding = embedding.flatten()
            if embedding.shape == (expected_dim,):
                return embedding
            logger.error(
                f"Embedding dimension mismatch: Expected ({expected_dim},), Got {embedding.shape}."
            )
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to convert embedding list to numpy array: {e}")
        return None

    @alru_cache(maxsize=settings.EMBEDDING_CACHE_SIZE)
    async def _fetch_embedding(self, text: str) -> np.ndarray:
        """Embed ``text``. Raises so that failures are never cached."""
        payload = {
            "model": f"models/{settings.EMBEDDING_MODEL}",
            "content": {"parts": [{"text": text[: settings.MAX_QUERY_CHARS]}]},
            "taskType": "RETRIEVAL_QUERY",
        }
        data = await self._post_with_retries(
            settings.EMBEDDING_MODEL, "embedContent", payload
        )
        values = (data.get("embedding") or {}).get("values")
        if not isinstance(values, list):
            raise GeminiAPIError("Embedding response did not contain embedding values.")
        embedding = self._validate_embedding(
            values, settings.EXPECTED_EMBEDDING_DIM, settings.EMBEDDING_DTYPE
        )
        if embedding is None:
            raise GenerationError("Embedding response failed validation.")
        return embedding

    async def async_get_embedding(self, text: str) -> np.ndarray | None:
        """Query embedding for ``text``, or None when unavailable."""
        if not text or not isinstance(text, str) or not text.strip():
            logger.warning(
                "async_get_embedding: empty or invalid text provided. Returning None."
            )
            return None
        if not self.api_key:
            logger.info("async_get_embedding: no API key configured. Returning None.")
            return None
        try:
            return await self._fetch_embedding(text)
        except GenerationError as e:
            logger.warning(f"Query embedding failed: {e}")
            return None

    async def async_generate_plan(
        self,
        content: str,
        detail_level: str = "simple",
        rag_examples: list[ReferenceItem] | None = None,
    ) -> PlanResult:
        """Ask the plan model for a structured card news plan."""
        if not content or not content.strip():
            raise GenerationError("Document content is required for plan generation.")

        prompt = render_prompt(
            "plan_prompt.j2",
            {
                "document": content[: settings.MAX_DOCUMENT_CHARS],
                "detailed": detail_level == "detailed",
                "examples": [ex.style_summary() for ex in rag_examples or []],
            },
        )
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": settings.PLAN_TEMPERATURE,
                "maxOutputTokens": settings.PLAN_MAX_OUTPUT_TOKENS,
                "responseMimeType": "application/json",
            },
        }
        data = await self._post_with_retries(
            settings.PLAN_MODEL, "generateContent", payload
        )
        parts = ((data.get("candidates") or [{}])[0].get("content") or {}).get(
            "parts"
        ) or []
        text = parts[0].get("text") if parts else None
        if not text:
            raise GeminiAPIError("Plan response was empty.")
        try:
            return PlanResult.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as e:
            raise GenerationError(f"Plan response was not a valid plan: {e}") from e

    async def _fetch_reference_image(self, url: str) -> dict[str, Any] | None:
        """Download a reference image as an inline data part. Failures are skipped."""
        try:
            response = await self._client.get(
                url, timeout=settings.REFERENCE_FETCH_TIMEOUT
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Reference image fetch failed for {url}: {e}")
            return None
        mime_type = response.headers.get("content-type", "image/jpeg").split(";")[0]
        return {
            "inlineData": {
                "mimeType": mime_type,
                "data": base64.b64encode(response.content).decode("ascii"),
            }
        }

    async def async_generate_design(self, request: DesignRequest) -> str:
        """Generate one card image and return it as a data URI."""
        parts: list[dict[str, Any]] = []
        for url in request.ref_images[: settings.MAX_REFERENCE_IMAGES]:
            image_part = await self._fetch_reference_image(url)
            if image_part:
                parts.append(image_part)

        prompt = render_prompt(
            "design_prompt.j2",
            {
                "page_type": request.page_type,
                "content": _content_to_text(request.content),
                "aspect_ratio": request.aspect_ratio or settings.DEFAULT_ASPECT_RATIO,
                "palette": request.cover_palette
                if request.page_type != "COVER"
                else None,
                "concept": request.concept,
                "feedback": request.feedback,
            },
        )
        parts.append({"text": prompt})

        payload = {
            "contents": [{"parts": parts}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }
        data = await self._post_with_retries(
            settings.IMAGE_MODEL, "generateContent", payload
        )
        response_parts = (
            (data.get("candidates") or [{}])[0].get("content") or {}
        ).get("parts") or []
        for part in response_parts:
            inline = part.get("inlineData")
            if inline and inline.get("data"):
                mime_type = inline.get("mimeType", "image/png")
                return f"data:{mime_type};base64,{inline['data']}"
        raise ImageNotGeneratedError(
            f"No image was generated (response parts: {[list(p) for p in response_parts]})."
        )


# Instantiate the service for other modules to import and use
gemini_service = GeminiService()
