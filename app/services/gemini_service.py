"""
Generation client adapter backed by Gemini.

The adapter is a pure boundary call: it sends the prompt built from a
GenerationRequest and hands back the raw text. It does not parse JSON; the
only thing it checks is that some text came back.

Failure mapping:
- missing API key, timeout, transport fault -> ServiceUnavailableError
- google.genai APIError (4xx/5xx answered by the service) -> GenerationServiceError
- success with no text -> EmptyResponseError
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from app.config import settings
from app.models.recipe import GenerationRequest
from app.services.gemini_utils import get_response_text, log_empty_response
from app.services.request_builder import SYSTEM_INSTRUCTION, build_prompt
from app.utils.exceptions import (
    EmptyResponseError,
    GenerationServiceError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)


class GenerationClient(Protocol):
    """Anything that can turn a generation request into raw recipe-shaped text."""

    async def invoke(self, request: GenerationRequest) -> str:
        ...


class GeminiGenerationClient:
    """Generation client for the Gemini API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.gemini_api_key
        self._model = model or settings.gemini_model
        self._timeout = timeout if timeout is not None else settings.generation_timeout
        self._client: Optional[genai.Client] = None

    @property
    def client(self) -> genai.Client:
        """
        Get or create Gemini client (lazy initialization).

        The HTTP timeout (milliseconds) matches the outer ``wait_for`` bound so
        an abandoned worker thread stops once its request times out.
        """
        if self._client is None:
            if not self._api_key:
                raise ServiceUnavailableError("Gemini API key is not configured")
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=int(self._timeout * 1000)),
            )
        return self._client

    async def invoke(self, request: GenerationRequest) -> str:
        """Send the recipe prompt and return the raw response text."""
        prompt = build_prompt(request)
        config = types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            response_mime_type="application/json",
            temperature=settings.gemini_temperature,
            max_output_tokens=settings.gemini_max_tokens,
        )

        logger.info(
            "Requesting recipe generation from %s (%d ingredients)",
            self._model,
            len(request.ingredients),
        )
        response = await self._call(prompt, config)

        text = get_response_text(response)
        if not text.strip():
            log_empty_response("Recipe generation", response)
            raise EmptyResponseError("Gemini returned an empty response")
        logger.debug("Gemini raw response:\n%s", text)
        return text.strip()

    async def check_connection(self) -> bool:
        """Send a tiny prompt to confirm the service is reachable."""
        config = types.GenerateContentConfig(max_output_tokens=5)
        try:
            await self._call("Hello", config)
            return True
        except (ServiceUnavailableError, GenerationServiceError) as e:
            logger.warning("Gemini connection test failed: %s", e)
            return False

    async def _call(self, contents: Any, config: types.GenerateContentConfig) -> Any:
        client = self.client

        def _sync_call() -> Any:
            return client.models.generate_content(
                model=self._model,
                contents=contents,
                config=config,
            )

        try:
            return await asyncio.wait_for(asyncio.to_thread(_sync_call), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise ServiceUnavailableError(
                f"Gemini did not answer within {self._timeout:g}s"
            ) from e
        except httpx.TransportError as e:
            raise ServiceUnavailableError(f"Gemini transport error: {e}") from e
        except genai_errors.APIError as e:
            raise GenerationServiceError(f"Gemini API error {e.code}: {e.message}") from e
