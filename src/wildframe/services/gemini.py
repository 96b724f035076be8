"""Google Gemini API client wrapper."""

import logging
from typing import Any, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import config
from ..errors import QuotaExceeded, TransportFailure

logger = logging.getLogger(__name__)

QUOTA_STATUS = "RESOURCE_EXHAUSTED"


def classify_api_error(error: genai_errors.APIError) -> TransportFailure:
    """Translate a google-genai API error into a typed transport failure.

    Quota and rate-limit refusals become QuotaExceeded so callers can stop
    issuing further requests; everything else is transient.
    """
    code = getattr(error, "code", None)
    status = getattr(error, "status", None) or ""
    detail = getattr(error, "message", None) or str(error)

    if code == 429 or status == QUOTA_STATUS:
        return QuotaExceeded(
            f"API Quota Exceeded: {detail}. Please check your plan and billing details."
        )
    summary = " ".join(str(part) for part in (code, status, detail) if part)
    return TransportFailure(f"Gemini API Error: {summary}")


class GeminiClient:
    """Async client wrapper for the Gemini and Imagen APIs.

    No retries: every call is one round trip, and failures surface as
    TransportFailure or QuotaExceeded.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        vertexai: Optional[bool] = None,
        project: Optional[str] = None,
        location: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ) -> None:
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key. Defaults to the configured key.
            vertexai: Use Vertex AI instead of an API key. Defaults to config.
            project: Google Cloud project for Vertex AI.
            location: Vertex AI region.
            client: Preconstructed genai.Client, mainly for tests.
        """
        if client is not None:
            self._client = client
            return

        use_vertexai = config.use_vertexai if vertexai is None else vertexai
        if use_vertexai:
            project = project or config.google_cloud_project
            if not project:
                raise ValueError("GOOGLE_CLOUD_PROJECT not set")
            self._client = genai.Client(
                vertexai=True,
                project=project,
                location=location or config.google_cloud_location,
            )
            logger.info(f"Initialized Gemini client via Vertex AI (project {project})")
        else:
            api_key = api_key or config.gemini_api_key
            if not api_key:
                raise ValueError(
                    "Gemini API key not provided. Set GEMINI_API_KEY env var."
                )
            self._client = genai.Client(api_key=api_key)

    async def generate_content(
        self,
        model: str,
        contents: Any,
        generation_config: Optional[types.GenerateContentConfig] = None,
    ) -> types.GenerateContentResponse:
        """Call ``models.generate_content``.

        Raises:
            QuotaExceeded: If the request was refused for quota reasons.
            TransportFailure: For any other API or network failure.
        """
        logger.debug(f"generate_content on {model}")
        try:
            return await self._client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=generation_config,
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini API error: {e}")
            raise classify_api_error(e) from e
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise TransportFailure(f"Gemini API Error: {e}") from e

    async def generate_images(
        self,
        model: str,
        prompt: str,
        image_config: types.GenerateImagesConfig,
    ) -> types.GenerateImagesResponse:
        """Call ``models.generate_images``.

        Raises:
            QuotaExceeded: If the request was refused for quota reasons.
            TransportFailure: For any other API or network failure.
        """
        logger.debug(f"generate_images on {model}")
        try:
            return await self._client.aio.models.generate_images(
                model=model,
                prompt=prompt,
                config=image_config,
            )
        except genai_errors.APIError as e:
            logger.error(f"Imagen API error: {e}")
            raise classify_api_error(e) from e
        except Exception as e:
            logger.error(f"Imagen request failed: {e}")
            raise TransportFailure(f"Gemini API Error: {e}") from e
