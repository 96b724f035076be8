"""Keyframe generation and revision via Imagen and Gemini image models."""

import base64
import binascii
import logging
import re
from typing import Optional

from google.genai import types

from ..config import config
from ..errors import InvalidState, TransportFailure
from .gemini import GeminiClient

logger = logging.getLogger(__name__)

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>.+)$", re.DOTALL)


def encode_data_url(data: bytes, mime_type: str) -> str:
    """Encode image bytes as a ``data:`` URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(url: str) -> tuple[str, bytes]:
    """Split a ``data:`` URL into its MIME type and decoded payload.

    Raises:
        InvalidState: If the URL is not a well-formed base64 data URL.
    """
    match = _DATA_URL.match(url or "")
    if not match:
        raise InvalidState("Invalid image data URL format.")
    try:
        payload = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidState(f"Invalid image data URL payload: {e}") from e
    if not payload:
        raise InvalidState("Invalid image data URL payload: empty")
    return match.group("mime"), payload


class ImageGenerator:
    """Renders one keyframe per call with Imagen."""

    DEFAULT_MIME_TYPE = "image/jpeg"

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        model: Optional[str] = None,
    ) -> None:
        self._client = client or GeminiClient()
        self._model = model or config.image_model

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, prompt: str, aspect_ratio: str) -> str:
        """Generate a keyframe from a text prompt.

        Args:
            prompt: Text description of the image to generate.
            aspect_ratio: Image aspect ratio ('1:1', '16:9', '9:16', '4:3', '3:4').

        Returns:
            The image as a data URL.

        Raises:
            QuotaExceeded: If the image API refused the call for quota reasons.
            TransportFailure: For any other failure, including an empty response.
        """
        logger.info(f"Generating image with Imagen: {prompt[:50]}...")
        response = await self._client.generate_images(
            model=self._model,
            prompt=prompt,
            image_config=types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type=self.DEFAULT_MIME_TYPE,
                aspect_ratio=aspect_ratio,
            ),
        )

        generated = response.generated_images or []
        image = generated[0].image if generated else None
        if image is None or not image.image_bytes:
            raise TransportFailure(
                "Image generation failed: the model returned no image. "
                "The prompt may have been blocked by safety filters."
            )

        return encode_data_url(image.image_bytes, image.mime_type or self.DEFAULT_MIME_TYPE)


class ImageReviser:
    """Produces a replacement keyframe from an existing one plus edit instructions."""

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        model: Optional[str] = None,
    ) -> None:
        self._client = client or GeminiClient()
        self._model = model or config.edit_model

    @property
    def model(self) -> str:
        return self._model

    async def revise(self, image: bytes, mime_type: str, instruction: str) -> str:
        """Revise an image according to a free-text instruction.

        Returns:
            The full replacement image as a data URL.

        Raises:
            QuotaExceeded: If the API refused the call for quota reasons.
            TransportFailure: For any other failure, including a text-only answer.
        """
        logger.info(f"Revising image: {instruction[:50]}...")
        response = await self._client.generate_content(
            model=self._model,
            contents=[
                types.Part.from_bytes(data=image, mime_type=mime_type),
                types.Part.from_text(text=instruction),
            ],
            generation_config=types.GenerateContentConfig(
                response_modalities=["IMAGE", "TEXT"],
            ),
        )

        for candidate in response.candidates or []:
            content = candidate.content
            for part in (content.parts if content and content.parts else []):
                if part.inline_data and part.inline_data.data:
                    return encode_data_url(
                        part.inline_data.data,
                        part.inline_data.mime_type or mime_type,
                    )

        raise TransportFailure(
            "Image revision failed: the model did not return an image. "
            "Try rephrasing the instruction."
        )

    async def revise_data_url(self, image_url: str, instruction: str) -> str:
        """Revise an image stored as a data URL.

        Raises:
            InvalidState: If ``image_url`` cannot be decoded.
        """
        mime_type, payload = decode_data_url(image_url)
        return await self.revise(payload, mime_type, instruction)
