"""Base agent abstraction."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar, Optional

from google.genai import types

from ..services.gemini import GeminiClient
from ..config import config

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Abstract base class for AI agents.

    Provides shared functionality for agents that use Gemini for generation.
    Subclasses must implement `run` and `system_prompt`.
    """

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize the agent.

        Args:
            client: GeminiClient instance. Created if not provided.
            model: Model to use. Defaults to config.text_model.
        """
        self._model = model or config.text_model
        self._client = client or GeminiClient()
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the agent's name."""
        ...

    @abstractmethod
    def system_prompt(self, input_data: InputT) -> str:
        """Return the system instruction for this input."""
        ...

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    @abstractmethod
    async def run(self, input_data: InputT) -> OutputT:
        """Execute the agent's main task.

        Args:
            input_data: Input data for the agent.

        Returns:
            Structured output from the agent.
        """
        ...

    async def _create_message(
        self,
        contents: Any,
        system_instruction: str,
        temperature: float = 0.7,
        response_schema: Optional[Any] = None,
    ) -> str:
        """Send one request and return the response text.

        Args:
            contents: Prompt parts to send.
            system_instruction: System instruction for the request.
            temperature: Sampling temperature.
            response_schema: If given, constrain the output to JSON of this shape.

        Returns:
            The text content of Gemini's response.
        """
        kwargs = {
            "system_instruction": system_instruction,
            "temperature": temperature,
        }
        if response_schema is not None:
            kwargs["response_mime_type"] = "application/json"
            kwargs["response_schema"] = response_schema
        generation_config = types.GenerateContentConfig(**kwargs)

        try:
            response = await self._client.generate_content(
                model=self._model,
                contents=contents,
                generation_config=generation_config,
            )
        except Exception as e:
            self._logger.error(f"Error creating message: {e}")
            raise

        text = response.text or ""
        self._logger.debug(f"Received response of length: {len(text)}")
        return text
