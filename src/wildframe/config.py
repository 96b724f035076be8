"""Configuration management."""

import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _api_key_from_env() -> str:
    for name in ("GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY"):
        value = os.getenv(name)
        if value:
            return value
    return ""


def _flag_from_env(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


class Config(BaseModel):
    """Application configuration."""

    # Credentials
    gemini_api_key: str = Field(
        default_factory=_api_key_from_env,
        description="Gemini API key (GEMINI_API_KEY, API_KEY or GOOGLE_API_KEY)"
    )
    google_cloud_project: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_PROJECT", ""),
        description="Google Cloud project ID (Vertex AI mode only)"
    )
    google_cloud_location: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1"),
        description="Vertex AI region"
    )
    use_vertexai: bool = Field(
        default_factory=lambda: _flag_from_env("GOOGLE_GENAI_USE_VERTEXAI"),
        description="Route requests through Vertex AI instead of the API key"
    )

    # Model settings
    text_model: str = Field(
        default_factory=lambda: os.getenv("WILDFRAME_TEXT_MODEL", "gemini-2.5-flash"),
        description="Model used to write the scene sequence"
    )
    image_model: str = Field(
        default_factory=lambda: os.getenv("WILDFRAME_IMAGE_MODEL", "imagen-4.0-generate-001"),
        description="Model used to render keyframes"
    )
    edit_model: str = Field(
        default_factory=lambda: os.getenv(
            "WILDFRAME_EDIT_MODEL", "gemini-2.5-flash-image-preview"
        ),
        description="Model used to revise keyframes"
    )
    temperature: float = Field(default=0.8, description="Sequence sampling temperature")
    pacing_delay: float = Field(
        default_factory=lambda: float(os.getenv("WILDFRAME_PACING_DELAY", "1.0")),
        description="Seconds to wait between keyframe requests",
        ge=0,
        validate_default=True,
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def validate_required(self) -> None:
        """Validate that required credentials are set.

        Raises:
            ValueError: If the credentials for the selected backend are missing.
        """
        if self.use_vertexai:
            if not self.google_cloud_project:
                raise ValueError(
                    "GOOGLE_CLOUD_PROJECT not set (required when GOOGLE_GENAI_USE_VERTEXAI is on)"
                )
            return

        if not self.gemini_api_key:
            raise ValueError(
                "Gemini API key not set. Set GEMINI_API_KEY (or API_KEY) env var."
            )


# Global config instance
config = Config()
