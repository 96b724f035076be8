"""External service integrations."""

from .gemini import GeminiClient, classify_api_error
from .imagen import ImageGenerator, ImageReviser, encode_data_url, decode_data_url

__all__ = [
    "GeminiClient",
    "classify_api_error",
    "ImageGenerator",
    "ImageReviser",
    "encode_data_url",
    "decode_data_url",
]
