"""Core request handling for Gemini image generation.

- **config**: Pydantic Settings configuration and ``config.json`` loading
- **models**: request, payload and result types plus the size-tier table
- **normalizer**: request → upstream payload
- **materializer**: upstream response → image file on disk
- **generator**: one request end to end against the Gemini API
- **errors**: request-scoped exception hierarchy
"""

from gemini_imagegen.core.config import ImageGenConfig, load_config
from gemini_imagegen.core.errors import (
    ImageGenError,
    InvalidRequest,
    NoImageInResponse,
    SourceImageNotFound,
    TooManyReferenceImages,
    UnsupportedImageFormat,
    UpstreamCallFailure,
)
from gemini_imagegen.core.generator import GeminiImageGenerator
from gemini_imagegen.core.models import GenerationRequest, GenerationResult

__all__ = [
    "GeminiImageGenerator",
    "GenerationRequest",
    "GenerationResult",
    "ImageGenConfig",
    "ImageGenError",
    "InvalidRequest",
    "NoImageInResponse",
    "SourceImageNotFound",
    "TooManyReferenceImages",
    "UnsupportedImageFormat",
    "UpstreamCallFailure",
    "load_config",
]
