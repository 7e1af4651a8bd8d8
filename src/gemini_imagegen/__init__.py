"""Gemini Image Generator - MCP tool server for Gemini native image models."""

__version__ = "1.0.0"

from gemini_imagegen.core.config import ImageGenConfig, load_config
from gemini_imagegen.core.generator import GeminiImageGenerator
from gemini_imagegen.core.models import GenerationRequest, GenerationResult

__all__ = [
    "GeminiImageGenerator",
    "GenerationRequest",
    "GenerationResult",
    "ImageGenConfig",
    "load_config",
]
