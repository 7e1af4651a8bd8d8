"""The ``generate_image`` tool: definition, argument parsing and handling.

These functions hold everything the MCP server needs to know about the tool
and none of the transport.  :mod:`gemini_imagegen.api.main` registers them
with the server; tests call them directly.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import mcp.types as types
from pydantic import ValidationError

from gemini_imagegen.api.models import GenerateImageFailure, GenerateImageSuccess
from gemini_imagegen.core.config import ImageGenConfig
from gemini_imagegen.core.errors import ImageGenError, InvalidRequest
from gemini_imagegen.core.generator import GeminiImageGenerator
from gemini_imagegen.core.models import (
    ASPECT_RATIOS,
    IMAGE_SIZES,
    MAX_REFERENCE_IMAGES,
    SUPPORTED_IMAGE_TYPES,
    GenerationRequest,
)

logger = logging.getLogger(__name__)

TOOL_NAME = "generate_image"


def build_generate_image_tool(config: ImageGenConfig) -> types.Tool:
    """Describe the tool, with defaults taken from *config*."""
    return types.Tool(
        name=TOOL_NAME,
        description=(
            f"Generate an image using Google Gemini AI ({config.model}). "
            "Creates high-quality images from text prompts with customizable aspect "
            "ratios and sizes, optionally guided by reference images. "
            f"Images are saved to {config.output_directory}."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": (
                        "Text description of the image to generate. "
                        "Be detailed and specific for best results."
                    ),
                },
                "aspectRatio": {
                    "type": "string",
                    "enum": list(ASPECT_RATIOS),
                    "description": (
                        "Aspect ratio of the generated image. "
                        f"Default: {config.default_aspect_ratio}"
                    ),
                    "default": config.default_aspect_ratio,
                },
                "imageSize": {
                    "type": "string",
                    "enum": list(IMAGE_SIZES),
                    "description": (
                        "Image resolution (small: 1K, medium: 2K, large: 2K, xlarge: 4K). "
                        "Note: gemini-2.5-flash-image only supports 1K. "
                        f"Default: {config.default_image_size}"
                    ),
                    "default": config.default_image_size,
                },
                "negativePrompt": {
                    "type": "string",
                    "description": "Optional. Describe what you do NOT want in the image.",
                },
                "referenceImages": {
                    "type": "array",
                    "items": {"type": "string"},
                    "maxItems": MAX_REFERENCE_IMAGES,
                    "description": (
                        "Optional. Paths of existing images to guide generation "
                        f"(up to {MAX_REFERENCE_IMAGES}; formats: "
                        f"{', '.join(SUPPORTED_IMAGE_TYPES)})."
                    ),
                },
            },
            "required": ["prompt"],
        },
    )


def parse_generation_request(arguments: Any) -> GenerationRequest:
    """Validate raw tool arguments into a :class:`GenerationRequest`.

    Presence and type of ``prompt`` are checked explicitly before any model
    validation runs.

    Raises:
        InvalidRequest: If the arguments are malformed.
    """
    if not isinstance(arguments, Mapping):
        raise InvalidRequest("Invalid arguments: expected an object")
    if "prompt" not in arguments or not isinstance(arguments["prompt"], str):
        raise InvalidRequest("Invalid arguments: prompt is required and must be a string")

    try:
        return GenerationRequest.model_validate(dict(arguments))
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in error['loc']) or 'arguments'}: {error['msg']}"
            for error in exc.errors()
        )
        raise InvalidRequest(f"Invalid arguments: {details}") from exc


def _text_result(
    payload: GenerateImageSuccess | GenerateImageFailure, *, is_error: bool
) -> types.CallToolResult:
    text = payload.model_dump_json(by_alias=True, indent=2)
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def handle_generate_image(
    generator: GeminiImageGenerator, arguments: Mapping[str, Any] | None
) -> types.CallToolResult:
    """Run one ``generate_image`` call and wrap the outcome for MCP.

    Request-scoped failures never escape: they become an ``isError`` result
    carrying a :class:`GenerateImageFailure` payload.
    """
    try:
        request = parse_generation_request(arguments if arguments is not None else {})
        result = generator.generate(request)
    except ImageGenError as exc:
        logger.warning("generate_image failed: %s", exc)
        return _text_result(GenerateImageFailure(error=str(exc)), is_error=True)
    except OSError as exc:
        logger.exception("generate_image could not write the image")
        return _text_result(GenerateImageFailure(error=str(exc)), is_error=True)

    return _text_result(GenerateImageSuccess.from_result(result), is_error=False)
