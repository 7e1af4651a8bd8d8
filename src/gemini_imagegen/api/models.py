"""Pydantic response models for the ``generate_image`` tool.

The MCP client receives one text content block holding the JSON form of one
of these models.

Models
------
GenerateImageSuccess
    Returned when an image was written; echoes the resolved parameters.
GenerateImageFailure
    Returned for any request-scoped error, with a human readable message.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from gemini_imagegen.core.models import GenerationResult


class GenerateImageSuccess(BaseModel):
    """Payload for a successful generation.

    Attributes:
        success: Always ``True``.
        image_path: Absolute path of the written image.
        prompt: The prompt as supplied by the caller.
        model: Gemini model that produced the image.
        aspect_ratio: Aspect ratio actually requested upstream.
        image_size: Size tier actually requested (not the resolution token).
        message: Human readable summary.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    image_path: str = Field(..., description="Absolute path of the saved image.")
    prompt: str
    model: str
    aspect_ratio: str
    image_size: str
    message: str

    @classmethod
    def from_result(cls, result: GenerationResult) -> GenerateImageSuccess:
        return cls(
            image_path=str(result.image_path),
            prompt=result.prompt,
            model=result.model,
            aspect_ratio=result.aspect_ratio,
            image_size=result.image_size,
            message=f"Image generated successfully and saved to: {result.image_path}",
        )


class GenerateImageFailure(BaseModel):
    """Payload for a failed generation.

    Attributes:
        success: Always ``False``.
        error: Human readable reason.
    """

    success: bool = False
    error: str = Field(..., description="Why the image could not be generated.")
