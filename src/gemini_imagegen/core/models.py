"""Request, payload and result models for Gemini image generation.

The request model is the validated structure produced at the tool boundary.
Everything downstream (normalizer, generator, materializer) only ever sees a
:class:`GenerationRequest` whose fields already passed presence and enum
checks, so unknown sizes or aspect ratios never reach the upstream call.

Size tiers
----------
Callers choose one of four size tiers while the Gemini API only understands
three resolution tokens.  ``medium`` and ``large`` both map to ``2K``:

=========  =====
Tier       Token
=========  =====
small      1K
medium     2K
large      2K
xlarge     4K
=========  =====
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, get_args

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

GeminiModel = Literal["gemini-2.5-flash-image", "gemini-3-pro-image-preview"]
AspectRatio = Literal["1:1", "2:3", "3:2", "3:4", "4:3", "4:5", "5:4", "9:16", "16:9", "21:9"]
ImageSize = Literal["small", "medium", "large", "xlarge"]
SizeToken = Literal["1K", "2K", "4K"]

ASPECT_RATIOS: tuple[str, ...] = get_args(AspectRatio)
IMAGE_SIZES: tuple[str, ...] = get_args(ImageSize)

# Many-to-one on purpose: medium and large share the 2K token.
SIZE_TOKENS: dict[str, SizeToken] = {
    "small": "1K",
    "medium": "2K",
    "large": "2K",
    "xlarge": "4K",
}

MAX_REFERENCE_IMAGES = 14

SUPPORTED_IMAGE_TYPES: dict[str, str] = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
}

NEGATIVE_PROMPT_LABEL = "Negative prompt: "


class GenerationRequest(BaseModel):
    """A single ``generate_image`` call after boundary validation.

    Field names are snake_case in Python; the camelCase names used on the
    wire (``aspectRatio``, ``imageSize``, ``negativePrompt``,
    ``referenceImages``) are accepted as aliases.  ``sourceImages`` is kept as
    an alias of ``referenceImages`` for older clients.

    Attributes:
        prompt: Text description of the image.  Must contain at least one
            non-whitespace character; stored verbatim.
        aspect_ratio: Requested aspect ratio, or ``None`` to use the
            configured default.
        image_size: Requested size tier, or ``None`` to use the configured
            default.
        negative_prompt: Things the image should avoid.  Appended to the
            instruction text, never sent as a separate field.
        reference_images: Paths of existing images that condition the
            generation, in the order the caller supplied them.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    prompt: str = Field(..., description="Text description of the image to generate.")
    aspect_ratio: AspectRatio | None = Field(
        default=None,
        validation_alias=AliasChoices("aspectRatio", "aspect_ratio"),
    )
    image_size: ImageSize | None = Field(
        default=None,
        validation_alias=AliasChoices("imageSize", "image_size"),
    )
    negative_prompt: str | None = Field(
        default=None,
        validation_alias=AliasChoices("negativePrompt", "negative_prompt"),
    )
    reference_images: tuple[Path, ...] = Field(
        default=(),
        validation_alias=AliasChoices("referenceImages", "sourceImages", "reference_images"),
    )

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt must not be empty")
        return value

    @field_validator("aspect_ratio", "image_size", "negative_prompt", mode="before")
    @classmethod
    def _empty_means_omitted(cls, value):
        if value == "":
            return None
        return value

    @field_validator("reference_images", mode="before")
    @classmethod
    def _none_means_no_images(cls, value):
        if value is None:
            return ()
        return value


@dataclass(frozen=True)
class EncodedPart:
    """One element of the multimodal payload sent upstream.

    Exactly one of ``text`` or (``mime_type``, ``data``) is set.  ``data`` is
    the base64 encoding of the raw file bytes.
    """

    text: str | None = None
    mime_type: str | None = None
    data: str | None = None

    @property
    def is_text(self) -> bool:
        return self.text is not None


@dataclass(frozen=True)
class NormalizedRequest:
    """Upstream-ready view of a :class:`GenerationRequest`.

    ``contents`` is the bare instruction string when there are no reference
    images, otherwise the ordered part sequence (text first).
    """

    contents: str | tuple[EncodedPart, ...]
    aspect_ratio: str
    image_size: str
    size_token: SizeToken


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a successful generation, echoed back to the caller."""

    image_path: Path
    prompt: str
    model: str
    aspect_ratio: str
    image_size: str
