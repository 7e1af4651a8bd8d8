"""Turn a validated :class:`GenerationRequest` into an upstream payload.

The normalizer applies configured defaults, resolves the size tier to the
Gemini resolution token, folds the negative prompt into the instruction text
and base64-encodes any reference images.  Its only side effect is reading
reference image files.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from .config import ImageGenConfig
from .errors import SourceImageNotFound, TooManyReferenceImages, UnsupportedImageFormat
from .models import (
    MAX_REFERENCE_IMAGES,
    NEGATIVE_PROMPT_LABEL,
    SIZE_TOKENS,
    SUPPORTED_IMAGE_TYPES,
    EncodedPart,
    GenerationRequest,
    NormalizedRequest,
    SizeToken,
)

logger = logging.getLogger(__name__)


def build_instruction_text(prompt: str, negative_prompt: str | None = None) -> str:
    """Return the single instruction string sent upstream.

    The Gemini schema has no negative prompt field, so it is appended as a
    labelled second line.
    """
    if negative_prompt:
        return f"{prompt}\n{NEGATIVE_PROMPT_LABEL}{negative_prompt}"
    return prompt


def resolve_size_token(image_size: str) -> SizeToken:
    """Map a size tier to its resolution token.

    Raises:
        KeyError: If *image_size* is not a known tier.  Requests are
            validated before this point, so this indicates a programming
            error rather than bad input.
    """
    return SIZE_TOKENS[image_size]


def mime_type_for(path: Path) -> str:
    """Return the MIME type for *path* based on its extension.

    Raises:
        UnsupportedImageFormat: If the extension is not a supported format.
    """
    extension = path.suffix.lower().lstrip(".")
    try:
        return SUPPORTED_IMAGE_TYPES[extension]
    except KeyError:
        raise UnsupportedImageFormat(extension, SUPPORTED_IMAGE_TYPES) from None


def encode_reference_image(path: Path) -> EncodedPart:
    """Read *path* and wrap it as a base64 inline part.

    Raises:
        SourceImageNotFound: If *path* does not exist or is not a file.
        UnsupportedImageFormat: If the extension has no known MIME type.
    """
    if not path.is_file():
        raise SourceImageNotFound(path)
    mime_type = mime_type_for(path)
    data = base64.b64encode(path.read_bytes()).decode("ascii")
    return EncodedPart(mime_type=mime_type, data=data)


def normalize(request: GenerationRequest, config: ImageGenConfig) -> NormalizedRequest:
    """Build the upstream payload for *request*.

    Args:
        request: Validated generation request.
        config: Settings supplying the default aspect ratio and size tier.

    Returns:
        The contents to send plus the resolved aspect ratio, size tier and
        size token.

    Raises:
        TooManyReferenceImages: More than :data:`MAX_REFERENCE_IMAGES` paths.
        SourceImageNotFound: A reference image does not exist.
        UnsupportedImageFormat: A reference image has an unknown extension.
    """
    count = len(request.reference_images)
    if count > MAX_REFERENCE_IMAGES:
        raise TooManyReferenceImages(count, MAX_REFERENCE_IMAGES)

    aspect_ratio = request.aspect_ratio or config.default_aspect_ratio
    image_size = request.image_size or config.default_image_size
    text = build_instruction_text(request.prompt, request.negative_prompt)

    contents: str | tuple[EncodedPart, ...]
    if count:
        parts = [EncodedPart(text=text)]
        parts.extend(encode_reference_image(path) for path in request.reference_images)
        contents = tuple(parts)
        logger.debug("Encoded %d reference image(s)", count)
    else:
        contents = text

    return NormalizedRequest(
        contents=contents,
        aspect_ratio=aspect_ratio,
        image_size=image_size,
        size_token=resolve_size_token(image_size),
    )
