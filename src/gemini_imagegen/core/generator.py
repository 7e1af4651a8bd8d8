"""Gemini image generation for a single request.

:class:`GeminiImageGenerator` ties the pieces together for one call::

    normalize(request) -> client.models.generate_content(...) -> materialize(...)

There is no retry, timeout or queueing here.  Each call runs to completion
and any failure is raised to the caller as an :class:`ImageGenError`.

Usage
-----
::

    from gemini_imagegen.core.config import load_config
    from gemini_imagegen.core.generator import GeminiImageGenerator
    from gemini_imagegen.core.models import GenerationRequest

    generator = GeminiImageGenerator(load_config())
    result = generator.generate(GenerationRequest(prompt="a lighthouse at dusk"))
    print(result.image_path)
"""

from __future__ import annotations

import base64
import logging
from typing import Any

from google import genai
from google.genai import types

from .config import ImageGenConfig
from .errors import UpstreamCallFailure
from .materializer import materialize
from .models import EncodedPart, GenerationRequest, GenerationResult
from .normalizer import normalize

logger = logging.getLogger(__name__)

RESPONSE_MODALITIES = ["IMAGE"]


def _to_genai_part(part: EncodedPart) -> types.Part:
    if part.is_text:
        return types.Part.from_text(text=part.text)
    return types.Part.from_bytes(data=base64.b64decode(part.data), mime_type=part.mime_type)


def build_contents(contents: str | tuple[EncodedPart, ...]) -> Any:
    """Convert normalized contents into what ``generate_content`` accepts.

    A bare instruction string is passed through.  A part sequence becomes a
    single user turn whose parts keep their order, text first.
    """
    if isinstance(contents, str):
        return contents
    return [types.Content(role="user", parts=[_to_genai_part(part) for part in contents])]


def build_generation_config(aspect_ratio: str, size_token: str) -> types.GenerateContentConfig:
    """Request an image-only response at the given ratio and resolution."""
    return types.GenerateContentConfig(
        response_modalities=RESPONSE_MODALITIES,
        image_config=types.ImageConfig(
            aspect_ratio=aspect_ratio,
            image_size=size_token,
        ),
    )


class GeminiImageGenerator:
    """Generate one image per call with a fixed Gemini model.

    Attributes:
        config (ImageGenConfig): Immutable settings (model, defaults, output
            directory).
        client: ``google.genai.Client`` or any object exposing
            ``models.generate_content`` with the same signature.
    """

    def __init__(self, config: ImageGenConfig, client: Any | None = None) -> None:
        """Initialise the generator.

        Args:
            config: Resolved settings.
            client: Pre-built Gemini client.  When omitted a
                ``genai.Client`` is created from ``config.gemini_api_key``.
        """
        self.config = config
        if client is None:
            api_key = config.gemini_api_key.get_secret_value() if config.gemini_api_key else None
            client = genai.Client(api_key=api_key)
        self.client = client

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate an image for *request* and write it to the output directory.

        Raises:
            TooManyReferenceImages, SourceImageNotFound, UnsupportedImageFormat:
                The request could not be normalized; no upstream call is made.
            UpstreamCallFailure: The Gemini API call raised.
            NoImageInResponse: The response carried no image.
            OSError: Writing the image failed.
        """
        normalized = normalize(request, self.config)
        logger.info(
            "Generating image: model=%s aspect_ratio=%s image_size=%s (%s) reference_images=%d",
            self.config.model,
            normalized.aspect_ratio,
            normalized.image_size,
            normalized.size_token,
            len(request.reference_images),
        )

        contents = build_contents(normalized.contents)
        generation_config = build_generation_config(normalized.aspect_ratio, normalized.size_token)
        try:
            response = self.client.models.generate_content(
                model=self.config.model,
                contents=contents,
                config=generation_config,
            )
        except Exception as exc:
            logger.error("Gemini request failed: %s", exc)
            raise UpstreamCallFailure(str(exc)) from exc

        return materialize(
            response,
            prompt=request.prompt,
            model=self.config.model,
            aspect_ratio=normalized.aspect_ratio,
            image_size=normalized.image_size,
            output_directory=self.config.output_directory,
        )
