"""Locate the generated image in a Gemini response and write it to disk.

Selection is strictly first-match: candidates are scanned in order, then the
parts of each candidate in order, and the first part carrying inline data is
written.  Anything after it is ignored, even other images.

Filenames take the form ``{epoch_ms}_{prompt_prefix}.png``.  Two calls in the
same millisecond with the same 50-character prompt prefix produce the same
name and the second write replaces the first.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import time
from pathlib import Path
from typing import Any

from .errors import NoImageInResponse
from .models import GenerationResult

logger = logging.getLogger(__name__)

PROMPT_PREFIX_LENGTH = 50
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _coerce_bytes(blob: Any) -> bytes | None:
    if isinstance(blob, (bytes, bytearray)):
        return bytes(blob)
    if isinstance(blob, str):
        try:
            return base64.b64decode(blob)
        except (ValueError, binascii.Error):
            logger.warning("Inline data is a string but not valid base64; skipping part")
            return None
    return None


def find_inline_image(response: Any) -> tuple[bytes, str | None] | None:
    """Return ``(image_bytes, mime_type)`` for the first inline part.

    Missing ``candidates``, ``content`` or ``parts`` attributes are treated
    as empty.  Returns ``None`` when no part carries inline data.
    """
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            if inline_data is None:
                continue
            blob = _coerce_bytes(getattr(inline_data, "data", None))
            if blob:
                return blob, getattr(inline_data, "mime_type", None)
    return None


def sanitize_prompt(prompt: str) -> str:
    """Return the first 50 prompt characters with non-alphanumerics as ``_``."""
    return _UNSAFE_CHARS.sub("_", prompt[:PROMPT_PREFIX_LENGTH])


def build_filename(prompt: str, timestamp_ms: int) -> str:
    """Return the output filename for *prompt* generated at *timestamp_ms*.

    >>> build_filename("A cat!", 1700000000000)
    '1700000000000_A_cat_.png'
    """
    return f"{timestamp_ms}_{sanitize_prompt(prompt)}.png"


def materialize(
    response: Any,
    *,
    prompt: str,
    model: str,
    aspect_ratio: str,
    image_size: str,
    output_directory: Path,
    now_ms: int | None = None,
) -> GenerationResult:
    """Write the first inline image in *response* and describe it.

    Args:
        response: ``GenerateContentResponse`` (or any object with the same
            ``candidates[].content.parts[].inline_data`` shape).
        prompt: Original prompt, used for the filename and echoed back.
        model: Model identifier echoed back in the result.
        aspect_ratio: Resolved aspect ratio echoed back in the result.
        image_size: Resolved size tier echoed back in the result.
        output_directory: Absolute directory to write into; created with
            parents if missing.
        now_ms: Timestamp for the filename.  Defaults to the current time.

    Returns:
        The :class:`GenerationResult` for the written file.

    Raises:
        NoImageInResponse: No part of the response carries inline data.
            Nothing is written in that case.
        OSError: The directory or file could not be written.
    """
    found = find_inline_image(response)
    if found is None:
        raise NoImageInResponse()
    image_bytes, mime_type = found

    timestamp = now_ms if now_ms is not None else _now_ms()
    output_directory.mkdir(parents=True, exist_ok=True)
    image_path = output_directory / build_filename(prompt, timestamp)
    image_path.write_bytes(image_bytes)
    logger.info(
        "Saved %d bytes (%s) to %s", len(image_bytes), mime_type or "unknown type", image_path
    )

    return GenerationResult(
        image_path=image_path,
        prompt=prompt,
        model=model,
        aspect_ratio=aspect_ratio,
        image_size=image_size,
    )
