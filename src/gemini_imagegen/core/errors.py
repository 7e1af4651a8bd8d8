"""Exception hierarchy for image generation requests.

Every error raised while serving a single ``generate_image`` call derives from
:class:`ImageGenError`.  The tool boundary in :mod:`gemini_imagegen.api.tools`
catches these and reports them as structured failure payloads, so none of
them are fatal to the server process.

Hierarchy
---------
::

    ImageGenError
    ├── InvalidRequest
    ├── TooManyReferenceImages
    ├── SourceImageNotFound
    ├── UnsupportedImageFormat
    ├── UpstreamCallFailure
    └── NoImageInResponse
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class ImageGenError(Exception):
    """Base class for request-scoped generation failures.

    The exception message is intended to be shown directly to the MCP client.
    """


class InvalidRequest(ImageGenError):
    """Tool arguments are missing or malformed."""


class TooManyReferenceImages(ImageGenError):
    """More reference images were supplied than the upstream model accepts."""

    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(f"Too many reference images: {count} supplied, maximum is {limit}")


class SourceImageNotFound(ImageGenError):
    """A reference image path does not exist on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Source image not found: {self.path}")


class UnsupportedImageFormat(ImageGenError):
    """A reference image has an extension with no known MIME type."""

    def __init__(self, extension: str, supported: Iterable[str]) -> None:
        self.extension = extension
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported image format: '{extension}'. "
            f"Supported formats: {', '.join(self.supported)}"
        )


class UpstreamCallFailure(ImageGenError):
    """The Gemini API call raised; the message is the SDK's own."""


class NoImageInResponse(ImageGenError):
    """The Gemini response contained no inline image data."""

    def __init__(self, message: str = "No image data found in response") -> None:
        super().__init__(message)
