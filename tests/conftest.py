"""Shared pytest fixtures for Gemini image generator tests."""

import os
import shutil
import tempfile
from pathlib import Path
from types import SimpleNamespace
from typing import Callable, Generator
from unittest.mock import MagicMock

import pytest
from PIL import Image

from gemini_imagegen.core.config import ImageGenConfig
from gemini_imagegen.core.generator import GeminiImageGenerator

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"


def _make_part(data: bytes | str | None = None, mime_type: str = "image/png", text: str | None = None):
    """Build a fake response part.

    A part with ``data`` carries inline data; otherwise it is a text part.
    """
    inline_data = SimpleNamespace(data=data, mime_type=mime_type) if data is not None else None
    return SimpleNamespace(text=text, inline_data=inline_data)


def _make_response(*candidate_parts: list) -> SimpleNamespace:
    """Build a fake ``GenerateContentResponse`` with one candidate per argument."""
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts)) for parts in candidate_parts]
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment from leaking into configuration."""
    for name in list(os.environ):
        if name.upper().startswith("GEMINI_IMAGEGEN_") or name.upper() == "GEMINI_API_KEY":
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def part_factory() -> Callable[..., SimpleNamespace]:
    """Expose :func:`_make_part` to tests."""
    return _make_part


@pytest.fixture
def response_factory() -> Callable[..., SimpleNamespace]:
    """Expose :func:`_make_response` to tests."""
    return _make_response


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def output_dir(temp_dir: Path) -> Path:
    """Output directory path that does not exist yet."""
    return temp_dir / "outputs" / "nested"


@pytest.fixture
def test_config(output_dir: Path) -> ImageGenConfig:
    """Create a test configuration writing into a temporary directory.

    Returns:
        ImageGenConfig instance for testing
    """
    return ImageGenConfig(
        _env_file=None,
        model="gemini-3-pro-image-preview",
        default_aspect_ratio="1:1",
        default_image_size="large",
        output_directory=output_dir,
        gemini_api_key="test-api-key",
    )


@pytest.fixture
def fake_client() -> MagicMock:
    """Gemini client stand-in returning a single PNG image."""
    client = MagicMock()
    client.models.generate_content.return_value = _make_response([_make_part(PNG_BYTES)])
    return client


@pytest.fixture
def generator(test_config: ImageGenConfig, fake_client: MagicMock) -> GeminiImageGenerator:
    """Generator wired to the fake client."""
    return GeminiImageGenerator(test_config, client=fake_client)


@pytest.fixture
def make_image(temp_dir: Path) -> Callable[[str], Path]:
    """Factory writing a small real image file under ``temp_dir/refs``.

    The format is taken from the filename extension.
    """
    refs_dir = temp_dir / "refs"
    refs_dir.mkdir(exist_ok=True)
    formats = {".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG", ".gif": "GIF", ".webp": "WEBP"}

    def _make(name: str) -> Path:
        path = refs_dir / name
        image_format = formats.get(path.suffix.lower())
        if image_format is None:
            path.write_bytes(b"not really an image")
        else:
            Image.new("RGB", (8, 8), color="red").save(path, format=image_format)
        return path

    return _make


@pytest.fixture
def png_bytes() -> bytes:
    """Image payload returned by ``fake_client``."""
    return PNG_BYTES
