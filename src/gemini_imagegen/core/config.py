"""Configuration management for the Gemini image generation server.

Settings are held in :class:`ImageGenConfig`, a frozen Pydantic Settings
model.  The core components receive an instance at construction time and
never read files or the environment themselves.

Loading Order
-------------
:func:`load_config` resolves values in the following priority order:

1. ``config.json`` in the current working directory (if present)
2. Environment variables (``GEMINI_IMAGEGEN_*`` prefix)
3. ``.env`` file in the working directory
4. Default values defined in :class:`ImageGenConfig`

The API key is the exception: it is read from ``GEMINI_API_KEY``.

Example ``config.json``::

    {
      "model": "gemini-2.5-flash-image",
      "defaultAspectRatio": "16:9",
      "defaultImageSize": "small",
      "outputDirectory": "Pictures/gemini"
    }

Keys may be given in camelCase (as above) or snake_case.  A relative
``outputDirectory`` is resolved against the user's home directory.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic.alias_generators import to_snake
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import AspectRatio, GeminiModel, ImageSize

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


def _default_output_directory() -> Path:
    return Path.home() / "gemini_images"


class ImageGenConfig(BaseSettings):
    """Resolved settings for the image generation server.

    Attributes:
        model: Gemini image model used for every request.
        default_aspect_ratio: Aspect ratio applied when a request omits one.
        default_image_size: Size tier applied when a request omits one.
        output_directory: Absolute directory where images are written.  It is
            created on the first write, not here.
        log_level: Root logging level for the server process.
        gemini_api_key: Google AI Studio API key.  Only the entry point
            requires it; tests inject a fake client instead.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GEMINI_IMAGEGEN_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    model: GeminiModel = Field(
        default="gemini-3-pro-image-preview",
        description="Gemini image model identifier",
    )
    default_aspect_ratio: AspectRatio = Field(
        default="1:1",
        description="Aspect ratio used when the request omits one",
    )
    default_image_size: ImageSize = Field(
        default="large",
        description="Size tier used when the request omits one",
    )
    output_directory: Path = Field(
        default_factory=_default_output_directory,
        description="Directory to save generated images",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level for the server process",
    )
    gemini_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "gemini_api_key"),
        description="Gemini API key",
    )

    @field_validator("output_directory")
    @classmethod
    def _resolve_output_directory(cls, value: Path) -> Path:
        value = value.expanduser()
        if not value.is_absolute():
            value = Path.home() / value
        return value


def _read_config_file(path: Path) -> dict[str, Any]:
    """Return the overrides stored in *path*, or ``{}`` if unusable.

    A missing file is normal.  Unreadable or malformed JSON is logged and
    ignored so the server still starts with defaults.
    """
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Error reading %s, using defaults: %s", path, exc)
        return {}
    if not isinstance(raw, dict):
        logger.error("Error reading %s, using defaults: expected a JSON object", path)
        return {}
    return {to_snake(key): value for key, value in raw.items()}


def load_config(config_path: Path | None = None) -> ImageGenConfig:
    """Build the server configuration.

    Args:
        config_path: Explicit path of the JSON overrides file.  Defaults to
            ``config.json`` in the current working directory.

    Returns:
        A frozen :class:`ImageGenConfig`.

    Raises:
        pydantic.ValidationError: If a configured value is not allowed (for
            example an unknown model name).  This is a startup failure.
    """
    path = config_path if config_path is not None else Path.cwd() / CONFIG_FILENAME
    overrides = _read_config_file(path)
    if overrides:
        logger.debug("Loaded configuration overrides from %s: %s", path, sorted(overrides))
    return ImageGenConfig(**overrides)
