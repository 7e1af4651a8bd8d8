"""Gemini Image Generator — MCP server entry point.

This module defines the MCP ``Server`` instance and the ``main()`` CLI
function that serves it over stdio.

Architecture
------------
- **Configuration** is resolved once at startup by
  :func:`~gemini_imagegen.core.config.load_config` and injected everywhere
  else.
- **Image generation** is performed by
  :class:`~gemini_imagegen.core.generator.GeminiImageGenerator`, one request
  at a time.  Tool calls run in a worker thread behind a one-token limiter,
  so a call finishes before the next one starts and the event loop stays
  free for pings and cancellation.
- **Transport** is stdio.  stdout carries the MCP stream, so all logging goes
  to stderr.

Tools
-----
==================  ======================================
Name                Purpose
==================  ======================================
``generate_image``  Generate one image and save it to disk
==================  ======================================

Usage
-----
CLI (installed entry point)::

    GEMINI_API_KEY=... gemini-imagegen-mcp

Direct invocation::

    python -m gemini_imagegen
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import anyio
import anyio.to_thread
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from pydantic import ValidationError

from gemini_imagegen import __version__
from gemini_imagegen.api.tools import TOOL_NAME, build_generate_image_tool, handle_generate_image
from gemini_imagegen.core.config import ImageGenConfig, load_config
from gemini_imagegen.core.generator import GeminiImageGenerator

logger = logging.getLogger(__name__)

SERVER_NAME = "gemini-imagegen"


def create_server(config: ImageGenConfig, generator: GeminiImageGenerator) -> Server:
    """Build the MCP server exposing ``generate_image``.

    Input validation by the SDK is switched off so malformed arguments reach
    :func:`handle_generate_image` and come back as structured failures.

    Each call runs in a worker thread so the blocking upstream request does
    not stall the transport.  A single-token limiter keeps calls serialized.

    Args:
        config: Settings used for the tool description and schema defaults.
        generator: Generator that serves every call.

    Returns:
        A configured low-level MCP server, not yet running.
    """
    server: Server = Server(SERVER_NAME, version=__version__)
    tool = build_generate_image_tool(config)
    limiter = anyio.CapacityLimiter(1)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [tool]

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        if name != TOOL_NAME:
            raise ValueError(f"Unknown tool: {name}")
        return await anyio.to_thread.run_sync(
            handle_generate_image, generator, arguments, limiter=limiter
        )

    return server


async def serve(server: Server) -> None:
    """Run *server* on stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Load configuration, check credentials and serve over stdio.

    Exits with status 1 when the configuration is invalid or
    ``GEMINI_API_KEY`` is not set.  This function is registered as the
    ``gemini-imagegen-mcp`` console script in ``pyproject.toml``.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config()
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(1)
    logging.getLogger().setLevel(config.log_level)

    if config.gemini_api_key is None or not config.gemini_api_key.get_secret_value():
        logger.error("GEMINI_API_KEY environment variable is required")
        sys.exit(1)

    generator = GeminiImageGenerator(config)
    server = create_server(config, generator)

    logger.info("MCP Image Gen Server running on stdio")
    logger.info("Model: %s", config.model)
    logger.info("Output Directory: %s", config.output_directory)

    anyio.run(serve, server)


if __name__ == "__main__":
    main()
