"""MCP server surface for the Gemini image generator."""
