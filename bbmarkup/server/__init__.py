"""HTTP API for parsing and rendering markup.

WHY: Non-Python tools (a page viewer, archive build scripts, n8n flows)
need the parser without embedding Python. A small FastAPI service
exposes parse, reconstruct, and render over JSON.

RULES:
- The app is stateless; every request parses its own source
- Request/response schemas live in models.py
"""
