"""FastAPI application exposing the markup parser over HTTP.

WHY: External clients (page viewers, archive build scripts, curl) need
to parse, normalize, and render markup without a Python runtime of their
own. FastAPI provides request validation and OpenAPI documentation for
free.

HOW: A single FastAPI app exposes 5 endpoints grouped by tags. Every
request carries its own source text; the app parses it with the
configured nesting bound and answers synchronously. There is no job
store because parsing is fast and bounded by MAX_SOURCE_CHARS.

RULES:
- All endpoints have OpenAPI descriptions on every response
- Error responses use a consistent ErrorResponse schema
- Sources longer than MAX_SOURCE_CHARS are rejected with 413
- A request without allowed_names falls back to DEFAULT_ALLOWED_NAMES
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from bbmarkup import __version__
from bbmarkup.config import (
    API_HOST,
    API_PORT,
    DEFAULT_ALLOWED_NAMES,
    LOG_FORMAT,
    LOG_LEVEL,
    MAX_NESTING_DEPTH,
    MAX_SOURCE_CHARS,
)
from bbmarkup.core.builder import parse_all
from bbmarkup.core.ir import Token, tokens_to_dicts
from bbmarkup.core.serialize import reconstruct
from bbmarkup.formatters import FORMATTERS
from bbmarkup.server.models import (
    ErrorResponse,
    FormatInfo,
    HealthResponse,
    ParseRequest,
    ParseResponse,
    ReconstructResponse,
    RenderRequest,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="bbmarkup API",
    description=(
        "REST API for parsing bracket markup ([b]bold[/b], [img]url[/img], ...) "
        "into a token tree, re-serializing it as canonical markup, and rendering "
        "it to HTML, plain text, or JSON."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_request(request: ParseRequest) -> List[Token]:
    """Validate the request size and parse its source.

    RULES:
    - 413 when the source exceeds MAX_SOURCE_CHARS
    - Explicit allowed_names (even an empty list) override the default
    """
    if len(request.source) > MAX_SOURCE_CHARS:
        raise HTTPException(
            status_code=413,
            detail="Source is {} characters; the limit is {}".format(
                len(request.source), MAX_SOURCE_CHARS
            ),
        )

    allowed: Optional[frozenset] = DEFAULT_ALLOWED_NAMES
    if request.allowed_names is not None:
        allowed = frozenset(request.allowed_names)

    tokens = parse_all(request.source, allowed, MAX_NESTING_DEPTH)
    logger.debug("Parsed %d chars into %d top-level tokens", len(request.source), len(tokens))
    return tokens


# ---------------------------------------------------------------------------
# Endpoints: Markup
# ---------------------------------------------------------------------------


@app.post(
    "/parse",
    response_model=ParseResponse,
    tags=["markup"],
    summary="Parse markup into a token tree",
    description=(
        "Parse the source into literal and tag tokens. Malformed or unmatched "
        "markup is never an error; it comes back as literal text."
    ),
    responses={
        413: {"model": ErrorResponse, "description": "Source too large"},
    },
)
async def parse_markup(request: ParseRequest) -> ParseResponse:
    tokens = _parse_request(request)
    return ParseResponse(tokens=tokens_to_dicts(tokens))


@app.post(
    "/reconstruct",
    response_model=ReconstructResponse,
    tags=["markup"],
    summary="Normalize markup",
    description="Parse the source and serialize the tree back into canonical markup.",
    responses={
        413: {"model": ErrorResponse, "description": "Source too large"},
    },
)
async def reconstruct_markup(request: ParseRequest) -> ReconstructResponse:
    tokens = _parse_request(request)
    return ReconstructResponse(markup=reconstruct(tokens))


@app.post(
    "/render",
    tags=["markup"],
    summary="Render markup in an output format",
    description=(
        "Parse the source and return the selected formatter's output with its "
        "media type (text/html, text/plain, application/json)."
    ),
    responses={
        200: {"description": "Rendered content", "content": {"text/html": {}, "text/plain": {}}},
        413: {"model": ErrorResponse, "description": "Source too large"},
    },
)
async def render_markup(request: RenderRequest) -> Response:
    tokens = _parse_request(request)
    # OutputFormat values are exactly the FORMATTERS keys; validation already
    # rejected anything else with 422.
    output = FORMATTERS[request.format.value]().format(tokens)[0]
    return Response(content=output.content, media_type=output.media_type)


# ---------------------------------------------------------------------------
# Endpoints: Formats
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available output formats",
    description=(
        "Returns all supported output formats with their identifiers, "
        "human-readable names, file suffixes, and media types."
    ),
)
async def list_formats() -> List[FormatInfo]:
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        # An empty tree is enough to learn the suffix and media type.
        sample = formatter.format([])[0]
        result.append(FormatInfo(
            key=key,
            name=formatter.name,
            suffix=sample.suffix,
            media_type=sample.media_type,
        ))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api() -> None:
    """Entry point for the bbmarkup-api console script."""
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    logger.info("Starting bbmarkup API on %s:%d", API_HOST, API_PORT)
    uvicorn.run(app, host=API_HOST, port=API_PORT)
