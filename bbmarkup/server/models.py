"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint pair (request + response) has its own model. Enums
represent closed sets like output format names. All models include
Field descriptions for rich OpenAPI docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Enum values match keys in bbmarkup.formatters.FORMATTERS exactly
- Token trees are returned as plain dicts (see core.ir.token_to_dict)
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class OutputFormat(str, Enum):
    """Available output format identifiers.

    RULES:
    - Values match keys in bbmarkup.formatters.FORMATTERS exactly
    """

    markup = "markup"
    json_tree = "json_tree"
    html = "html"
    plain_text = "plain_text"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ParseRequest(BaseModel):
    """Markup source plus an optional tag allow-list.

    RULES:
    - allowed_names None means every syntactically valid tag name
    - allowed_names is matched case-insensitively
    """

    source: str = Field(description="Raw markup text to parse.")
    allowed_names: Optional[List[str]] = Field(
        default=None,
        description="Tag names to recognise (any case). Other bracket syntax stays literal text.",
    )


class RenderRequest(ParseRequest):
    """Parse request that also selects an output format."""

    format: OutputFormat = Field(
        default=OutputFormat.html,
        description="Output format to render the parsed tree into.",
    )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class ParseResponse(BaseModel):
    """Parsed token tree.

    RULES:
    - tokens uses the same shape as the json_tree formatter output
    """

    tokens: List[Dict[str, Any]] = Field(
        description="Top-level tokens. Literals: {type, text, span}; "
                    "tags: {type, name, arg, properties, content, outer_span, inner_span}.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "tokens": [
                    {
                        "type": "tag",
                        "name": "b",
                        "arg": None,
                        "properties": {},
                        "content": [{"type": "literal", "text": "Hi", "span": [3, 5]}],
                        "outer_span": [0, 9],
                        "inner_span": [3, 5],
                    }
                ]
            }
        ]
    }}


class ReconstructResponse(BaseModel):
    """Normalized markup produced by parsing and re-serializing the source."""

    markup: str = Field(description="Canonical markup text.")


class FormatInfo(BaseModel):
    """Metadata for one output format."""

    key: str = Field(description="Format identifier used in render requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix the format writes, e.g. '.html'.")
    media_type: str = Field(description="MIME type of the rendered content.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status ('ok').")
    version: str = Field(description="bbmarkup package version.")


class ErrorResponse(BaseModel):
    """Consistent error body for all error responses."""

    detail: str = Field(description="Human-readable error message.")
