"""Configuration constants and .env loading.

WHY: The parser itself takes every limit as an argument, but the CLI and
the HTTP API need one place to read operator settings from (nesting
bound, input size bound, default tag allow-list, server address, and log
level), so they are easy to find and override per deployment.

HOW: python-dotenv loads the .env file on import. Values are read from
the environment into module-level constants. int_from_env() and
parse_allowed_names() give clear errors and a single parsing rule.

RULES:
- Every setting has a BBMARKUP_ environment variable and a default
- An empty BBMARKUP_ALLOWED_NAMES means "no filter" (every valid name)
- Malformed integers raise ValueError naming the variable
- The core package never imports this module; entry points pass values in
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

from bbmarkup.core.bracketizer import DEFAULT_MAX_DEPTH

# Load .env from the working directory (where the tool is run from)
load_dotenv()


def int_from_env(name: str, default: int) -> int:
    """Read a non-negative integer setting from the environment.

    RULES:
    - Missing or blank -> default
    - Non-integer or negative -> ValueError naming the variable
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError("{} must be an integer, got '{}'".format(name, raw)) from None
    if value < 0:
        raise ValueError("{} must not be negative, got {}".format(name, value))
    return value


def parse_allowed_names(value: Optional[str]) -> Optional[frozenset]:
    """Parse a comma-separated tag allow-list.

    Returns None (no filter) for None or a blank string; otherwise the
    lower-cased, stripped, non-empty names.
    """
    if value is None:
        return None
    names = frozenset(part.strip().lower() for part in value.split(",") if part.strip())
    return names or None


# ---------------------------------------------------------------------------
# Parser limits
# ---------------------------------------------------------------------------

MAX_NESTING_DEPTH = int_from_env("BBMARKUP_MAX_NESTING_DEPTH", DEFAULT_MAX_DEPTH)
"""Maximum bracket nesting honoured by the parser; deeper brackets stay text."""

MAX_SOURCE_CHARS = int_from_env("BBMARKUP_MAX_SOURCE_CHARS", 1_000_000)
"""Largest source text the API accepts."""

DEFAULT_ALLOWED_NAMES = parse_allowed_names(os.getenv("BBMARKUP_ALLOWED_NAMES"))
"""Default tag allow-list for the CLI and API, or None for no filter."""

# ---------------------------------------------------------------------------
# Server and logging
# ---------------------------------------------------------------------------

API_HOST = os.getenv("BBMARKUP_API_HOST", "127.0.0.1")
API_PORT = int_from_env("BBMARKUP_API_PORT", 8000)
LOG_LEVEL = os.getenv("BBMARKUP_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
