"""Configuration constants, format tables, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Supported file extensions and serialization
defaults are plain data structures, not buried in logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level dicts and values read from the environment once.

RULES:
- FILE_EXTENSIONS maps lowercase file suffixes to format keys
- Every ISON_* setting has a default and can be overridden via environment
- Malformed numeric settings fall back to their default with a warning
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ison_converter.formatters.base import DumpOptions

logger = logging.getLogger(__name__)

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Supported file formats
# ---------------------------------------------------------------------------

FILE_EXTENSIONS: dict[str, str] = {
    ".ison": "ison",
    ".isonl": "isonl",
    ".json": "json",
}
"""File suffix (lowercase, with dot) -> format key."""


def detect_format(path: str | Path) -> Optional[str]:
    """Return the format key for ``path`` from its extension, or None."""
    return FILE_EXTENSIONS.get(Path(path).suffix.lower())


def parse_delimiter(text: str) -> str:
    """Turn a delimiter setting into the separator string.

    ``\\t`` (backslash-t, as typed in a shell or .env) means a tab.
    """
    if text == "\\t":
        return "\t"
    return text


# ---------------------------------------------------------------------------
# Environment settings
# ---------------------------------------------------------------------------


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default


DEFAULT_DELIMITER = parse_delimiter(os.getenv("ISON_DELIMITER", "") or " ")
ALIGN_COLUMNS = os.getenv("ISON_ALIGN_COLUMNS", "false").lower() == "true"
JSON_INDENT = _env_int("ISON_JSON_INDENT", None)
LOG_LEVEL = os.getenv("ISON_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

API_HOST = os.getenv("ISON_API_HOST", "0.0.0.0")
API_PORT = _env_int("ISON_API_PORT", 8000)
MAX_UPLOAD_BYTES = _env_int("ISON_MAX_UPLOAD_BYTES", 1024 * 1024)


def default_dump_options(delimiter: Optional[str] = None) -> DumpOptions:
    """Build DumpOptions from the environment, with an optional override."""
    return DumpOptions(
        align_columns=ALIGN_COLUMNS,
        delimiter=parse_delimiter(delimiter) if delimiter else DEFAULT_DELIMITER,
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the CLI and API entry points."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.WARNING),
        format=LOG_FORMAT,
    )
