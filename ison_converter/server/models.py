"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint pair (request + response) has its own model. FormatKey
is the closed set of format names accepted on both sides of a conversion.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- FormatKey values match the READERS and FORMATTERS keys exactly
- Response models never expose Document internals, only summaries
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class FormatKey(str, Enum):
    """Format identifiers accepted as conversion source or target."""

    ison = "ison"
    isonl = "isonl"
    json = "json"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ConversionRequest(BaseModel):
    """Text to convert plus the formats on both sides.

    RULES:
    - delimiter only affects ISON output; omitted means the configured default
    """

    text: str = Field(description="Source document text.")
    source_format: FormatKey = Field(description="Format of `text`.")
    target_format: FormatKey = Field(description="Format to produce.")
    delimiter: Optional[str] = Field(
        default=None,
        description="Token separator for ISON output (e.g. ' ' or '\\t').",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "text": "table.users\nid:int name\n1 Alice\n2 Bob\n",
                "source_format": "ison",
                "target_format": "json",
            }
        ]
    }}


class InspectRequest(BaseModel):
    """Document text to summarize."""

    text: str = Field(description="Document text.")
    source_format: FormatKey = Field(description="Format of `text`.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class ConversionResponse(BaseModel):
    """Converted document text and what produced it."""

    source_format: FormatKey = Field(description="Format the input was read as.")
    target_format: FormatKey = Field(description="Format of `content`.")
    content: str = Field(description="Converted document text.")
    media_type: str = Field(description="MIME type of `content`.")
    block_count: int = Field(description="Number of blocks in the parsed document.")


class FieldSummary(BaseModel):
    name: str = Field(description="Field name.")
    type_hint: str = Field(description="Declared type hint, or '' when none.")


class BlockSummary(BaseModel):
    """Shape of one block, without its row data."""

    name: str = Field(description="Block name.")
    kind: str = Field(description="Block kind: table, object or meta.")
    fields: List[FieldSummary] = Field(description="Declared fields in order.")
    row_count: int = Field(description="Number of data rows.")
    has_summary: bool = Field(description="Whether the block has a summary row.")


class InspectResponse(BaseModel):
    block_count: int = Field(description="Number of blocks in the document.")
    blocks: List[BlockSummary] = Field(description="Blocks in document order.")


class FormatInfo(BaseModel):
    """Description of an available format.

    WHY: Clients can query the /formats endpoint to discover which formats
    can be read and written and what file suffix each one produces.
    """

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '.isonl').")
    media_type: str = Field(description="MIME type of produced content.")
    readable: bool = Field(description="Whether the format is accepted as input.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    - code is the numeric ErrorCode for document errors, absent otherwise
    """

    detail: str = Field(description="Human-readable error description.")
    code: Optional[int] = Field(default=None, description="Numeric error code (-2 parse, -4 invalid).")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
