"""FastAPI application with conversion API routes and OpenAPI docs.

WHY: Tools that cannot embed the Python library (curl, n8n, services in
other languages) need an HTTP API to convert between ISON, ISONL and
JSON. FastAPI provides automatic OpenAPI documentation and request
validation.

HOW: A single FastAPI app exposes conversion, inspection, format listing
and health endpoints grouped by tags. Every request parses its own
Document and renders it through the formatter registry.

RULES:
- All endpoints have OpenAPI summaries, descriptions and tags
- IsonError becomes a 400 with the ErrorResponse schema plus its code
- Uploads are limited to config.MAX_UPLOAD_BYTES (413 above it)
- Uploaded files must be UTF-8 text with a known extension, unless
  source_format is given explicitly
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from ison_converter import __version__, config
from ison_converter.core.convert import READERS, convert_document, get_formatter, parse_text
from ison_converter.core.model import Document
from ison_converter.errors import IsonError
from ison_converter.formatters import FORMATTERS
from ison_converter.formatters.base import FormatterOutput
from ison_converter.server.models import (
    BlockSummary,
    ConversionRequest,
    ConversionResponse,
    ErrorResponse,
    FieldSummary,
    FormatInfo,
    FormatKey,
    HealthResponse,
    InspectRequest,
    InspectResponse,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="ISON Converter API",
    description=(
        "REST API for converting documents between ISON, ISONL and JSON. "
        "Send text or upload a file, and get the converted document back."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(IsonError)
async def ison_error_handler(request: Request, exc: IsonError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc), "code": int(exc.code)})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _convert(document: Document, target: str, delimiter: Optional[str]) -> FormatterOutput:
    """Render ``document``, logging unexpected failures with a traceback."""
    options = config.default_dump_options(delimiter)
    try:
        return convert_document(document, target, options)
    except IsonError:
        raise
    except Exception:
        logger.exception("Conversion to %s failed", target)
        raise HTTPException(status_code=500, detail="Conversion failed")


def _summarize(document: Document) -> InspectResponse:
    blocks = [
        BlockSummary(
            name=block.name,
            kind=block.kind.value,
            fields=[FieldSummary(name=f.name, type_hint=f.type_hint) for f in block.fields],
            row_count=block.row_count,
            has_summary=block.summary is not None,
        )
        for block in document
    ]
    return InspectResponse(block_count=len(blocks), blocks=blocks)


# ---------------------------------------------------------------------------
# Endpoints: Conversions
# ---------------------------------------------------------------------------


@app.post(
    "/conversions",
    response_model=ConversionResponse,
    tags=["conversions"],
    summary="Convert document text",
    description=(
        "Parse `text` as `source_format` and render it as `target_format`. "
        "Rows and fields that cannot be typed degrade to strings; only "
        "malformed JSON or unknown formats are rejected."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Malformed input or invalid options"},
    },
)
def create_conversion(request: ConversionRequest) -> ConversionResponse:
    document = parse_text(request.text, request.source_format.value)
    output = _convert(document, request.target_format.value, request.delimiter)
    logger.info(
        "Converted %s -> %s (%d blocks)",
        request.source_format.value, request.target_format.value, len(document),
    )
    return ConversionResponse(
        source_format=request.source_format,
        target_format=request.target_format,
        content=output.content,
        media_type=output.media_type,
        block_count=len(document),
    )


@app.post(
    "/conversions/file",
    tags=["conversions"],
    summary="Convert an uploaded file",
    description=(
        "Upload an .ison, .isonl or .json file and download it converted to "
        "`target_format`. The input format is taken from the file extension "
        "unless `source_format` is given."
    ),
    responses={
        200: {"description": "Converted file as an attachment"},
        400: {"model": ErrorResponse, "description": "Unsupported file type or malformed content"},
        413: {"model": ErrorResponse, "description": "Upload too large"},
    },
)
async def convert_file(
    file: Annotated[
        UploadFile,
        File(description="Document file to convert"),
    ],
    target_format: Annotated[
        FormatKey,
        Form(description="Format to produce: ison, isonl or json."),
    ],
    source_format: Annotated[
        Optional[FormatKey],
        Form(description="Input format; detected from the file extension when omitted."),
    ] = None,
    delimiter: Annotated[
        Optional[str],
        Form(description="Token separator for ISON output."),
    ] = None,
) -> Response:
    # Sanitize filename to prevent path traversal
    filename = Path(file.filename or "upload").name

    if source_format is not None:
        source = source_format.value
    else:
        source = config.detect_format(filename)
        if source is None:
            raise HTTPException(
                status_code=400,
                detail="Unsupported file type '{}'. Supported formats: {}".format(
                    Path(filename).suffix, ", ".join(sorted(config.FILE_EXTENSIONS))
                ),
            )

    content = await file.read(config.MAX_UPLOAD_BYTES + 1)
    if len(content) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail="File too large (max {} bytes)".format(config.MAX_UPLOAD_BYTES),
        )
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File is not valid UTF-8 text")

    document = parse_text(text, source)
    output = _convert(document, target_format.value, delimiter)
    out_filename = "{}{}".format(Path(filename).stem, output.suffix)
    logger.info("Converted %s (%s) -> %s", filename, source, out_filename)

    return Response(
        content=output.content.encode("utf-8"),
        media_type=output.media_type,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(out_filename)},
    )


# ---------------------------------------------------------------------------
# Endpoints: Documents
# ---------------------------------------------------------------------------


@app.post(
    "/documents/inspect",
    response_model=InspectResponse,
    tags=["documents"],
    summary="Summarize a document",
    description=(
        "Parse the text and return each block's name, kind, declared fields, "
        "row count and whether it carries a summary row."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Malformed input"},
    },
)
def inspect_document(request: InspectRequest) -> InspectResponse:
    return _summarize(parse_text(request.text, request.source_format.value))


# ---------------------------------------------------------------------------
# Endpoints: Formats
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available formats",
    description=(
        "Returns all supported formats with their identifiers, "
        "human-readable names, file suffixes and MIME types."
    ),
)
async def list_formats() -> List[FormatInfo]:
    result = []
    for key in sorted(FORMATTERS):
        formatter = get_formatter(key)
        result.append(FormatInfo(
            key=key,
            name=formatter.name,
            suffix=formatter.suffix,
            media_type=formatter.media_type,
            readable=key in READERS,
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


def run_api():
    """Entry point for the ison-api console script."""
    import uvicorn

    config.configure_logging()
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
