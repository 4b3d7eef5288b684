"""Reader registry and one-call conversions between ISON, ISONL and JSON.

WHY: The CLI, the HTTP API and library users all do the same thing:
parse text in one format and render it in another. Routing every
conversion through the READERS and FORMATTERS registries keeps the
format list in one place.

HOW: READERS maps format keys to parse functions. convert_text() picks a
reader, builds a Document and hands it to the target formatter. The
named helpers (ison_to_isonl, ...) are thin wrappers for the common pairs.

RULES:
- Format keys are the same for READERS and FORMATTERS
- Unknown keys raise InvalidArgumentError listing the available ones
- The JSON formatter takes its indent from configuration
"""

from __future__ import annotations

from typing import Callable, Optional

from ison_converter import config
from ison_converter.core.json_reader import from_json
from ison_converter.core.model import Document
from ison_converter.core.parser import parse_ison, parse_isonl
from ison_converter.errors import InvalidArgumentError
from ison_converter.formatters import FORMATTERS
from ison_converter.formatters.base import BaseFormatter, DumpOptions, FormatterOutput
from ison_converter.formatters.ison_text import dumps_ison
from ison_converter.formatters.isonl import dumps_isonl
from ison_converter.formatters.json_output import JsonFormatter, dumps_json

READERS: dict[str, Callable[[str], Document]] = {
    "ison": parse_ison,
    "isonl": parse_isonl,
    "json": from_json,
}


def _unknown(kind: str, key: str, available) -> InvalidArgumentError:
    return InvalidArgumentError(
        "Unknown {} format '{}'. Available formats: {}".format(kind, key, ", ".join(sorted(available)))
    )


def parse_text(text: str, source_format: str) -> Document:
    """Parse ``text`` with the reader registered for ``source_format``."""
    reader = READERS.get(source_format)
    if reader is None:
        raise _unknown("source", source_format, READERS)
    return reader(text)


def get_formatter(target_format: str) -> BaseFormatter:
    """Instantiate the formatter registered for ``target_format``."""
    formatter_cls = FORMATTERS.get(target_format)
    if formatter_cls is None:
        raise _unknown("target", target_format, FORMATTERS)
    if formatter_cls is JsonFormatter:
        return JsonFormatter(indent=config.JSON_INDENT)
    return formatter_cls()


def convert_document(
    document: Document,
    target_format: str,
    options: Optional[DumpOptions] = None,
) -> FormatterOutput:
    return get_formatter(target_format).format(document, options)


def convert_text(
    text: str,
    source_format: str,
    target_format: str,
    options: Optional[DumpOptions] = None,
) -> FormatterOutput:
    """Convert ``text`` from one registered format to another."""
    return convert_document(parse_text(text, source_format), target_format, options)


def ison_to_isonl(text: str) -> str:
    return dumps_isonl(parse_ison(text))


def isonl_to_ison(text: str, options: Optional[DumpOptions] = None) -> str:
    return dumps_ison(parse_isonl(text), options)


def ison_to_json(text: str, indent: Optional[int] = None) -> str:
    return dumps_json(parse_ison(text), indent=indent)


def json_to_ison(text: str, options: Optional[DumpOptions] = None) -> str:
    return dumps_ison(from_json(text), options)
