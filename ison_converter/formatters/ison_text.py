"""ISON text formatter.

WHY: ISON is the canonical, most compact rendering of a Document: one
header per block, one field line, one line per row. It must re-parse to
the same Document for scalar content.

HOW: For each block in document order, emit ``kind.name``, the field
line, every row rendered field by field, and ``---`` plus the summary
row when one exists. Blocks are separated by one blank line.

RULES:
- Field tokens are ``name`` or ``name:hint``
- Field and row tokens are joined by DumpOptions.delimiter (default " ")
- A field absent from a row renders as "~", same as Null
- Every block ends with a newline; an empty document renders as ""
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ison_converter.core.model import Block, Document, FieldInfo, Row
from ison_converter.core.values import value_to_ison
from ison_converter.formatters.base import BaseFormatter, DumpOptions, FormatterOutput

logger = logging.getLogger(__name__)


def render_field_line(fields: List[FieldInfo], delimiter: str = " ") -> str:
    return delimiter.join(info.to_ison() for info in fields)


def render_row(row: Row, fields: List[FieldInfo], delimiter: str = " ") -> str:
    return delimiter.join(value_to_ison(row.get(info.name)) for info in fields)


def _render_block(block: Block, delimiter: str) -> str:
    lines = [
        "{}.{}".format(block.kind.value, block.name),
        render_field_line(block.fields, delimiter),
    ]
    for row in block.rows:
        lines.append(render_row(row, block.fields, delimiter))
    if block.summary is not None:
        lines.append("---")
        lines.append(render_row(block.summary, block.fields, delimiter))
    return "\n".join(lines) + "\n"


def dumps_ison(document: Document, options: Optional[DumpOptions] = None) -> str:
    """Serialize a Document to ISON text."""
    options = options or DumpOptions()
    if options.align_columns:
        logger.debug("align_columns is reserved and does not change ISON output")
    return "\n".join(_render_block(block, options.delimiter) for block in document)


class IsonFormatter(BaseFormatter):
    """Formatter that produces block-structured ISON text."""

    @property
    def name(self) -> str:
        return "ISON"

    @property
    def suffix(self) -> str:
        return ".ison"

    @property
    def media_type(self) -> str:
        return "text/plain"

    def format(self, document: Document, options: Optional[DumpOptions] = None) -> FormatterOutput:
        return FormatterOutput(
            suffix=self.suffix,
            content=dumps_ison(document, options),
            media_type=self.media_type,
        )
