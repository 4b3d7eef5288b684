"""ISONL (line-per-row) formatter.

WHY: Streaming consumers want one row per line, where every line can be
read without having seen any line before it. ISONL repeats the block
header and field list on each row so a reader can resume anywhere.

HOW: For each block in document order and each row in row order, emit
``kind.name|fields|data`` followed by a newline.

RULES:
- Tokens inside the field and data segments are always space-separated
- Absent fields render as "~"
- Summary rows have no ISONL form and are not written
- Blocks without rows produce no lines
"""

from __future__ import annotations

from typing import List, Optional

from ison_converter.core.model import Document
from ison_converter.formatters.base import BaseFormatter, DumpOptions, FormatterOutput
from ison_converter.formatters.ison_text import render_field_line, render_row


def dumps_isonl(document: Document) -> str:
    """Serialize a Document to ISONL text."""
    lines: List[str] = []
    for block in document:
        prefix = "{}.{}|{}|".format(block.kind.value, block.name, render_field_line(block.fields))
        for row in block.rows:
            lines.append(prefix + render_row(row, block.fields))
    return "".join(line + "\n" for line in lines)


class IsonlFormatter(BaseFormatter):
    """Formatter that produces self-contained ISONL records."""

    @property
    def name(self) -> str:
        return "ISONL"

    @property
    def suffix(self) -> str:
        return ".isonl"

    @property
    def media_type(self) -> str:
        return "text/plain"

    def format(self, document: Document, options: Optional[DumpOptions] = None) -> FormatterOutput:
        # ISONL has a fixed separator, so DumpOptions do not apply.
        return FormatterOutput(
            suffix=self.suffix,
            content=dumps_isonl(document),
            media_type=self.media_type,
        )
