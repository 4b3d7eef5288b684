"""JSON formatter: one array of row objects per block.

WHY: JSON is the lingua franca for tools that do not speak ISON. Every
block becomes a named array so the output imports straight back through
the JSON reader.

HOW: Build ``{block_name: [{field: value, ...}, ...]}`` in document and
field order, then serialize with the stdlib json module.

RULES:
- Every block is written as an array, including object and meta blocks
- Absent fields are omitted; explicit Nulls are written as null
- References are written as strings in their ISON form (":user:42")
- Non-finite floats are written as null
- Summary rows are not part of the JSON shape
- Output is compact unless an indent is given
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from ison_converter.core.model import Document
from ison_converter.core.values import value_to_json_obj
from ison_converter.formatters.base import BaseFormatter, DumpOptions, FormatterOutput


def document_to_python(document: Document) -> Dict[str, List[Dict[str, Any]]]:
    """Return the JSON-ready nested dict/list form of a Document."""
    result: Dict[str, List[Dict[str, Any]]] = {}
    for block in document:
        records = []
        for row in block.rows:
            record: Dict[str, Any] = {}
            for info in block.fields:
                value = row.get(info.name)
                if value is not None:
                    record[info.name] = value_to_json_obj(value)
            records.append(record)
        result[block.name] = records
    return result


def dumps_json(document: Document, indent: Optional[int] = None) -> str:
    """Serialize a Document to JSON text."""
    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(
        document_to_python(document),
        ensure_ascii=False,
        indent=indent,
        separators=separators,
    )


class JsonFormatter(BaseFormatter):
    """Formatter that produces a JSON object of row arrays."""

    def __init__(self, indent: Optional[int] = None) -> None:
        self.indent = indent

    @property
    def name(self) -> str:
        return "JSON"

    @property
    def suffix(self) -> str:
        return ".json"

    @property
    def media_type(self) -> str:
        return "application/json"

    def format(self, document: Document, options: Optional[DumpOptions] = None) -> FormatterOutput:
        return FormatterOutput(
            suffix=self.suffix,
            content=dumps_json(document, indent=self.indent),
            media_type=self.media_type,
        )
