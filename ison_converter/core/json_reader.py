"""JSON reader and JSON -> Document inference.

WHY: JSON import has to keep integers and floats apart exactly as they
were written, and must report malformed input as an IsonParseError with
a position, not as a decoder-specific exception.

HOW: loads() decodes with the stdlib json module, sending integer
literals through an int64 range check, and re-raises decoder errors as
IsonParseError. document_from_dict() then maps the top-level object onto
blocks:

    {"users": [{...}, {...}]}  -> table.users with one row per object
    {"config": {...}}          -> object.config with one row

RULES:
- Strict JSON: no comments, no trailing commas, no NaN or Infinity
- Numbers without fraction or exponent are ints; out-of-int64 ints
  become floats; everything else is a float
- The top level must be an object
- Scalars, empty arrays and arrays whose first element is not an object
  are not converted
- Table fields come from the first element's keys; later elements only
  fill the declared fields and non-object elements are skipped
- Nested arrays or objects inside a row are stored as Null
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

from ison_converter.core.model import INT64_MAX, INT64_MIN, Block, BlockKind, Document, Row, Value
from ison_converter.errors import IsonParseError

logger = logging.getLogger(__name__)


@dataclass
class FromDictOptions:
    """Switches for dict -> Document inference.

    Both are reserved: they are accepted and stored but do not change the
    result yet.

    Attributes:
        auto_refs: Detect id-like values and store them as References.
        smart_order: Reorder fields (ids first, nested last).
    """

    auto_refs: bool = False
    smart_order: bool = False


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------


def _parse_int(literal: str) -> Union[int, float]:
    try:
        number = int(literal)
    except ValueError:
        # Longer than the interpreter's int digit limit.
        return float(literal)
    if INT64_MIN <= number <= INT64_MAX:
        return number
    return float(literal)


def _reject_constant(name: str) -> None:
    raise IsonParseError("Invalid JSON: {} is not a JSON value".format(name))


def loads(text: str) -> Any:
    """Decode JSON text into plain Python objects.

    Integer literals outside int64 come back as floats; NaN and Infinity
    are rejected.

    Raises:
        IsonParseError: If ``text`` is not valid JSON or is nested too deeply.
    """
    if not isinstance(text, str):
        raise IsonParseError("JSON input must be text, got {}".format(type(text).__name__))
    try:
        return json.loads(text, parse_int=_parse_int, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise IsonParseError("Invalid JSON at offset {}: {}".format(exc.pos, exc.msg)) from exc
    except RecursionError as exc:
        raise IsonParseError("Invalid JSON: nesting is too deep") from exc


# ---------------------------------------------------------------------------
# Inference
# ---------------------------------------------------------------------------


def _is_scalar(obj: Any) -> bool:
    return not isinstance(obj, (dict, list))


def _field_names(obj: Mapping[str, Any]) -> List[str]:
    """Keys usable as field names; empty keys cannot name a column."""
    return [key for key in obj if key]


def _row_from_object(obj: Mapping[str, Any], fields: List[str]) -> Row:
    row = Row()
    for name in fields:
        if name not in obj:
            continue
        item = obj[name]
        row.set(name, Value.from_python(item) if _is_scalar(item) else Value.null())
    return row


def _table_block(name: str, items: List[Any]) -> Block:
    fields = _field_names(items[0])
    block = Block(kind=BlockKind.TABLE, name=name)
    for field in fields:
        block.add_field(field)
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.debug("Skipping non-object element %d of %s", index, name)
            continue
        block.add_row(_row_from_object(item, fields))
    return block


def _object_block(name: str, obj: Mapping[str, Any]) -> Block:
    fields = _field_names(obj)
    block = Block(kind=BlockKind.OBJECT, name=name)
    for field in fields:
        block.add_field(field)
    block.add_row(_row_from_object(obj, fields))
    return block


def document_from_dict(data: Mapping[str, Any], options: Optional[FromDictOptions] = None) -> Document:
    """Infer a Document from a decoded top-level JSON object.

    Args:
        data: Mapping of block name -> array of objects or object.
        options: Reserved inference switches.

    Returns:
        A Document with blocks in the mapping's key order.
    """
    options = options or FromDictOptions()
    if options.auto_refs or options.smart_order:
        logger.debug("auto_refs/smart_order are reserved and do not change inference")
    if not isinstance(data, Mapping):
        raise IsonParseError("JSON top level must be an object")

    doc = Document()
    for name, item in data.items():
        if not name:
            logger.debug("Skipping value with an empty key")
            continue
        if isinstance(item, list) and item and isinstance(item[0], dict):
            doc.add_block(_table_block(name, item))
        elif isinstance(item, dict):
            doc.add_block(_object_block(name, item))
        else:
            logger.debug("Skipping %s: not an object or array of objects", name)
    return doc


def from_json(text: str, options: Optional[FromDictOptions] = None) -> Document:
    """Parse JSON text into a Document.

    Raises:
        IsonParseError: On malformed JSON or a non-object top level.
    """
    return document_from_dict(loads(text), options)
