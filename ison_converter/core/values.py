"""Token <-> Value coercion and scalar text encoding.

WHY: ISON is untyped text with optional advisory hints. Every parser
needs the same decoding order (null, bool, reference, hinted type,
inferred type) and every writer needs the same canonical rendering, so
that parse(dumps(doc)) gives back the same values.

HOW: parse_value_token() walks the decoding order and returns the first
match. value_to_ison() and value_to_json() render a Value for the text
and JSON writers respectively.

RULES:
- "~" and case-insensitive "null" -> Null; case-insensitive "true"/"false" -> Bool
- A leading ":" makes a Reference (see Reference.parse)
- Hints int/float/bool/string are tried first but never reject a token:
  when the hinted parse fails, generic inference runs instead
- Generic inference: int64 integer, else decimal float, else String
- Floats render in their shortest round-trip form (repr)
- Strings are quoted only when empty or containing ASCII whitespace
  or a double quote
"""

from __future__ import annotations

import json
import math
import re
from typing import Optional, Tuple

from ison_converter.core.model import (
    INT64_MAX,
    INT64_MIN,
    Reference,
    Value,
    ValueType,
)

KNOWN_HINTS = frozenset({"int", "float", "bool", "string"})

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SPECIAL_FLOAT_RE = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)

_NEEDS_QUOTES = frozenset(' \t\n\r\f\v"')
_ISON_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t"}


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def parse_int(token: str) -> Optional[int]:
    """Full-token base-10 integer parse; None if not an int64."""
    if not _INT_RE.fullmatch(token):
        return None
    try:
        number = int(token)
    except ValueError:
        # Longer than the interpreter's int digit limit.
        return None
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return number


def parse_float(token: str) -> Optional[float]:
    """Full-token decimal float parse (also inf/nan spellings); None on failure."""
    if _FLOAT_RE.fullmatch(token) or _SPECIAL_FLOAT_RE.fullmatch(token):
        return float(token)
    return None


def _parse_hinted(token: str, type_hint: str) -> Optional[Value]:
    if type_hint == "int":
        number = parse_int(token)
        return Value.from_int(number) if number is not None else None
    if type_hint == "float":
        number = parse_float(token)
        return Value.from_float(number) if number is not None else None
    if type_hint == "bool":
        if token in ("true", "1"):
            return Value.from_bool(True)
        if token in ("false", "0"):
            return Value.from_bool(False)
        return None
    if type_hint == "string":
        return Value.from_str(token)
    return None


def parse_value_token(token: Optional[str], type_hint: str = "") -> Value:
    """Decode one raw token into a Value.

    WHY: This is the single place where ISON's type inference lives.
    Both parsers call it for every data cell.

    HOW: Tries, in order: null literals, bool literals, reference syntax,
    the hint-specific parse (if the hint is known), then int, float and
    finally String.

    Args:
        token: The token as produced by the tokenizer (quotes removed).
            None is treated as Null.
        type_hint: The field's hint, or "" for none. Unknown hints are ignored.

    Returns:
        The decoded Value. Never raises for any string input.
    """
    if token is None or token == "~":
        return Value.null()

    lowered = token.lower()
    if lowered == "null":
        return Value.null()
    if lowered == "true":
        return Value.from_bool(True)
    if lowered == "false":
        return Value.from_bool(False)

    if token.startswith(":"):
        ref = Reference.parse(token)
        if ref is not None:
            return Value.from_ref(ref)
        return Value.from_str(token)

    if type_hint in KNOWN_HINTS:
        hinted = _parse_hinted(token, type_hint)
        if hinted is not None:
            return hinted

    number = parse_int(token)
    if number is not None:
        return Value.from_int(number)

    real = parse_float(token)
    if real is not None:
        return Value.from_float(real)

    return Value.from_str(token)


def parse_field_def(token: str) -> Tuple[str, str]:
    """Split a field-line token on its first ":" into (name, type_hint).

    A token with no colon, or whose only colon is the first character,
    is taken whole as the name with an empty hint.
    """
    colon = token.find(":")
    if colon > 0:
        return token[:colon], token[colon + 1:]
    return token, ""


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def format_float(number: float) -> str:
    return repr(float(number))


def quote_string(text: str) -> str:
    """Render a String token, quoting and escaping only when required."""
    if text and not any(ch in _NEEDS_QUOTES for ch in text):
        return text
    escaped = "".join(_ISON_ESCAPES.get(ch, ch) for ch in text)
    return '"{}"'.format(escaped)


def value_to_ison(value: Optional[Value]) -> str:
    """Render a Value as an ISON token; None (absent field) renders as "~"."""
    if value is None or value.type is ValueType.NULL:
        return "~"
    if value.type is ValueType.BOOL:
        return "true" if value.data else "false"
    if value.type is ValueType.INT:
        return str(value.data)
    if value.type is ValueType.FLOAT:
        return format_float(value.data)
    if value.type is ValueType.STRING:
        return quote_string(value.data)
    return value.data.to_ison()


def value_to_json_obj(value: Optional[Value]):
    """Return the JSON-compatible Python object for a Value.

    References become their ISON text form; non-finite floats become None.
    """
    if value is None or value.type is ValueType.NULL:
        return None
    if value.type is ValueType.REFERENCE:
        return value.data.to_ison()
    if value.type is ValueType.FLOAT and not math.isfinite(value.data):
        return None
    return value.data


def value_to_json(value: Optional[Value]) -> str:
    """Render a Value as a JSON scalar literal."""
    return json.dumps(value_to_json_obj(value), ensure_ascii=False)
