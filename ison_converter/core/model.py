"""Document model: values, references, rows, blocks and documents.

WHY: The ISON parser, the ISONL parser, every formatter and the JSON
bridge all work on the same in-memory structure. Keeping that structure
in one module makes it the stable contract between reading and writing.

HOW: Six types form a hierarchy:
  Value      - immutable tagged scalar (null, bool, int, float, string, reference)
  Reference  - compact cross-row pointer (:id, :ns:id, :REL:id)
  Row        - insertion-ordered field name -> Value mapping
  FieldInfo  - declared column name plus optional type hint
  Block      - named table/object/meta section with fields, rows and a summary row
  Document   - name-keyed, ordered collection of blocks

RULES:
- Values and References are frozen; sharing them between rows is safe
- Row.set replaces an existing key in place and appends a new one
- A field absent from a row is not the same as a field set to Null
- Block.add_row and Block.set_summary store a copy of the caller's row
- Document.add_block with an existing name replaces that block in place,
  keeping its original position
- Block kind is metadata only, "object" blocks may hold several rows
"""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ison_converter.errors import InvalidArgumentError

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Qualifiers made only of these characters are relationships (:OWNS:5).
_RELATIONSHIP_RE = re.compile(r"[A-Z_]+")


class ValueType(str, enum.Enum):
    """Tag of the active Value variant."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    REFERENCE = "reference"


class BlockKind(str, enum.Enum):
    """Kinds of block that may appear in a `<kind>.<name>` header."""

    TABLE = "table"
    OBJECT = "object"
    META = "meta"


def is_valid_kind(kind: str) -> bool:
    """Return True if ``kind`` names a block kind (case-sensitive)."""
    return kind in BlockKind._value2member_map_


# ---------------------------------------------------------------------------
# Reference
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Reference:
    """A pointer to another entity, written ``:id``, ``:ns:id`` or ``:REL:id``.

    WHY: Relational data needs cheap foreign keys. A reference keeps the
    target id plus an optional qualifier that is either a namespace
    (``user``) or a relationship verb (``OWNS``).

    RULES:
    - id is required and non-empty
    - an ALL-CAPS qualifier (letters and underscore) is a relationship
    - rendering prefers relationship, then namespace, then the bare id
    """

    id: str
    namespace: Optional[str] = None
    relationship: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise InvalidArgumentError("Reference id must be a non-empty string")

    @classmethod
    def parse(cls, token: str) -> Optional["Reference"]:
        """Decode a ``:``-prefixed token, or return None if it is not a reference.

        The qualifier is split at the first colon after the leading one, so
        ``:a:b:c`` has qualifier ``a`` and id ``b:c``. Tokens whose id would
        be empty (``:`` or ``:user:``) are not references.
        """
        if not token.startswith(":"):
            return None
        body = token[1:]
        if ":" not in body:
            return cls(id=body) if body else None

        left, ref_id = body.split(":", 1)
        if not ref_id:
            return None
        if _RELATIONSHIP_RE.fullmatch(left):
            return cls(id=ref_id, relationship=left)
        return cls(id=ref_id, namespace=left or None)

    @property
    def is_relationship(self) -> bool:
        return bool(self.relationship)

    @property
    def qualifier(self) -> Optional[str]:
        """The qualifier used for rendering: relationship first, then namespace."""
        return self.relationship or self.namespace or None

    def to_ison(self) -> str:
        qualifier = self.qualifier
        if qualifier:
            return ":{}:{}".format(qualifier, self.id)
        return ":{}".format(self.id)

    def __str__(self) -> str:
        return self.to_ison()


# ---------------------------------------------------------------------------
# Value
# ---------------------------------------------------------------------------

Payload = Union[None, bool, int, float, str, Reference]


@dataclass(frozen=True)
class Value:
    """An immutable tagged scalar.

    WHY: Row fields hold exactly one of six scalar kinds. A tag plus a
    payload keeps the variant explicit (Bool is never confused with Int,
    Int is never silently stored as Float).

    HOW: Build values with the ``from_*`` constructors, read them back with
    the ``as_*`` accessors. Accessors return None when the variant does not
    match, except ``as_float`` which also promotes an Int.

    RULES:
    - Int payloads must fit in a signed 64-bit integer
    - No stored promotion: Value.from_int(1) stays an Int
    - Frozen, so a Value can be shared between rows without copying
    """

    type: ValueType
    data: Payload = None

    # -- constructors -------------------------------------------------------

    @classmethod
    def null(cls) -> "Value":
        return cls(ValueType.NULL)

    @classmethod
    def from_bool(cls, value: bool) -> "Value":
        return cls(ValueType.BOOL, bool(value))

    @classmethod
    def from_int(cls, value: int) -> "Value":
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgumentError("Int value must be an int, got {!r}".format(value))
        if not INT64_MIN <= value <= INT64_MAX:
            raise InvalidArgumentError("Int value {} is outside the 64-bit range".format(value))
        return cls(ValueType.INT, value)

    @classmethod
    def from_float(cls, value: float) -> "Value":
        return cls(ValueType.FLOAT, float(value))

    @classmethod
    def from_str(cls, value: str) -> "Value":
        if not isinstance(value, str):
            raise InvalidArgumentError("String value must be a str, got {!r}".format(value))
        return cls(ValueType.STRING, value)

    @classmethod
    def from_ref(cls, ref: Reference) -> "Value":
        if not isinstance(ref, Reference):
            raise InvalidArgumentError("Reference value must be a Reference, got {!r}".format(ref))
        return cls(ValueType.REFERENCE, ref)

    @classmethod
    def from_python(cls, obj: Any) -> "Value":
        """Wrap a plain Python scalar (as produced by a JSON decoder).

        Integers outside the 64-bit range become Floats.
        """
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.null()
        if isinstance(obj, bool):
            return cls.from_bool(obj)
        if isinstance(obj, int):
            if INT64_MIN <= obj <= INT64_MAX:
                return cls.from_int(obj)
            return cls.from_float(float(obj))
        if isinstance(obj, float):
            return cls.from_float(obj)
        if isinstance(obj, str):
            return cls.from_str(obj)
        if isinstance(obj, Reference):
            return cls.from_ref(obj)
        raise InvalidArgumentError("Cannot store {} in a Value".format(type(obj).__name__))

    # -- accessors ----------------------------------------------------------

    @property
    def is_null(self) -> bool:
        return self.type is ValueType.NULL

    def as_bool(self) -> Optional[bool]:
        return self.data if self.type is ValueType.BOOL else None

    def as_int(self) -> Optional[int]:
        return self.data if self.type is ValueType.INT else None

    def as_float(self) -> Optional[float]:
        if self.type is ValueType.FLOAT:
            return self.data
        if self.type is ValueType.INT:
            return float(self.data)
        return None

    def as_str(self) -> Optional[str]:
        return self.data if self.type is ValueType.STRING else None

    def as_ref(self) -> Optional[Reference]:
        return self.data if self.type is ValueType.REFERENCE else None

    def to_python(self) -> Payload:
        """Return the raw payload (None for Null)."""
        return self.data

    def clone(self) -> "Value":
        return Value(self.type, self.data)

    @property
    def is_finite_number(self) -> bool:
        if self.type is ValueType.FLOAT:
            return math.isfinite(self.data)
        return self.type is ValueType.INT


# ---------------------------------------------------------------------------
# Row
# ---------------------------------------------------------------------------


class Row:
    """Insertion-ordered mapping of field name to Value.

    RULES:
    - keys are unique, non-empty strings
    - set() on an existing key keeps that key's position
    - get() returns None for an absent field, Value.null() for an explicit null
    - equality is order-sensitive
    """

    def __init__(self, values: Optional[Mapping[str, Value]] = None) -> None:
        self._values: Dict[str, Value] = {}
        if values:
            for key, value in values.items():
                self.set(key, value)

    @classmethod
    def from_python(cls, mapping: Mapping[str, Any]) -> "Row":
        """Build a row from plain Python scalars, in mapping order."""
        row = cls()
        for key, obj in mapping.items():
            row.set(key, Value.from_python(obj))
        return row

    def set(self, key: str, value: Value) -> None:
        if not isinstance(key, str) or not key:
            raise InvalidArgumentError("Row key must be a non-empty string")
        if not isinstance(value, Value):
            raise InvalidArgumentError(
                "Row values must be Value instances, got {}".format(type(value).__name__)
            )
        self._values[key] = value

    def get(self, key: str) -> Optional[Value]:
        return self._values.get(key)

    def __getitem__(self, key: str) -> Value:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def keys(self) -> List[str]:
        return list(self._values)

    def values(self) -> List[Value]:
        return list(self._values.values())

    def items(self) -> List[Tuple[str, Value]]:
        return list(self._values.items())

    def copy(self) -> "Row":
        clone = Row()
        clone._values = dict(self._values)
        return clone

    def to_python(self) -> Dict[str, Payload]:
        return {key: value.to_python() for key, value in self._values.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return list(self._values.items()) == list(other._values.items())

    def __repr__(self) -> str:
        inner = ", ".join("{}={!r}".format(k, v.data) for k, v in self._values.items())
        return "Row({})".format(inner)


# ---------------------------------------------------------------------------
# Block
# ---------------------------------------------------------------------------


@dataclass
class FieldInfo:
    """A declared column: name plus advisory type hint ("" when none)."""

    name: str
    type_hint: str = ""

    def to_ison(self) -> str:
        if self.type_hint:
            return "{}:{}".format(self.name, self.type_hint)
        return self.name


@dataclass
class Block:
    """A named table, object or meta section of a document.

    WHY: ISON groups rows under a ``<kind>.<name>`` header with one shared
    field line. The block carries that header, the declared fields, the
    data rows and an optional aggregate summary row.

    RULES:
    - kind is coerced to BlockKind; unknown kinds raise InvalidArgumentError
    - name must be non-empty
    - rows and summary are copies owned by the block
    """

    kind: BlockKind
    name: str
    fields: List[FieldInfo] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)
    summary: Optional[Row] = None

    def __post_init__(self) -> None:
        try:
            self.kind = BlockKind(self.kind)
        except ValueError:
            raise InvalidArgumentError("Unknown block kind: {!r}".format(self.kind)) from None
        if not isinstance(self.name, str) or not self.name:
            raise InvalidArgumentError("Block name must be a non-empty string")

    def add_field(self, name: str, type_hint: Optional[str] = None) -> FieldInfo:
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError("Field name must be a non-empty string")
        info = FieldInfo(name=name, type_hint=type_hint or "")
        self.fields.append(info)
        return info

    def add_row(self, row: Row) -> Row:
        """Append a copy of ``row`` and return the stored copy."""
        if not isinstance(row, Row):
            raise InvalidArgumentError("add_row() expects a Row")
        stored = row.copy()
        self.rows.append(stored)
        return stored

    def set_summary(self, row: Optional[Row]) -> None:
        """Store a copy of ``row`` as the summary row, or clear it with None."""
        if row is None:
            self.summary = None
            return
        if not isinstance(row, Row):
            raise InvalidArgumentError("set_summary() expects a Row or None")
        self.summary = row.copy()

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[FieldInfo]:
        for info in self.fields:
            if info.name == name:
                return info
        return None

    @property
    def row_count(self) -> int:
        return len(self.rows)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class Document:
    """Ordered, name-keyed collection of blocks."""

    def __init__(self, blocks: Optional[List[Block]] = None) -> None:
        self._blocks: Dict[str, Block] = {}
        for block in blocks or []:
            self.add_block(block)

    def add_block(self, block: Block) -> None:
        """Insert ``block``; a same-named block is replaced where it stands."""
        if not isinstance(block, Block):
            raise InvalidArgumentError("add_block() expects a Block")
        self._blocks[block.name] = block

    def get(self, name: str) -> Optional[Block]:
        return self._blocks.get(name)

    def __getitem__(self, name: str) -> Block:
        return self._blocks[name]

    @property
    def order(self) -> List[str]:
        return list(self._blocks)

    @property
    def blocks(self) -> List[Block]:
        return list(self._blocks.values())

    def __iter__(self) -> Iterator[Block]:
        return iter(list(self._blocks.values()))

    def __len__(self) -> int:
        return len(self._blocks)

    def __contains__(self, name: object) -> bool:
        return name in self._blocks

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return list(self._blocks.items()) == list(other._blocks.items())

    def __repr__(self) -> str:
        return "Document({})".format(", ".join(self._blocks))
