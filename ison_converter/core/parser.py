"""ISON and ISONL parsers, plus the ISONL record stream.

WHY: ISON text is a sequence of ``<kind>.<name>`` blocks, each with a
field line and positional data rows; ISONL repeats the header and field
list on every line so each row can travel on its own. Both dialects must
produce the same Document model so formatters never care where the data
came from.

HOW: parse_ison() walks trimmed lines with a small state machine: top
level -> block header -> field line -> data rows, with ``---`` switching
to summary mode. parse_isonl() splits each line on its first two pipes
and appends rows to the block named in the header, creating it on first
sight. iter_isonl_records() yields each ISONL line as an independent
record without building a Document.

RULES:
- Lines are trimmed of ASCII whitespace; lines starting with "#" are comments
- A header needs a valid kind before the first "." and a non-empty name,
  and must not start with a quote
- Field tokens split on their first ":" into name and type hint
- Rows are zipped positionally against the fields: extra tokens are
  dropped, missing ones leave the field absent
- The first row after "---" is the summary row; later rows in summary
  mode are ignored
- A block body ends at a blank line, a new header or end of input
- A header where the field line is expected ends a fieldless block
- ISONL: the first field list seen for a block name is authoritative
- Nothing in a row or field line makes parsing fail
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

from ison_converter.core.model import Block, BlockKind, Document, FieldInfo, Row, is_valid_kind
from ison_converter.core.tokenizer import split_lines, tokenize
from ison_converter.core.values import parse_field_def, parse_value_token

logger = logging.getLogger(__name__)

SUMMARY_MARKER = "---"

# Only ASCII whitespace is trimmed; other Unicode spaces are data.
_BLANKS = " \t\r\n\f\v"


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _match_header(line: str) -> Optional[Tuple[BlockKind, str]]:
    """Return (kind, name) if ``line`` is a ``<kind>.<name>`` header."""
    if not line or line[0] == '"' or "." not in line:
        return None
    kind, name = line.split(".", 1)
    if not is_valid_kind(kind) or not name:
        return None
    return BlockKind(kind), name


def _parse_fields(line: str) -> List[FieldInfo]:
    fields: List[FieldInfo] = []
    for token in tokenize(line):
        name, hint = parse_field_def(token)
        if not name:
            logger.debug("Skipping empty field name in field line %r", line)
            continue
        fields.append(FieldInfo(name=name, type_hint=hint))
    return fields


def _build_row(tokens: List[str], fields: List[FieldInfo]) -> Row:
    """Zip tokens against fields; zip() stops at the shorter of the two."""
    row = Row()
    for token, info in zip(tokens, fields):
        row.set(info.name, parse_value_token(token, info.type_hint))
    return row


# ---------------------------------------------------------------------------
# ISON
# ---------------------------------------------------------------------------


def _parse_block(lines: List[str], pos: int, kind: BlockKind, name: str) -> Tuple[Block, int]:
    """Parse one block body starting just after its header line.

    Returns the block and the index of the first line not consumed.
    """
    block = Block(kind=kind, name=name)
    pos += 1

    # Field line: first line that is neither blank nor a comment.
    while pos < len(lines):
        line = lines[pos].strip(_BLANKS)
        if line and not line.startswith("#"):
            break
        pos += 1
    if pos >= len(lines):
        return block, pos
    # A fieldless block is followed directly by the next header.
    if _match_header(lines[pos].strip(_BLANKS)) is not None:
        return block, pos

    block.fields.extend(_parse_fields(lines[pos].strip(_BLANKS)))
    pos += 1

    in_summary = False
    while pos < len(lines):
        line = lines[pos].strip(_BLANKS)

        if not line:
            pos += 1
            break
        if line.startswith("#"):
            pos += 1
            continue
        if _match_header(line) is not None:
            break
        if line == SUMMARY_MARKER:
            in_summary = True
            pos += 1
            continue

        row = _build_row(tokenize(line), block.fields)
        if not in_summary:
            block.add_row(row)
        elif block.summary is None:
            block.set_summary(row)
        else:
            logger.debug("Ignoring extra summary row in block %s (line %d)", name, pos + 1)
        pos += 1

    return block, pos


def parse_ison(text: Optional[str]) -> Document:
    """Parse ISON text into a Document.

    Args:
        text: The full ISON text. None or "" gives an empty Document.

    Returns:
        A Document with one block per header, in encounter order.
    """
    doc = Document()
    if not text:
        return doc

    lines = split_lines(text)
    pos = 0
    while pos < len(lines):
        line = lines[pos].strip(_BLANKS)
        header = _match_header(line) if line and not line.startswith("#") else None
        if header is None:
            if line and not line.startswith("#"):
                logger.debug("Ignoring top-level line %d: %r", pos + 1, line)
            pos += 1
            continue

        kind, name = header
        block, pos = _parse_block(lines, pos, kind, name)
        doc.add_block(block)

    return doc


# ---------------------------------------------------------------------------
# ISONL
# ---------------------------------------------------------------------------


@dataclass
class IsonlRecord:
    """One self-contained ISONL line: header, its own field list and one row.

    RULES:
    - fields are the ones declared on this line, not a previously seen schema
    - row holds min(len(data tokens), len(fields)) values
    - line_number is 1-based within the input
    """

    kind: BlockKind
    name: str
    fields: List[FieldInfo]
    row: Row
    line_number: int


def _split_record(line: str) -> Optional[Tuple[BlockKind, str, str, str]]:
    """Split ``kind.name|fields|data`` into its parts, or None if malformed."""
    parts = line.split("|", 2)
    if len(parts) < 3:
        return None
    header, fields_str, data_str = parts
    if "." not in header:
        return None
    kind, name = header.split(".", 1)
    if not is_valid_kind(kind) or not name:
        return None
    return BlockKind(kind), name, fields_str, data_str


def _content_lines(source: Union[str, Iterable[str]]) -> Iterator[Tuple[int, str]]:
    """Yield (line_number, trimmed line) for non-blank, non-comment lines."""
    lines = split_lines(source) if isinstance(source, str) else source
    for number, raw in enumerate(lines, start=1):
        line = raw.strip(_BLANKS)
        if not line or line.startswith("#"):
            continue
        yield number, line


def parse_isonl(text: Optional[str]) -> Document:
    """Parse ISONL text into a Document.

    WHY: ISONL is how rows are shipped one at a time; reading a whole
    ISONL file must still rebuild the same blocks the ISON form has.

    HOW: Each line names its block. The first line for a name creates the
    block from that line's field segment; later lines only contribute a
    data row, zipped against the stored fields.

    RULES:
    - Lines without two "|" separators, without a "." in the header or
      with an unknown kind are skipped
    - A later line whose field segment differs is accepted; its field
      segment is ignored
    """
    doc = Document()
    if not text:
        return doc

    for number, line in _content_lines(text):
        parts = _split_record(line)
        if parts is None:
            logger.debug("Skipping malformed ISONL line %d: %r", number, line)
            continue
        kind, name, fields_str, data_str = parts

        block = doc.get(name)
        if block is None:
            block = Block(kind=kind, name=name, fields=_parse_fields(fields_str))
            doc.add_block(block)
        elif _parse_fields(fields_str) != block.fields:
            logger.debug(
                "ISONL line %d redeclares fields for %s; keeping the original declaration",
                number, name,
            )

        block.add_row(_build_row(tokenize(data_str), block.fields))

    return doc


def iter_isonl_records(source: Union[str, Iterable[str]]) -> Iterator[IsonlRecord]:
    """Yield one IsonlRecord per valid ISONL line.

    Args:
        source: ISONL text, or any iterable of lines (an open file works;
            trailing newlines are stripped).

    Yields:
        Records in input order. Malformed lines are skipped.
    """
    for number, line in _content_lines(source):
        parts = _split_record(line)
        if parts is None:
            logger.debug("Skipping malformed ISONL line %d: %r", number, line)
            continue
        kind, name, fields_str, data_str = parts
        fields = _parse_fields(fields_str)
        yield IsonlRecord(
            kind=kind,
            name=name,
            fields=fields,
            row=_build_row(tokenize(data_str), fields),
            line_number=number,
        )


def stream_isonl(
    source: Union[str, Iterable[str]],
    callback: Callable[[IsonlRecord], None],
) -> int:
    """Invoke ``callback`` for every ISONL record in ``source``.

    Returns:
        The number of records delivered.
    """
    count = 0
    for record in iter_isonl_records(source):
        callback(record)
        count += 1
    return count
