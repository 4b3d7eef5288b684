"""Quote-aware line tokenizer shared by the ISON and ISONL parsers.

WHY: Field lines, data rows and both ISONL segments all use the same
token syntax: whitespace-separated words, with double quotes for values
that contain whitespace. One tokenizer keeps the dialects consistent.

HOW: A single left-to-right scan with two flags (inside quotes, after a
backslash). Quotes toggle the in-quotes flag and are dropped; whitespace
outside quotes ends the current token.

RULES:
- Separators are space and tab; runs of them collapse
- Escapes only apply inside quotes: \\n, \\t, \\", \\\\; any other escaped
  character is kept literally
- An unterminated quote runs to the end of the line
- A quoted empty span ("") produces an empty token
- split_lines() strips a trailing carriage return from every line
"""

from __future__ import annotations

from typing import List

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}
_SEPARATORS = frozenset(" \t")


def tokenize(line: str) -> List[str]:
    """Split one line into tokens.

    Args:
        line: A single line of ISON text (no newline characters expected).

    Returns:
        The tokens in order, with quotes removed and escapes decoded.
    """
    tokens: List[str] = []
    current: List[str] = []
    in_quotes = False
    escaped = False
    # A token that contained a quote is kept even when empty ("" -> "").
    quoted = False

    for ch in line:
        if escaped:
            current.append(_ESCAPES.get(ch, ch))
            escaped = False
            continue

        if ch == "\\" and in_quotes:
            escaped = True
            continue

        if ch == '"':
            in_quotes = not in_quotes
            quoted = True
            continue

        if not in_quotes and ch in _SEPARATORS:
            if current or quoted:
                tokens.append("".join(current))
                current = []
                quoted = False
            continue

        current.append(ch)

    if current or quoted:
        tokens.append("".join(current))

    return tokens


def split_lines(text: str) -> List[str]:
    """Split text on newlines, dropping a trailing CR from each line.

    A final newline does not produce an extra empty line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.rstrip("\r") for line in lines]
