"""Whole-file read/write helpers for ISON, ISONL and plain text.

WHY: Callers want ``load("users.ison")`` rather than opening files and
handling decode errors themselves. Keeping file access here means the
parsers and formatters stay pure string -> Document -> string functions.

HOW: read_file() and write_file() move UTF-8 text to and from disk and
wrap OSError and UnicodeDecodeError in IsonIOError. load()/dump() and
load_isonl()/dump_isonl() compose those with the parsers and formatters.
stream_isonl_file() feeds a file line by line to the ISONL record stream.

RULES:
- Files are always UTF-8
- Written text is not newline-translated
- IsonIOError keeps the original exception as __cause__
- All functions are pure (no side effects beyond file I/O)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator, Optional

from ison_converter.core.model import Document
from ison_converter.core.parser import IsonlRecord, parse_ison, parse_isonl, stream_isonl
from ison_converter.errors import IsonIOError
from ison_converter.formatters.base import DumpOptions
from ison_converter.formatters.ison_text import dumps_ison
from ison_converter.formatters.isonl import dumps_isonl

logger = logging.getLogger(__name__)


def read_file(path: str | Path) -> str:
    """Read a whole UTF-8 text file.

    Raises:
        IsonIOError: If the file cannot be opened, read or decoded.
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IsonIOError("Cannot read {}: {}".format(path, exc)) from exc


def write_file(path: str | Path, text: str) -> None:
    """Write ``text`` to ``path`` as UTF-8, replacing any existing file.

    Raises:
        IsonIOError: If the file cannot be written.
    """
    try:
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as exc:
        raise IsonIOError("Cannot write {}: {}".format(path, exc)) from exc
    logger.debug("Wrote %d characters to %s", len(text), path)


def load(path: str | Path) -> Document:
    """Read and parse an ISON file."""
    return parse_ison(read_file(path))


def dump(document: Document, path: str | Path, options: Optional[DumpOptions] = None) -> None:
    """Serialize ``document`` as ISON and write it to ``path``."""
    write_file(path, dumps_ison(document, options))


def load_isonl(path: str | Path) -> Document:
    """Read and parse an ISONL file."""
    return parse_isonl(read_file(path))


def dump_isonl(document: Document, path: str | Path) -> None:
    """Serialize ``document`` as ISONL and write it to ``path``."""
    write_file(path, dumps_isonl(document))


def _iter_file_lines(path: str | Path) -> Iterator[str]:
    try:
        handle = open(path, "r", encoding="utf-8")
    except OSError as exc:
        raise IsonIOError("Cannot read {}: {}".format(path, exc)) from exc
    with handle:
        while True:
            try:
                line = handle.readline()
            except (OSError, UnicodeDecodeError) as exc:
                raise IsonIOError("Cannot read {}: {}".format(path, exc)) from exc
            if not line:
                return
            yield line


def stream_isonl_file(path: str | Path, callback: Callable[[IsonlRecord], None]) -> int:
    """Invoke ``callback`` for each record of an ISONL file, reading lazily.

    Returns:
        The number of records delivered.

    Raises:
        IsonIOError: If the file cannot be opened or decoded. Records
            delivered before the failure stay delivered.
    """
    return stream_isonl(_iter_file_lines(path), callback)
