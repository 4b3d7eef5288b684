"""Abstract base formatter, output container and serialization options.

WHY: Every output format consumes the same Document but produces
different text. This base class enforces a consistent interface so the
CLI and API layers can work with any formatter generically.

HOW: BaseFormatter is an ABC with ``name``, ``suffix``, ``media_type``
and a ``format()`` method. FormatterOutput bundles the file suffix with
the rendered content and its MIME type. DumpOptions carries the
serialization switches shared by the text formatters.

RULES:
- Subclasses MUST implement ``name``, ``suffix``, ``media_type`` and ``format()``
- ``suffix`` starts with a dot, e.g. ``".isonl"``
- The caller is responsible for prepending the source filename stem
- ``DumpOptions.align_columns`` is accepted but currently has no effect
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ison_converter.core.model import Document
from ison_converter.errors import InvalidArgumentError


@dataclass
class DumpOptions:
    """Serialization switches for the ISON writer.

    Attributes:
        align_columns: Reserved for column-aligned output. Accepted and
            stored, but the writer does not pad columns yet.
        delimiter: Separator between tokens on field and data lines.
    """

    align_columns: bool = False
    delimiter: str = " "

    def __post_init__(self) -> None:
        if not isinstance(self.delimiter, str) or not self.delimiter:
            raise InvalidArgumentError("delimiter must be a non-empty string")


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``".json"`` -> ``"users.json"``.
        content: The rendered document text.
        media_type: MIME type for the content, e.g. ``"application/json"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement name, suffix, media_type and format()
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'ISON'."""

    @property
    @abstractmethod
    def suffix(self) -> str:
        """File suffix including the leading dot."""

    @property
    @abstractmethod
    def media_type(self) -> str:
        """MIME type of the rendered content."""

    @abstractmethod
    def format(self, document: Document, options: Optional[DumpOptions] = None) -> FormatterOutput:
        """Render the Document.

        Args:
            document: The document to serialize.
            options: Serialization switches; formatters ignore the ones
                that do not apply to them.

        Returns:
            A FormatterOutput with the rendered text.
        """
