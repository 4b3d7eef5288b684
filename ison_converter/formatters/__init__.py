"""Output formatter registry.

WHY: The CLI and API layers need a single lookup to find the right
formatter by name. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["isonl"]()``.

RULES:
- Keys are the lowercase format names used in CLI flags and API requests
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ison_converter.formatters.ison_text import IsonFormatter
from ison_converter.formatters.isonl import IsonlFormatter
from ison_converter.formatters.json_output import JsonFormatter

if TYPE_CHECKING:
    from ison_converter.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "ison": IsonFormatter,
    "isonl": IsonlFormatter,
    "json": JsonFormatter,
}
