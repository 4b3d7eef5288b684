"""ISON Converter: token-efficient tabular text format hub.

WHY: ISON stores tables, singleton objects and meta rows as compact
positional lines with typed fields and cross-row references. Tools that
speak JSON, or that stream rows one line at a time, need lossless-enough
bridges in and out of it.

HOW: Three-stage pipeline: parse (ISON, ISONL or JSON text into a
Document), model (Document / Block / Row / Value), format (pluggable
formatters back to text). Each stage is independently testable.

RULES:
- All formatters consume the same Document model
- Adding a new output format = one new formatter module, no core changes
- The Document model is the stable contract between parsing and formatting
"""

__version__ = "0.1.0"
