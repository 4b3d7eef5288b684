"""Core data model, parsers and conversion helpers.

WHY: The core package contains the stable heart of the converter: the
Document model and the readers that build it. These are consumed by all
formatters and must remain backward-compatible.

HOW: model.py defines the data structures, tokenizer.py and values.py
turn text tokens into typed Values, parser.py reads ISON and ISONL,
json_reader.py reads JSON, files.py and convert.py wire readers and
formatters to files and to each other.

RULES:
- The model is the contract; change with care
- Parsing logic is format-agnostic with respect to output
- Row-level problems degrade to Strings, they never raise
"""
