"""Shared test fixtures for the ison_converter test suite.

WHY: Most test modules need the same small documents: the canonical
``users`` table, a mixed document with every block kind, references and
a summary row, and the matching JSON. Centralizing them here avoids
duplication and keeps every module testing the same data.

HOW: Module-level constants hold the source texts; fixtures hand out
fresh copies and a Document built directly through the model API, so
parser tests can compare against something the parser did not build.

RULES:
- USERS_ISON is the reference scenario: 3 fields, 2 rows, ``id:int``
- MIXED_ISON contains one block of each kind and exactly one summary row
- Fixtures return new objects on every call; tests may mutate them
"""

from pathlib import Path

import pytest

from ison_converter.core.model import Block, BlockKind, Document, Reference, Row, Value

TESTS_DIR = Path(__file__).resolve().parent

USERS_ISON = (
    "table.users\n"
    "id:int name email\n"
    "1 Alice alice@example.com\n"
    "2 Bob bob@example.com\n"
)

USERS_ISONL = (
    "table.users|id:int name email|1 Alice alice@example.com\n"
    "table.users|id:int name email|2 Bob bob@example.com\n"
)

USERS_JSON = '{"users":[{"id":1,"name":"Alice"}]}'

MIXED_ISON = """\
# nightly catalog export
meta.info
version source
2 "nightly build"

table.orders
id:int customer amount:float paid:bool
1 :user:42 19.5 true
2 :OWNS:7 5.25 false
---
~ ~ 24.75 ~

object.settings
theme retries
dark 3
"""


@pytest.fixture
def users_ison():
    return USERS_ISON


@pytest.fixture
def users_isonl():
    return USERS_ISONL


@pytest.fixture
def mixed_ison():
    return MIXED_ISON


@pytest.fixture
def users_document():
    """The USERS_ISON document, built through the model API."""
    block = Block(kind=BlockKind.TABLE, name="users")
    block.add_field("id", "int")
    block.add_field("name")
    block.add_field("email")
    block.add_row(Row({
        "id": Value.from_int(1),
        "name": Value.from_str("Alice"),
        "email": Value.from_str("alice@example.com"),
    }))
    block.add_row(Row({
        "id": Value.from_int(2),
        "name": Value.from_str("Bob"),
        "email": Value.from_str("bob@example.com"),
    }))
    return Document([block])


@pytest.fixture
def rich_document():
    """A document exercising every value type, quoting and a summary row."""
    orders = Block(kind=BlockKind.TABLE, name="orders")
    for name, hint in (("id", "int"), ("owner", ""), ("note", ""), ("total", "float"), ("ok", "bool")):
        orders.add_field(name, hint)
    orders.add_row(Row({
        "id": Value.from_int(1),
        "owner": Value.from_ref(Reference(id="42", namespace="user")),
        "note": Value.from_str("two words"),
        "total": Value.from_float(19.5),
        "ok": Value.from_bool(True),
    }))
    orders.add_row(Row({
        "id": Value.from_int(-7),
        "owner": Value.from_ref(Reference(id="5", relationship="OWNS")),
        "note": Value.from_str('say "hi"\tthen\nleave'),
        "total": Value.from_float(1e16),
        "ok": Value.null(),
    }))
    orders.set_summary(Row({
        "id": Value.null(),
        "owner": Value.null(),
        "note": Value.from_str("sum"),
        "total": Value.from_float(20.5),
        "ok": Value.null(),
    }))

    config = Block(kind=BlockKind.OBJECT, name="config")
    config.add_field("mode")
    config.add_field("empty")
    config.add_row(Row({"mode": Value.from_str("fast"), "empty": Value.from_str("")}))

    return Document([orders, config])
