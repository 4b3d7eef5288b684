"""Tests for the ISON and ISONL parsers and the ISONL record stream.

WHY: The parsers are deliberately lenient: bad rows degrade instead of
failing, extra tokens are dropped, missing ones leave fields absent.
That leniency is a contract, so each rule gets a test rather than
being "fixed" later by accident.

HOW: Parse small hand-written documents and inspect blocks, fields,
rows and summary rows. Scenario tests mirror the documented examples
(the ``users`` table, the extra-token row).

RULES:
- Every leniency rule in parser.py has at least one test
- Scenario inputs are kept verbatim
"""

import logging

import pytest

from ison_converter.core.model import Block, BlockKind, Document, FieldInfo, Reference, Row, Value, ValueType
from ison_converter.core.parser import iter_isonl_records, parse_ison, parse_isonl, stream_isonl
from ison_converter.formatters.ison_text import dumps_ison


# =========================================================================
# ISON
# =========================================================================

class TestParseIsonScenarios:
    """The documented reference scenarios."""

    def test_users_table(self, users_ison):
        doc = parse_ison(users_ison)
        assert doc.order == ["users"]

        users = doc["users"]
        assert users.kind is BlockKind.TABLE
        assert users.fields == [FieldInfo("id", "int"), FieldInfo("name", ""), FieldInfo("email", "")]
        assert users.row_count == 2

        first = users.rows[0]["id"]
        assert first.type is ValueType.INT
        assert first.as_int() == 1
        assert users.rows[1]["email"].as_str() == "bob@example.com"

    def test_users_field_line_reproduced(self, users_ison):
        text = dumps_ison(parse_ison(users_ison))
        assert text.splitlines()[1] == "id:int name email"
        assert text == users_ison

    def test_extra_tokens_dropped(self):
        doc = parse_ison("table.t\na b\n1 2 3\n")
        row = doc["t"].rows[0]
        assert row.keys() == ["a", "b"]
        assert row["a"].as_int() == 1
        assert row["b"].as_int() == 2

    def test_missing_tokens_leave_fields_absent(self):
        row = parse_ison("table.t\na b c\n1\n")["t"].rows[0]
        assert row.keys() == ["a"]
        assert "b" not in row
        assert row.get("c") is None

    def test_hint_fallback_to_string(self):
        row = parse_ison("table.t\nid:int\nabc\n")["t"].rows[0]
        assert row["id"].as_str() == "abc"


class TestParseIsonStructure:
    """Headers, comments, blank lines and block boundaries."""

    def test_mixed_document(self, mixed_ison):
        doc = parse_ison(mixed_ison)
        assert doc.order == ["info", "orders", "settings"]
        assert doc["info"].kind is BlockKind.META
        assert doc["settings"].kind is BlockKind.OBJECT
        assert doc["info"].rows[0]["source"].as_str() == "nightly build"
        assert doc["orders"].rows[1]["customer"].as_ref() == Reference(id="7", relationship="OWNS")

    def test_summary_isolation(self, mixed_ison):
        orders = parse_ison(mixed_ison)["orders"]
        assert orders.row_count == 2
        assert orders.summary is not None
        assert orders.summary["amount"].as_float() == 24.75
        assert orders.summary["id"].is_null

    def test_only_first_summary_row_kept(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="ison_converter.core.parser"):
            block = parse_ison("table.t\nn\n1\n---\n10\n20\n")["t"]
        assert block.row_count == 1
        assert block.summary["n"].as_int() == 10
        assert "extra summary row" in caplog.text

    def test_comments_and_blanks_before_field_line(self):
        block = parse_ison("table.t\n\n# columns\n  a b  \n1 2\n")["t"]
        assert block.field_names() == ["a", "b"]
        assert block.row_count == 1

    def test_comment_inside_body_skipped(self):
        block = parse_ison("table.t\na\n1\n# note\n2\n")["t"]
        assert block.row_count == 2

    def test_blank_line_ends_block(self):
        doc = parse_ison("table.t\na\n1\n\n2\n")
        assert doc["t"].row_count == 1

    def test_header_ends_block_without_blank_line(self):
        doc = parse_ison("table.a\nx\n1\ntable.b\ny\n2\n")
        assert doc.order == ["a", "b"]
        assert doc["a"].row_count == 1
        assert doc["b"].rows[0]["y"].as_int() == 2

    def test_top_level_junk_ignored(self):
        doc = parse_ison("hello world\nlist.items\na\n1\n")
        assert len(doc) == 0

    def test_quoted_line_is_not_header(self):
        block = parse_ison('table.t\na\n"table.x"\n')["t"]
        assert block.rows[0]["a"].as_str() == "table.x"

    def test_header_without_name_is_not_header(self):
        assert len(parse_ison("table.\na\n1\n")) == 0

    def test_block_name_may_contain_dots(self):
        doc = parse_ison("table.sales.q1\na\n1\n")
        assert doc.order == ["sales.q1"]

    def test_header_at_end_of_input(self):
        block = parse_ison("table.t")["t"]
        assert block.fields == []
        assert block.row_count == 0

    def test_fieldless_block_before_header(self):
        doc = parse_ison("object.cfg\n\n\n\ntable.users\nid\n1\n")
        assert doc.order == ["cfg", "users"]
        assert doc["cfg"].fields == []
        assert doc["users"].rows[0]["id"].as_int() == 1

    def test_header_right_after_header(self):
        doc = parse_ison("meta.empty\ntable.t\na\n1\n")
        assert doc.order == ["empty", "t"]
        assert doc["empty"].fields == []
        assert doc["t"].row_count == 1

    def test_duplicate_block_name_replaces(self):
        doc = parse_ison("table.t\na\n1\n\ntable.u\nb\n2\n\ntable.t\nc\n3\n")
        assert doc.order == ["t", "u"]
        assert doc["t"].field_names() == ["c"]

    def test_crlf_input(self):
        doc = parse_ison("table.t\r\na b\r\n1 x\r\n")
        assert doc["t"].rows[0]["b"].as_str() == "x"

    @pytest.mark.parametrize("text", [None, "", "\n\n", "# only a comment\n"])
    def test_empty_inputs(self, text):
        assert len(parse_ison(text)) == 0

    def test_empty_field_names_skipped(self):
        block = parse_ison('table.t\na "" b\n1 2\n')["t"]
        assert block.field_names() == ["a", "b"]

    def test_round_trip(self, rich_document):
        assert parse_ison(dumps_ison(rich_document)) == rich_document

    @pytest.mark.parametrize("text", ["Bob\u00a0", "\u3000lead", "x\u2003", "\x1fsep", "form\x0c"])
    def test_edge_whitespace_survives_round_trip(self, text):
        block = Block(kind=BlockKind.TABLE, name="t")
        block.add_field("a")
        block.add_field("b")
        row = Row()
        row.set("a", Value.from_str(text))
        row.set("b", Value.from_str(text))
        block.add_row(row)
        doc = Document([block])

        back = parse_ison(dumps_ison(doc))
        assert back == doc
        assert back["t"].rows[0]["b"].as_str() == text


# =========================================================================
# ISONL
# =========================================================================

class TestParseIsonl:
    """Per-line records with repeated headers."""

    def test_users(self, users_isonl, users_document):
        assert parse_isonl(users_isonl) == users_document

    def test_matches_ison(self, users_isonl, users_ison):
        assert parse_isonl(users_isonl) == parse_ison(users_ison)

    def test_interleaved_blocks_keep_first_seen_order(self):
        text = (
            "table.a|x|1\n"
            "table.b|y|2\n"
            "table.a|x|3\n"
        )
        doc = parse_isonl(text)
        assert doc.order == ["a", "b"]
        assert [row["x"].as_int() for row in doc["a"].rows] == [1, 3]

    def test_first_field_declaration_wins(self, caplog):
        text = "table.t|a b|1 2\ntable.t|b a|3 4\n"
        with caplog.at_level(logging.DEBUG, logger="ison_converter.core.parser"):
            block = parse_isonl(text)["t"]
        assert block.field_names() == ["a", "b"]
        assert block.rows[1]["a"].as_int() == 3
        assert "redeclares fields" in caplog.text

    @pytest.mark.parametrize("line", [
        "table.t|a",
        "tablet|a|1",
        "list.t|a|1",
        "table.|a|1",
    ])
    def test_malformed_lines_skipped(self, line):
        doc = parse_isonl(line + "\ntable.ok|a|1\n")
        assert doc.order == ["ok"]

    def test_data_may_contain_pipes(self):
        row = parse_isonl('table.t|a b|x|y "p|q"\n')["t"].rows[0]
        assert row["a"].as_str() == "x|y"
        assert row["b"].as_str() == "p|q"

    def test_comments_and_blank_lines(self):
        doc = parse_isonl("# header\n\ntable.t|a|1\n")
        assert doc["t"].row_count == 1

    def test_empty(self):
        assert len(parse_isonl("")) == 0
        assert len(parse_isonl(None)) == 0


class TestIsonlStream:
    """Record iteration without building a Document."""

    def test_iter_records(self, users_isonl):
        records = list(iter_isonl_records(users_isonl))
        assert [r.line_number for r in records] == [1, 2]
        assert records[0].kind is BlockKind.TABLE
        assert records[0].name == "users"
        assert records[1].row["name"].as_str() == "Bob"

    def test_records_use_their_own_fields(self):
        records = list(iter_isonl_records("table.t|a|1\ntable.t|b|2\n"))
        assert records[1].fields == [FieldInfo("b", "")]
        assert records[1].row.keys() == ["b"]

    def test_accepts_line_iterables(self):
        lines = ["table.t|a|1\n", "bad line\n", "table.t|a|2\n"]
        records = list(iter_isonl_records(lines))
        assert [r.line_number for r in records] == [1, 3]

    def test_stream_callback(self, users_isonl):
        seen = []
        count = stream_isonl(users_isonl, seen.append)
        assert count == 2
        assert [r.row["id"].as_int() for r in seen] == [1, 2]

    def test_callback_errors_propagate(self):
        def boom(record):
            raise RuntimeError("stop")

        with pytest.raises(RuntimeError):
            stream_isonl("table.t|a|1\n", boom)
