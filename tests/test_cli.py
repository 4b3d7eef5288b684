"""Tests for the ison-convert command-line interface.

WHY: The CLI is the main way people convert files by hand. It must
detect formats, never overwrite its own input, keep stdout clean for
piping, and fail with a readable message instead of a traceback.

HOW: main() is called with an explicit argv against files in tmp_path;
capsys captures stdout/stderr. Exit status comes from main()'s return
value.

RULES:
- Status messages are asserted on stderr, content on stdout
- Every error path returns 1 and prints "Error: ..."
"""

import json

import pytest

from ison_converter import config
from ison_converter.cli import _resolve_output_path, build_parser, main


@pytest.fixture(autouse=True)
def _default_settings(monkeypatch):
    """Keep tests independent of a developer's .env."""
    monkeypatch.setattr(config, "DEFAULT_DELIMITER", " ")
    monkeypatch.setattr(config, "ALIGN_COLUMNS", False)
    monkeypatch.setattr(config, "JSON_INDENT", None)


@pytest.fixture
def users_file(tmp_path, users_ison):
    path = tmp_path / "users.ison"
    path.write_text(users_ison, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestBuildParser:

    def test_defaults(self):
        args = build_parser().parse_args(["in.ison"])
        assert args.input_file == "in.ison"
        assert args.source_format is None
        assert args.formats is None
        assert args.stdout is False

    def test_from_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["in.txt", "--from", "yaml"])


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


class TestMain:

    def test_converts_to_other_formats(self, users_file, users_isonl, capsys):
        assert main([str(users_file)]) == 0

        assert (users_file.parent / "users.isonl").read_text(encoding="utf-8") == users_isonl
        data = json.loads((users_file.parent / "users.json").read_text(encoding="utf-8"))
        assert data["users"][0]["email"] == "alice@example.com"
        assert not (users_file.parent / "users-2.ison").exists()

        err = capsys.readouterr().err
        assert "Saved: users.isonl" in err
        assert "Saved 2 file(s)" in err

    def test_selected_formats(self, users_file):
        assert main([str(users_file), "--formats", "json"]) == 0
        assert (users_file.parent / "users.json").exists()
        assert not (users_file.parent / "users.isonl").exists()

    def test_never_overwrites(self, users_file, users_ison):
        assert main([str(users_file), "--formats", "ison"]) == 0
        assert users_file.read_text(encoding="utf-8") == users_ison
        assert (users_file.parent / "users-2.ison").read_text(encoding="utf-8") == users_ison

    def test_output_dir(self, users_file, tmp_path):
        out = tmp_path / "out"
        out.mkdir()
        assert main([str(users_file), "--formats", "isonl", "--output-dir", str(out)]) == 0
        assert (out / "users.isonl").exists()

    def test_stdout(self, users_file, capsys):
        assert main([str(users_file), "--formats", "json", "--stdout"]) == 0
        captured = capsys.readouterr()
        assert json.loads(captured.out)["users"][1]["name"] == "Bob"
        assert "Reading users.ison" in captured.err
        assert not (users_file.parent / "users.json").exists()

    def test_delimiter(self, tmp_path, users_isonl, capsys):
        path = tmp_path / "users.isonl"
        path.write_text(users_isonl, encoding="utf-8")
        assert main([str(path), "--formats", "ison", "--stdout", "--delimiter", "\\t"]) == 0
        assert capsys.readouterr().out.splitlines()[1] == "id:int\tname\temail"

    def test_explicit_source_format(self, tmp_path, capsys):
        path = tmp_path / "data.txt"
        path.write_text('{"t": [{"a": 1}]}', encoding="utf-8")
        assert main([str(path), "--from", "json", "--formats", "ison", "--stdout"]) == 0
        assert capsys.readouterr().out == "table.t\na\n1\n"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestMainErrors:

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.ison")]) == 1
        assert "Error: File not found" in capsys.readouterr().err

    def test_unknown_extension(self, tmp_path, capsys):
        path = tmp_path / "data.csv"
        path.write_text("a,b\n", encoding="utf-8")
        assert main([str(path)]) == 1
        assert "Use --from" in capsys.readouterr().err

    def test_unknown_format(self, users_file, capsys):
        assert main([str(users_file), "--formats", "json,xml"]) == 1
        assert "Unknown format 'xml'" in capsys.readouterr().err

    def test_stdout_needs_one_format(self, users_file, capsys):
        assert main([str(users_file), "--stdout"]) == 1
        assert "exactly one format" in capsys.readouterr().err

    def test_missing_output_dir(self, users_file, tmp_path, capsys):
        assert main([str(users_file), "--output-dir", str(tmp_path / "missing")]) == 1
        assert "Output directory does not exist" in capsys.readouterr().err

    def test_malformed_json(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text('{"a": ', encoding="utf-8")
        assert main([str(path)]) == 1
        assert "Error: Invalid JSON" in capsys.readouterr().err

    def test_deeply_nested_json(self, tmp_path, capsys):
        depth = 100000
        path = tmp_path / "deep.json"
        path.write_text('{"t": [{"x": ' + "[" * depth + "]" * depth + "}]}", encoding="utf-8")
        assert main([str(path)]) == 1
        assert "nesting is too deep" in capsys.readouterr().err

    def test_undecodable_input(self, tmp_path, capsys):
        path = tmp_path / "bad.ison"
        path.write_bytes(b"\xff\xfe")
        assert main([str(path)]) == 1
        assert "Error: Cannot read" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Output path resolution
# ---------------------------------------------------------------------------


class TestResolveOutputPath:

    def test_free_name(self, tmp_path):
        assert _resolve_output_path("users", ".json", tmp_path) == tmp_path / "users.json"

    def test_counter_before_extension(self, tmp_path):
        (tmp_path / "users.json").write_text("{}")
        (tmp_path / "users-2.json").write_text("{}")
        assert _resolve_output_path("users", ".json", tmp_path) == tmp_path / "users-3.json"
