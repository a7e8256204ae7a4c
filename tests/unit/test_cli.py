"""Tests for the command-line entry point."""

import json

import pytest

from analyzer.cli import build_parser, main


def _write(tmp_path, name: str, text: str) -> str:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.file is None
        assert args.language == ""
        assert not args.json

    def test_rejects_unknown_language(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--language", "cobol"])


class TestMain:
    def test_clean_file_succeeds(self, tmp_path, capsys):
        path = _write(tmp_path, "ok.py", "x = 1\nprint(x)\n")
        assert main([path]) == 0
        out = capsys.readouterr().out
        assert "Language: python" in out
        assert "Result: SUCCESS" in out

    def test_blocking_error_fails(self, tmp_path, capsys):
        path = _write(tmp_path, "bad.py", "x = (1\n")
        assert main([path, "--language", "python"]) == 1
        out = capsys.readouterr().out
        assert "Unclosed '('" in out
        assert "Result: FAILED" in out

    def test_json_output(self, tmp_path, capsys):
        path = _write(tmp_path, "q.sql", "DELETE FROM users;\n")
        assert main([path, "--json", "-l", "sql"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["language"] == "sql"
        assert payload["success"] is True
        messages = [e["message"] for e in payload["semantic_errors"]]
        assert "DELETE without WHERE removes all rows" in messages

    def test_demo_mode(self, capsys):
        assert main([]) == 0
        out = capsys.readouterr().out
        assert "No file provided. Using built-in demo:" in out
        assert "Undeclared variable 'totl'" in out

    def test_optional_sections(self, tmp_path, capsys):
        path = _write(tmp_path, "ok.py", "x = 1\nprint(x)\n")
        main([path, "--tokens", "--symbols", "--trace", "--stats"])
        out = capsys.readouterr().out
        assert "═══ Tokens ═══" in out
        assert "═══ Symbols ═══" in out
        assert "=== Python execution trace ===" in out
        assert "═══ Diagnostic severities ═══" in out
        assert "═══ Pipeline Statistics ═══" in out
