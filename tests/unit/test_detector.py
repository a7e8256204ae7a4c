"""Tests for signature-based language detection."""

from analyzer import constants
from analyzer.detector import detect_language, score_languages


class TestDetectLanguage:
    def test_select_is_sql(self):
        assert detect_language("SELECT * FROM t;") == constants.LANG_SQL

    def test_markup_is_html(self):
        assert detect_language("<html><body></body></html>") == constants.LANG_HTML

    def test_function_definition_is_python(self):
        assert detect_language("def f():\n    return 1\n") == constants.LANG_PYTHON

    def test_empty_is_unknown(self):
        assert detect_language("") == constants.LANG_UNKNOWN

    def test_whitespace_only_is_unknown(self):
        assert detect_language("   \n\t\n") == constants.LANG_UNKNOWN

    def test_no_signatures_is_unknown(self):
        assert detect_language("hello world") == constants.LANG_UNKNOWN

    def test_tie_is_unknown(self):
        source = "SELECT x\ndef y"
        scores = score_languages(source)
        assert scores[constants.LANG_SQL] == scores[constants.LANG_PYTHON] == 1
        assert detect_language(source) == constants.LANG_UNKNOWN

    def test_sql_keywords_case_insensitive(self):
        assert detect_language("select id from users where id = 1") == constants.LANG_SQL

    def test_loop_without_definitions_is_python(self):
        source = "values = [1, 2]\nfor value in values:\n    print(value)\n"
        assert detect_language(source) == constants.LANG_PYTHON

    def test_control_flow_keywords_score_python(self):
        source = "if ready:\n    x = 1\nelse:\n    x = 2\nwhile x:\n    x -= 1\n"
        assert score_languages(source)[constants.LANG_PYTHON] == 6


class TestScoreLanguages:
    def test_scores_every_supported_language(self):
        scores = score_languages("x")
        assert set(scores) == set(constants.SUPPORTED_LANGUAGES)

    def test_html_scores_tags_and_names(self):
        scores = score_languages("<div></div>")
        assert scores[constants.LANG_HTML] == 4
        assert scores[constants.LANG_SQL] == 0
