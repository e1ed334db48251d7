"""Tests for the query text normalization"""

from queryview.text import strip_query_text_whitespace, truncate_string


def test_removes_common_indentation():
    text = "\n    SELECT a,\n           b\n    FROM t   \n      WHERE x = 1\n"
    assert strip_query_text_whitespace(text) == (
        "SELECT a,\n       b\nFROM t\n  WHERE x = 1"
    )


def test_blank_lines_do_not_count_for_indentation():
    # The whitespace-only line is shorter than the common indentation
    text = "    SELECT 1\n  \n    FROM t"
    assert strip_query_text_whitespace(text) == "SELECT 1\nFROM t"


def test_unindented_line_keeps_everything():
    text = "SELECT 1\n    FROM t  \t"
    assert strip_query_text_whitespace(text) == "SELECT 1\n    FROM t"


def test_tabs_are_whitespace():
    assert strip_query_text_whitespace("\tSELECT 1\n\t\tFROM t") == "SELECT 1\n\tFROM t"


def test_only_whitespace():
    assert strip_query_text_whitespace("   \n\t\n") == ""
    assert strip_query_text_whitespace("") == ""


def test_truncates_after_normalization():
    text = "        " + "x" * 20
    assert strip_query_text_whitespace(text, max_length=10) == "x" * 10 + "..."
    assert strip_query_text_whitespace(text, max_length=20) == "x" * 20


def test_default_maximum_length():
    result = strip_query_text_whitespace("a" * 400)
    assert result == "a" * 300 + "..."


def test_truncate_string():
    assert truncate_string("abcdef", 3) == "abc..."
    assert truncate_string("abc", 3) == "abc"
    assert truncate_string("", 3) == ""
