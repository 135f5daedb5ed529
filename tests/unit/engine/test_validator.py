"""Tests for resolution validation."""

from patchmerge.engine.validator import (
    carried_ratio,
    delimiter_issues,
    validate,
)


def test_missing_brace_is_an_issue():
    result = validate("function f() { return 1; ", "", "")

    assert not result.is_valid
    assert any("braces" in issue for issue in result.issues)


def test_balanced_code_is_valid():
    code = "function f() {\n  return [1, 2];\n}"

    result = validate(code, code, code)

    assert result.is_valid
    assert result.issues == ()
    assert result.warnings == ()
    assert result.preservation_ratio == 1.0
    assert result.integration_ratio == 1.0


def test_empty_content_is_invalid():
    result = validate("  \n", "a", "b")

    assert not result.is_valid
    assert result.issues == ("Resolved content is empty",)


def test_content_warnings_do_not_invalidate():
    ancestor = "a = 1\nb = 2\nc = 3\nd = 4"
    incoming = "a = 1\nb = 2\nc = 3\nd = 4\ne = 5"

    result = validate("something else", ancestor, incoming)

    assert result.is_valid
    assert result.preservation_ratio == 0.0
    assert result.integration_ratio == 0.0
    assert any(
        w.startswith("Original content may have been lost")
        for w in result.warnings
    )
    assert any(
        w.startswith("Incoming changes may not be integrated")
        for w in result.warnings
    )
    assert any("non-blank lines" in w for w in result.warnings)
    assert result.suggestions


def test_validation_is_idempotent():
    args = ("f(a, b)\n{\n", "f(a)\n{\n}", "f(a, b)\n{\n}")

    assert validate(*args) == validate(*args)


def test_lines_are_matched_as_trimmed_substrings():
    resolved = ["    total = a + b  # sum"]

    assert carried_ratio("total = a + b", resolved) == 1.0
    assert carried_ratio("\n\n", resolved) == 1.0


def test_delimiter_issue_wording():
    assert delimiter_issues("f((x)") == [
        "Unbalanced parentheses: 2 '(' vs 1 ')'"
    ]
    assert delimiter_issues("[]{}()") == []
