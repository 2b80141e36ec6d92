"""Tests for CLI output formatting."""

import json

import yaml

from patternkit.cli.formatters import format_output, format_table_output


RESULT = {
    "chain": ["upper", "trim"],
    "results": [
        {"input": "  hi ", "outcome": "completed", "value": "HI", "handled_by": None},
        {"input": "", "outcome": "rejected", "value": None, "handled_by": "reject-empty"},
    ],
}


class TestFormatOutput:

    def test_json_is_default(self):
        assert json.loads(format_output(RESULT, "json")) == RESULT

    def test_unknown_format_falls_back_to_json(self):
        assert json.loads(format_output(RESULT, "xml")) == RESULT

    def test_yaml_keeps_key_order(self):
        output = format_output(RESULT, "yaml")

        assert yaml.safe_load(output) == RESULT
        assert output.startswith("chain:")
        assert not output.endswith("\n")

    def test_yaml_stringifies_unknown_types(self):
        class Token:
            def __str__(self):
                return "token"

        assert yaml.safe_load(format_output({"value": Token()}, "yaml")) == {"value": "token"}


class TestTableOutput:

    def test_rows_rendered_with_columns(self):
        output = format_table_output(RESULT)

        assert "input" in output
        assert "handled_by" in output
        assert "reject-empty" in output
        assert "HI" in output

    def test_missing_values_shown_as_dash(self):
        output = format_table_output({"results": [{"a": None}]})

        assert "-" in output

    def test_empty_rows(self):
        assert format_table_output({"results": []}) == "No results."

    def test_non_row_data_falls_back_to_json(self):
        data = {"registered": ["a"]}

        assert json.loads(format_table_output(data)) == data
