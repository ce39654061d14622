"""
Tests for input value validation.

This module tests the per-type checks applied to submitted values and the
codes they report.
"""

from datetime import date, timedelta

import pytest

from prompttree.core.models import InputRequirement, SelectOption
from prompttree.execution import validate_input


def requirement(**fields):
    fields.setdefault("name", "field")
    fields.setdefault("label", "Field")
    return InputRequirement(**fields)


def codes(result):
    return [issue.code for issue in result.errors]


class TestBasicTypes:
    """Tests for string, number and boolean inputs."""

    def test_valid_string(self):
        """Test a string passes a string requirement."""
        result = validate_input(requirement(), "text")
        assert result.valid
        assert result.errors == []

    def test_wrong_type(self):
        """Test mistyped values report INVALID_TYPE."""
        assert codes(validate_input(requirement(), 5)) == ["INVALID_TYPE"]
        assert codes(validate_input(requirement(type="number"), "5")) == ["INVALID_TYPE"]
        assert codes(validate_input(requirement(type="boolean"), "yes")) == ["INVALID_TYPE"]
        assert codes(validate_input(requirement(type="secret"), 1)) == ["INVALID_TYPE"]

    def test_bool_is_not_a_number(self):
        """Test booleans are rejected for numeric inputs."""
        assert codes(validate_input(requirement(type="number"), True)) == ["INVALID_TYPE"]

    def test_number_bounds(self):
        """Test min and max on numbers."""
        bounded = requirement(type="number", min=1, max=10)
        assert codes(validate_input(bounded, 0)) == ["BELOW_MIN"]
        assert codes(validate_input(bounded, 11)) == ["EXCEEDS_MAX"]
        assert validate_input(bounded, 10).valid

    def test_required_empty(self):
        """Test required inputs reject None and empty strings."""
        required = requirement(required=True)
        assert codes(validate_input(required, "")) == ["REQUIRED"]
        assert codes(validate_input(required, None)) == ["REQUIRED"]

    def test_optional_none(self):
        """Test optional inputs accept None."""
        assert validate_input(requirement(), None).valid


class TestChoices:
    """Tests for select, multiselect and rating inputs."""

    options = [SelectOption(value="a", label="A"), SelectOption(value="b", label="B")]

    def test_select_membership(self):
        """Test select values must be one of the options."""
        select = requirement(type="select", options=self.options)
        assert validate_input(select, "a").valid
        result = validate_input(select, "z")
        assert codes(result) == ["INVALID_OPTION"]
        assert "Valid options: a, b" in result.errors[0].message

    def test_select_without_options_accepts_anything(self):
        """Test selects without declared options do not check membership."""
        assert validate_input(requirement(type="select"), "z").valid

    def test_multiselect(self):
        """Test every multiselect value is checked and lists are required."""
        multi = requirement(type="multiselect", options=self.options)
        assert validate_input(multi, ["a", "b"]).valid
        assert codes(validate_input(multi, ["a", "x", "y"])) == ["INVALID_OPTION", "INVALID_OPTION"]
        assert codes(validate_input(multi, "a")) == ["INVALID_TYPE"]

    def test_multiselect_count_bounds(self):
        """Test min and max bound the number of selected options."""
        multi = requirement(type="multiselect", options=self.options, min=2)
        assert codes(validate_input(multi, ["a"])) == ["BELOW_MIN"]

    def test_rating(self):
        """Test ratings must be whole numbers within bounds."""
        rating = requirement(type="rating", min=1, max=5)
        assert validate_input(rating, 3).valid
        assert codes(validate_input(rating, 3.5)) == ["NOT_INTEGER"]
        assert codes(validate_input(rating, 6)) == ["EXCEEDS_MAX"]
        assert codes(validate_input(rating, "3")) == ["INVALID_TYPE"]


class TestDates:
    """Tests for date inputs."""

    def test_iso_date(self):
        """Test ISO dates are accepted and other text rejected."""
        assert validate_input(requirement(type="date"), "2024-03-01").valid
        assert codes(validate_input(requirement(type="date"), "March 1st")) == ["INVALID_DATE"]
        assert codes(validate_input(requirement(type="date"), 20240301)) == ["INVALID_TYPE"]

    def test_date_bounds(self):
        """Test min_date and max_date."""
        bounded = requirement(type="date", min_date="2024-01-01", max_date="2024-12-31")
        assert codes(validate_input(bounded, "2023-12-31")) == ["DATE_TOO_EARLY"]
        assert codes(validate_input(bounded, "2025-01-01")) == ["DATE_TOO_LATE"]
        assert validate_input(bounded, "2024-12-31").valid

    def test_today_bound(self):
        """Test "today" as a bound."""
        future_only = requirement(type="date", min_date="today")
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        assert codes(validate_input(future_only, yesterday)) == ["DATE_TOO_EARLY"]
        assert validate_input(future_only, date.today().isoformat()).valid


class TestFilesystem:
    """Tests for file and path inputs."""

    def test_extension(self):
        """Test file extensions are matched from the last dot."""
        python_only = requirement(type="file", extensions=[".py"])
        assert validate_input(python_only, "src/app.test.py").valid
        assert codes(validate_input(python_only, "README.md")) == ["INVALID_EXTENSION"]
        assert codes(validate_input(python_only, "Makefile")) == ["INVALID_EXTENSION"]

    def test_multiple_files(self):
        """Test multiple file inputs expect a list."""
        many = requirement(type="file", multiple=True, extensions=[".md"])
        assert codes(validate_input(many, "a.md")) == ["INVALID_TYPE"]
        assert codes(validate_input(many, ["a.md", "b.txt"])) == ["INVALID_EXTENSION"]

    def test_file_must_exist(self, tmp_path):
        """Test file existence is checked on disk."""
        existing = tmp_path / "notes.md"
        existing.write_text("notes")
        must_exist = requirement(type="file", must_exist=True)
        assert validate_input(must_exist, str(existing)).valid
        assert codes(validate_input(must_exist, str(tmp_path / "missing.md"))) == ["FILE_NOT_FOUND"]

    def test_path_checks(self, tmp_path):
        """Test path existence and directory checks."""
        existing = tmp_path / "notes.md"
        existing.write_text("notes")
        directory = requirement(type="path", must_exist=True, must_be_directory=True)
        assert validate_input(directory, str(tmp_path)).valid
        assert codes(validate_input(directory, str(existing))) == ["NOT_A_DIRECTORY"]
        assert codes(validate_input(directory, str(tmp_path / "nope"))) == ["PATH_NOT_FOUND"]

    def test_directory_check_without_must_exist(self, tmp_path):
        """Test a missing path passes when it only has to be a directory if present."""
        directory = requirement(type="path", must_be_directory=True)
        assert validate_input(directory, str(tmp_path / "later")).valid

    @pytest.mark.parametrize("input_type", ["file", "path"])
    def test_filesystem_checks_disabled(self, input_type):
        """Test disabled filesystem checks produce warnings instead of errors."""
        must_exist = requirement(type=input_type, must_exist=True)
        result = validate_input(must_exist, "/definitely/not/here", check_filesystem=False)
        assert result.valid
        assert [issue.code for issue in result.warnings] == ["FILESYSTEM_CHECK_SKIPPED"]
