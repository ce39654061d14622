"""
Validation of submitted input values.

`validate_input` checks a value against the InputRequirement it answers: type
per the requirement's type tag, numeric and rating bounds, option membership,
ISO dates and date bounds, file extensions, and filesystem existence for file
and path inputs. Problems are returned as issues with stable upper-case codes;
nothing is raised.
"""

import os
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from prompttree.core.models import InputRequirement, ValidationIssue, ValidationResult

INVALID_TYPE = "INVALID_TYPE"
BELOW_MIN = "BELOW_MIN"
EXCEEDS_MAX = "EXCEEDS_MAX"
NOT_INTEGER = "NOT_INTEGER"
INVALID_OPTION = "INVALID_OPTION"
INVALID_DATE = "INVALID_DATE"
DATE_TOO_EARLY = "DATE_TOO_EARLY"
DATE_TOO_LATE = "DATE_TOO_LATE"
INVALID_EXTENSION = "INVALID_EXTENSION"
FILE_NOT_FOUND = "FILE_NOT_FOUND"
PATH_NOT_FOUND = "PATH_NOT_FOUND"
NOT_A_DIRECTORY = "NOT_A_DIRECTORY"
REQUIRED = "REQUIRED"
FILESYSTEM_CHECK_SKIPPED = "FILESYSTEM_CHECK_SKIPPED"


class _Collector:
    """Accumulates issues for one requirement."""

    def __init__(self, requirement: InputRequirement, check_filesystem: bool):
        self.requirement = requirement
        self.check_filesystem = check_filesystem
        self.errors: list[ValidationIssue] = []
        self.warnings: list[ValidationIssue] = []

    def error(self, code: str, message: str) -> None:
        self.errors.append(ValidationIssue(field=self.requirement.name, message=message, code=code))

    def warn(self, code: str, message: str) -> None:
        self.warnings.append(ValidationIssue(field=self.requirement.name, message=message, code=code))


def _type_name(value: Any) -> str:
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_bounds(issues: _Collector, value: float, subject: str) -> None:
    requirement = issues.requirement
    if requirement.min is not None and value < requirement.min:
        issues.error(BELOW_MIN, f"{subject} {value} is below minimum {requirement.min:g}")
    if requirement.max is not None and value > requirement.max:
        issues.error(EXCEEDS_MAX, f"{subject} {value} exceeds maximum {requirement.max:g}")


def _check_string(issues: _Collector, value: Any) -> None:
    if not isinstance(value, str):
        issues.error(INVALID_TYPE, f"Expected a string, got {_type_name(value)}")


def _check_number(issues: _Collector, value: Any) -> None:
    if not _is_number(value):
        issues.error(INVALID_TYPE, f"Expected a number, got {_type_name(value)}")
        return
    _check_bounds(issues, value, "Value")


def _check_boolean(issues: _Collector, value: Any) -> None:
    if not isinstance(value, bool):
        issues.error(INVALID_TYPE, f"Expected a boolean, got {_type_name(value)}")


def _valid_option_values(issues: _Collector) -> list[str]:
    return [option.value for option in issues.requirement.options]


def _check_select(issues: _Collector, value: Any) -> None:
    valid = _valid_option_values(issues)
    if valid and value not in valid:
        issues.error(INVALID_OPTION, f'Invalid option "{value}". Valid options: {", ".join(valid)}')


def _check_multiselect(issues: _Collector, value: Any) -> None:
    if not isinstance(value, (list, tuple)):
        issues.error(INVALID_TYPE, f"Expected a list for multiselect, got {_type_name(value)}")
        return
    valid = _valid_option_values(issues)
    if valid:
        for item in value:
            if item not in valid:
                issues.error(
                    INVALID_OPTION, f'Invalid option "{item}". Valid options: {", ".join(valid)}'
                )
    _check_bounds_count(issues, len(value))


def _check_bounds_count(issues: _Collector, count: int) -> None:
    requirement = issues.requirement
    if requirement.min is not None and count < requirement.min:
        issues.error(BELOW_MIN, f"Select at least {requirement.min:g} option(s), got {count}")
    if requirement.max is not None and count > requirement.max:
        issues.error(EXCEEDS_MAX, f"Select at most {requirement.max:g} option(s), got {count}")


def _check_rating(issues: _Collector, value: Any) -> None:
    if not _is_number(value):
        issues.error(INVALID_TYPE, f"Expected a number, got {_type_name(value)}")
        return
    if isinstance(value, float) and not value.is_integer():
        issues.error(NOT_INTEGER, f"Rating must be a whole number, got {value}")
    _check_bounds(issues, value, "Rating")


def _parse_date(text: str) -> date | None:
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _bound_date(bound: str) -> date | None:
    if bound == "today":
        return date.today()
    return _parse_date(bound)


def _check_date(issues: _Collector, value: Any) -> None:
    if not isinstance(value, str):
        issues.error(INVALID_TYPE, f"Expected a date string, got {_type_name(value)}")
        return
    parsed = _parse_date(value)
    if parsed is None:
        issues.error(INVALID_DATE, f'Invalid date format: "{value}"')
        return

    requirement = issues.requirement
    if requirement.min_date:
        earliest = _bound_date(requirement.min_date)
        if earliest is not None and parsed < earliest:
            issues.error(DATE_TOO_EARLY, f"Date must be on or after {requirement.min_date}")
    if requirement.max_date:
        latest = _bound_date(requirement.max_date)
        if latest is not None and parsed > latest:
            issues.error(DATE_TOO_LATE, f"Date must be on or before {requirement.max_date}")


def _extension(path: str) -> str:
    index = path.rfind(".")
    return path[index:] if index >= 0 else ""


def _check_file(issues: _Collector, value: Any) -> None:
    requirement = issues.requirement
    if requirement.multiple:
        if not isinstance(value, (list, tuple)):
            issues.error(INVALID_TYPE, f"Expected a list of file paths, got {_type_name(value)}")
            return
        paths = [item for item in value if isinstance(item, str)]
    else:
        if not isinstance(value, str):
            issues.error(INVALID_TYPE, f"Expected a file path string, got {_type_name(value)}")
            return
        paths = [value]

    if requirement.extensions:
        allowed = ", ".join(requirement.extensions)
        for path in paths:
            if _extension(path) not in requirement.extensions:
                issues.error(
                    INVALID_EXTENSION,
                    f'File "{path}" has invalid extension "{_extension(path)}". Allowed: {allowed}',
                )

    if requirement.must_exist and paths:
        if not issues.check_filesystem:
            issues.warn(
                FILESYSTEM_CHECK_SKIPPED,
                f"File existence not checked for: {', '.join(paths)}",
            )
            return
        for path in paths:
            if not os.path.exists(path):
                issues.error(FILE_NOT_FOUND, f'File does not exist: "{path}"')


def _check_path(issues: _Collector, value: Any) -> None:
    if not isinstance(value, str):
        issues.error(INVALID_TYPE, f"Expected a path string, got {_type_name(value)}")
        return

    requirement = issues.requirement
    if not (requirement.must_exist or requirement.must_be_directory):
        return
    if not issues.check_filesystem:
        issues.warn(FILESYSTEM_CHECK_SKIPPED, f"Path validation skipped for: {value}")
        return

    if not os.path.exists(value):
        # A missing path only fails when it has to exist
        if requirement.must_exist:
            issues.error(PATH_NOT_FOUND, f'Path does not exist: "{value}"')
        return
    if requirement.must_be_directory and not os.path.isdir(value):
        issues.error(NOT_A_DIRECTORY, f'Path is not a directory: "{value}"')


_CHECKS: dict[str, Callable[[_Collector, Any], None]] = {
    "string": _check_string,
    "secret": _check_string,
    "number": _check_number,
    "boolean": _check_boolean,
    "select": _check_select,
    "multiselect": _check_multiselect,
    "rating": _check_rating,
    "date": _check_date,
    "file": _check_file,
    "path": _check_path,
}


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def validate_input(
    requirement: InputRequirement, value: Any, *, check_filesystem: bool = True
) -> ValidationResult:
    """
    Validate a value submitted for an input requirement.

    A missing value (None) is only checked for requiredness; an empty string
    is type-checked and then fails a required input.

    Params:
        requirement: Requirement the value answers
        value: Submitted value
        check_filesystem: Check file and path existence; when False the checks
            are skipped and reported as warnings

    Returns:
        ValidationResult; `valid` is True iff there are no errors
    """
    issues = _Collector(requirement, check_filesystem)

    if value is not None:
        check = _CHECKS.get(requirement.type)
        if check is not None:
            check(issues, value)

    if requirement.required and is_empty(value):
        issues.error(REQUIRED, f"{requirement.name} is required")

    return ValidationResult(valid=not issues.errors, errors=issues.errors, warnings=issues.warnings)
