"""
Suite loading.

Reads suite YAML from a file or a string, validates it and parses it into
a Suite. Problems are reported through the ValidationResult, never raised.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .models import Suite
from .parser import SchemaParser
from .validation import SchemaValidator, ValidationResult


def load_suite(path: str | Path) -> tuple[Suite | None, ValidationResult]:
    """
    Load a suite file.

    Returns:
        (suite, result); suite is None whenever result has errors

    Example:
        suite, result = load_suite("suites/ergast.yaml")
        if not result.is_valid:
            print(result)
            raise SystemExit(1)
    """
    path = Path(path)

    if not path.is_file():
        return None, _single_error(
            str(path), "File not found", suggestion="Check the file path is correct"
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return None, _single_error(str(path), f"Cannot read file: {e}")

    return _load_text(str(path), text)


def validate_suite_yaml(yaml_string: str) -> tuple[Suite | None, ValidationResult]:
    """Same as load_suite() for YAML held in a string."""
    return _load_text("yaml", yaml_string)


def _load_text(source: str, text: str) -> tuple[Suite | None, ValidationResult]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return None, _single_error(
            source,
            f"Invalid YAML syntax: {e}",
            suggestion="Check indentation and that every key is followed by ':'",
        )
    return _validate_and_parse(source, data)


def _validate_and_parse(source: str, data: Any) -> tuple[Suite | None, ValidationResult]:
    if not isinstance(data, dict):
        return None, _single_error(
            source,
            "Content must be a YAML object (not a list or scalar)",
            value=type(data).__name__,
        )

    result = SchemaValidator(data).validate()
    if not result.is_valid:
        return None, result
    return SchemaParser(data).parse(), result


def _single_error(path: str, message: str, value: Any = None, suggestion: str | None = None) -> ValidationResult:
    result = ValidationResult()
    result.add_error(path, message, value=value, suggestion=suggestion)
    return result
