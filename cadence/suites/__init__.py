"""
Test Suites

This package loads, validates and runs YAML suites: named cases of one
or more requests with their assertions and extractions.

Usage:
    from cadence.suites import load_suite, SuiteExecutor

    suite, result = load_suite("suites/ergast.yaml")
    if not result.is_valid:
        print(result)

    report = asyncio.run(SuiteExecutor(suite).run())
"""

# Public API
from .loader import load_suite, validate_suite_yaml

# Models (for type hints and isinstance checks)
from .models import Case, Defaults, Step, Suite

# Parsing
from .parser import SchemaParser, parse_assertion

# Validation (for custom validation if needed)
from .validation import SchemaValidator, ValidationError, ValidationResult

# Execution
from .executor import SuiteExecutor, interpolate_value, join_url

__all__ = [
    # Loader functions
    "load_suite",
    "validate_suite_yaml",
    # Models
    "Suite",
    "Case",
    "Step",
    "Defaults",
    # Parsing
    "SchemaParser",
    "parse_assertion",
    # Validation
    "ValidationResult",
    "ValidationError",
    "SchemaValidator",
    # Execution
    "SuiteExecutor",
    "interpolate_value",
    "join_url",
]
