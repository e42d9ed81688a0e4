"""
JSONPath resolution for response bodies.

Paths are parsed with jsonpath-ng. A path that contains a collection
operator (wildcard, slice, union, filter or descendant) resolves to a
list of every match; any other path resolves to the single matched value.
Numeric indexes apply to arrays only: indexing into a string matches nothing.

    MRData.CircuitTable.Circuits[*].circuitId   -> ["albert_park", ...]
    MRData.CircuitTable.Circuits[1].circuitId   -> "americas"
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from jsonpath_ng import parse as parse_jsonpath
from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError
from jsonpath_ng.jsonpath import (
    Child,
    Descendants,
    Fields,
    Index,
    JSONPath,
    Slice,
    Union,
    Where,
)


class PathError(ValueError):
    """Raised for a JSONPath expression that cannot be parsed."""


class PathNotFound(LookupError):
    """Raised when a path does not resolve against the data."""

    def __init__(self, path: str):
        super().__init__(f"Path {path!r} did not match anything")
        self.path = path


@dataclass
class Resolution:
    """The value a path resolved to."""
    path: str
    value: Any
    is_sequence: bool


@lru_cache(maxsize=256)
def compile_path(path: str) -> JSONPath:
    """
    Parse a JSONPath expression.

    Raises:
        PathError: If the expression is invalid
    """
    if not path or not path.strip():
        raise PathError("Path expression is empty")
    try:
        return parse_jsonpath(path)
    except (JsonPathParserError, JsonPathLexerError) as e:
        raise PathError(f"Invalid JSONPath expression {path!r}: {e}") from e
    except Exception as e:
        # jsonpath-ng raises bare Exception for some lexer failures
        raise PathError(f"Failed to parse JSONPath {path!r}: {type(e).__name__}: {e}") from e


def _is_collection_node(node: JSONPath) -> bool:
    if isinstance(node, (Slice, Descendants, Union, Where)):
        return True
    if isinstance(node, Fields):
        return "*" in node.fields or len(node.fields) > 1
    return False


def is_sequence_path(expr: JSONPath) -> bool:
    """True if the expression can select more than one value."""
    if isinstance(expr, Child):
        return is_sequence_path(expr.left) or is_sequence_path(expr.right)
    return _is_collection_node(expr)


def _prefix_before_collection(expr: JSONPath) -> JSONPath | None:
    """The part of the path in front of its first collection operator."""
    if isinstance(expr, Child):
        if is_sequence_path(expr.left):
            return _prefix_before_collection(expr.left)
        if _is_collection_node(expr.right):
            return expr.left
    return None


def _indexes_into_string(match: Any) -> bool:
    """True if any step of a match applied a numeric index to a string."""
    datum = match
    while datum is not None and datum.context is not None:
        if isinstance(datum.path, Index) and isinstance(datum.context.value, str):
            return True
        datum = datum.context
    return False


def resolve(data: Any, path: str) -> Resolution:
    """
    Resolve a path against parsed JSON data.

    A collection path whose matches are empty resolves to an empty list
    as long as the container in front of the collection operator exists.

    Raises:
        PathError: If the expression is invalid
        PathNotFound: If the path does not resolve
    """
    expr = compile_path(path)
    matches = [m for m in expr.find(data) if not _indexes_into_string(m)]

    if is_sequence_path(expr):
        if not matches:
            prefix = _prefix_before_collection(expr)
            if prefix is not None and not prefix.find(data):
                raise PathNotFound(path)
        return Resolution(path, [m.value for m in matches], True)

    if not matches:
        raise PathNotFound(path)
    return Resolution(path, matches[0].value, False)


def extract_value(data: Any, path: str) -> Any:
    """Resolve a path and return only its value."""
    return resolve(data, path).value
