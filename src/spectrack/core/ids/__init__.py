"""
ID system for hierarchical spec identification.

This package provides the spec ID grammar and its typed model:
epic → feature → task → subtask → extension.

Public API:
    Models:
        - SpecIdParts: Structured breakdown of a spec ID (E02-F01-T01)
        - SpecLevel: Nesting level enum

    Parser functions:
        - parse_spec_id: Parse string ID into SpecIdParts
        - match_spec_id: Parse, returning None for invalid IDs
        - validate_spec_id: Check if string is valid ID format
        - get_level: Determine level without full parsing
        - get_parent_id: Extract parent ID from hierarchical ID
        - extract_spec_id: Find a spec ID inside a filename or item name
        - MalformedIdError: Exception for grammar failures

Example:
    >>> from spectrack.core.ids import parse_spec_id
    >>> parts = parse_spec_id("E02-F01-T01")
    >>> parts.level.value
    'task'
    >>> parts.feature_id
    'E02-F01'
"""

from spectrack.core.ids.models import SpecIdParts, SpecLevel
from spectrack.core.ids.parser import (
    MalformedIdError,
    extract_spec_id,
    get_level,
    get_parent_id,
    match_spec_id,
    parse_spec_id,
    validate_spec_id,
)

__all__ = [
    # Models
    "SpecIdParts",
    "SpecLevel",
    # Parser functions
    "parse_spec_id",
    "match_spec_id",
    "validate_spec_id",
    "get_level",
    "get_parent_id",
    "extract_spec_id",
    "MalformedIdError",
]
