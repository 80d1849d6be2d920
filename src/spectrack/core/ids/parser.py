"""
ID parser and validator for hierarchical spec identification.

This module parses spec IDs into SpecIdParts and answers structural
questions about them. The grammar, anchored at both ends:

    E<n>[-F<n>][-T<n>][-S<n>][-X<n>]

Public API:
    - parse_spec_id: Parse string ID into SpecIdParts (raises on invalid)
    - match_spec_id: Like parse_spec_id but returns None on invalid
    - validate_spec_id: Check if string is a valid spec ID
    - get_level: Determine nesting level without keeping the parts
    - get_parent_id: Drop the deepest segment
    - extract_spec_id: Find the first spec ID inside a filename or item name
"""

import re

from spectrack.core.ids.models import SpecIdParts, SpecLevel

_SEGMENTS = r"(E\d+)(?:-(F\d+))?(?:-(T\d+))?(?:-(S\d+))?(?:-(X\d+))?"

_SPEC_ID_REGEX = re.compile(rf"^{_SEGMENTS}$")
# Unanchored variant for filenames ("E02-F01.spec.md") and item names
# ("E02-F01-T01: Title"). The lookarounds keep "E1" from matching inside "E10".
_EMBEDDED_SPEC_ID_REGEX = re.compile(rf"(?<![A-Za-z0-9]){_SEGMENTS}(?![0-9])")


class MalformedIdError(ValueError):
    """Raised when a string does not match the spec ID grammar."""

    def __init__(self, spec_id: str) -> None:
        super().__init__(
            f"Invalid spec ID: {spec_id!r}. "
            "Expected E##, E##-F##, E##-F##-T##, E##-F##-T##-S## "
            "or an -X## extension of a task or subtask"
        )
        self.spec_id = spec_id


def _parts_from_match(match: re.Match[str]) -> SpecIdParts:
    epic, feature, task, subtask, extension = match.groups()
    return SpecIdParts(
        epic=epic,
        feature=feature,
        task=task,
        subtask=subtask,
        extension=extension,
    )


def match_spec_id(spec_id: str) -> SpecIdParts | None:
    """
    Parse a spec ID, returning None when it is not valid.

    Examples:
        >>> match_spec_id("E02-F01").level
        <SpecLevel.FEATURE: 'feature'>
        >>> match_spec_id("E02-F01-") is None
        True
    """
    match = _SPEC_ID_REGEX.match(spec_id)
    if not match:
        return None
    return _parts_from_match(match)


def parse_spec_id(spec_id: str) -> SpecIdParts:
    """
    Parse a spec ID into its structured parts.

    Args:
        spec_id: The ID string to parse

    Returns:
        SpecIdParts with every present segment filled in

    Raises:
        MalformedIdError: If the ID does not match the grammar

    Examples:
        >>> parts = parse_spec_id("E08-F01-T10-S03-X01")
        >>> parts.level
        <SpecLevel.EXTENSION: 'extension'>
        >>> parts.subtask_id
        'E08-F01-T10-S03'

        >>> parse_spec_id("F01")
        Traceback (most recent call last):
            ...
        spectrack.core.ids.parser.MalformedIdError: Invalid spec ID: 'F01'. ...
    """
    parts = match_spec_id(spec_id)
    if parts is None:
        raise MalformedIdError(spec_id)
    return parts


def validate_spec_id(spec_id: str) -> bool:
    """
    Check if a string is a valid spec ID.

    Examples:
        >>> validate_spec_id("E02-F01-T01")
        True
        >>> validate_spec_id("E02-F01-T01 ")
        False
    """
    return _SPEC_ID_REGEX.match(spec_id) is not None


def get_level(spec_id: str) -> SpecLevel | None:
    """
    Determine the nesting level of an ID.

    Returns None for invalid IDs.
    """
    parts = match_spec_id(spec_id)
    return parts.level if parts else None


def get_parent_id(spec_id: str) -> str | None:
    """
    Extract the parent ID by dropping the deepest segment.

    Examples:
        >>> get_parent_id("E02-F01-T01-X01")
        'E02-F01-T01'
        >>> get_parent_id("E02-F01-T01-S02-X01")
        'E02-F01-T01-S02'
        >>> get_parent_id("E02") is None
        True
    """
    parts = match_spec_id(spec_id)
    if parts is None:
        return None
    segments = parts.segments()
    if len(segments) == 1:
        return None
    return "-".join(segments[:-1])


def extract_spec_id(text: str) -> str | None:
    """
    Find the first spec ID embedded in a larger string.

    Used for filenames and remote item names, which carry the ID as a
    prefix followed by a suffix or a title.

    Examples:
        >>> extract_spec_id("E02-F01-T01.spec.md")
        'E02-F01-T01'
        >>> extract_spec_id("E03-F03-T01: Build the thing")
        'E03-F03-T01'
        >>> extract_spec_id("README.md") is None
        True
    """
    match = _EMBEDDED_SPEC_ID_REGEX.search(text)
    if not match:
        return None
    return str(_parts_from_match(match))
