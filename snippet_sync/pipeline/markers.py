"""
Marker token patterns.

Markers are plain text inside block comments, matched case-sensitively:

    /* extract-start 42 */ ... /* extract-end 42 */

No parsing of the host language is attempted.
"""

import re

from snippet_sync.errors import InvalidIdentifier

_IDENTIFIER_RE = re.compile(r"^\d+$")
_ANY_START_RE = re.compile(r"/\*\s*extract-start\s+(\d+)\s*\*/")


def validate_identifier(identifier: str) -> str:
    # fullmatch: "$" alone would accept a trailing newline
    if not identifier or not _IDENTIFIER_RE.fullmatch(identifier):
        raise InvalidIdentifier(identifier)
    return identifier


def start_pattern(identifier: str) -> re.Pattern[str]:
    return re.compile(rf"/\*\s*extract-start\s+{re.escape(identifier)}\s*\*/")


def end_pattern(identifier: str) -> re.Pattern[str]:
    return re.compile(rf"/\*\s*extract-end\s+{re.escape(identifier)}\s*\*/")


def start_token(identifier: str) -> str:
    return f"/* extract-start {identifier} */"


def end_token(identifier: str) -> str:
    return f"/* extract-end {identifier} */"


def find_identifiers(text: str) -> list[str]:
    """Identifiers of every start token in text, in order, repeats included."""
    return [m.group(1) for m in _ANY_START_RE.finditer(text)]
