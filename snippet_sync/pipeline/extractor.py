"""
Fragment extraction: locate the one marker pair for an identifier.

Each candidate file is walked once, line by line, with a collecting flag.
Marker tokens on a line are handled in position order, so text sharing a
line with a marker is kept and a marker on its own line contributes only
whitespace, which the final trim removes.

Uniqueness is all-or-nothing: one fragment across every file is success,
none is NotFound, more than one is Ambiguous.
"""

import logging
from pathlib import Path

from snippet_sync.errors import (
    Ambiguous,
    DuplicateStartMarker,
    NotFound,
    OrphanEndMarker,
    UnterminatedMarker,
)
from snippet_sync.pipeline.markers import (
    end_pattern,
    find_identifiers,
    start_pattern,
    validate_identifier,
)
from snippet_sync.state import Fragment

logger = logging.getLogger(__name__)


def _type_tag(path: str) -> str:
    return Path(path).suffix[1:]


def _scan_file(identifier: str, path: str, text: str) -> list[str]:
    """Return the trimmed interior of every marker pair in one file."""
    start_re = start_pattern(identifier)
    end_re = end_pattern(identifier)

    found: list[str] = []
    collecting = False
    collected: list[str] = []

    for line in text.splitlines(keepends=True):
        tokens = sorted(
            [(m.start(), m.end(), True) for m in start_re.finditer(line)]
            + [(m.start(), m.end(), False) for m in end_re.finditer(line)]
        )
        pos = 0
        for tok_start, tok_end, is_start in tokens:
            if is_start:
                if collecting:
                    raise DuplicateStartMarker(identifier, path)
                collecting = True
                collected = []
            else:
                if not collecting:
                    raise OrphanEndMarker(identifier, path)
                collected.append(line[pos:tok_start])
                found.append("".join(collected).strip())
                collecting = False
            pos = tok_end

        if collecting:
            collected.append(line[pos:])

    if collecting:
        raise UnterminatedMarker(identifier, path)
    return found


def _read_source(workspace, path: str) -> str | None:
    try:
        return workspace.read_text(path)
    except UnicodeDecodeError:
        logger.warning("Skipping %s: not valid UTF-8", path)
        return None


def extract_fragment(identifier: str, workspace) -> Fragment:
    """Scan every candidate file for the marker pair named by identifier."""
    validate_identifier(identifier)

    candidates: list[Fragment] = []
    for path in workspace.list_candidate_files():
        text = _read_source(workspace, path)
        if text is None:
            continue
        logger.debug("Checking file: %s", path)
        for fragment_text in _scan_file(identifier, path, text):
            logger.debug("Found block for marker %s in %s", identifier, path)
            candidates.append(Fragment(identifier, _type_tag(path), fragment_text, path))

    if not candidates:
        raise NotFound(identifier)
    if len(candidates) > 1:
        raise Ambiguous(identifier, [c.path for c in candidates])

    fragment = candidates[0]
    logger.info("Extracted marker %s from %s (%d chars)",
                identifier, fragment.path, len(fragment.text))
    return fragment


def discover_identifiers(workspace) -> list[str]:
    """Every identifier with a start token in the source files, first-seen order."""
    seen: dict[str, None] = {}
    for path in workspace.list_candidate_files():
        text = _read_source(workspace, path)
        if text is None:
            continue
        for identifier in find_identifiers(text):
            seen.setdefault(identifier, None)
    logger.info("Discovered %d markers", len(seen))
    return list(seen)
