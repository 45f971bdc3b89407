"""
Document reconciliation: rewrite the fenced block that mirrors a fragment.

Only fenced regions whose opening fence carries the fragment's type tag are
candidates; the first one whose body holds the start marker is replaced as
a whole. Several matching blocks in one document are not an error, the
rest are left alone. A closing fence must start its own line, so backticks
inside a fragment do not end the block early.
"""

import logging
import re

from snippet_sync.errors import DocumentEditFailed, DocumentReadFailed
from snippet_sync.pipeline.assembler import FENCE, render_block
from snippet_sync.pipeline.markers import start_pattern
from snippet_sync.state import Fragment

logger = logging.getLogger(__name__)

# \r\n, \r and \n only, as editors count lines
_LINE_RE = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+$")


def _fenced_block_re(type_tag: str) -> re.Pattern[str]:
    fence = re.escape(FENCE)
    return re.compile(
        rf"{fence}{re.escape(type_tag)}\r?\n(.*?)^{fence}",
        re.DOTALL | re.MULTILINE,
    )


def find_block(text: str, identifier: str, type_tag: str) -> tuple[int, int] | None:
    """Source span of the first fenced block for identifier, or None."""
    marker_re = start_pattern(identifier)
    for match in _fenced_block_re(type_tag).finditer(text):
        if marker_re.search(match.group(1)):
            return match.start(), match.end()
    return None


def _read(workspace, path: str, identifier: str) -> str:
    try:
        return workspace.read_document_text(path)
    except UnicodeDecodeError:
        raise DocumentReadFailed(identifier, path, "not valid UTF-8")
    except OSError as exc:
        raise DocumentReadFailed(identifier, path, exc.strerror or str(exc))


def reconcile_document(workspace, path: str, fragment: Fragment) -> bool:
    """Replace the matching block in one document.

    Returns False, leaving the document untouched, when it has no block for
    the fragment. Raises DocumentReadFailed or DocumentEditFailed when the
    document cannot be read or the host refuses the edit.
    """
    text = _read(workspace, path, fragment.identifier)
    span = find_block(text, fragment.identifier, fragment.type_tag)
    if span is None:
        logger.debug("No code block with marker %s found in %s", fragment.identifier, path)
        return False

    start, end = span
    if not workspace.replace_span(path, start, end, render_block(fragment)):
        raise DocumentEditFailed(fragment.identifier, path)

    logger.info("Code block with marker %s updated in %s", fragment.identifier, path)
    return True


def insertion_offset(text: str, line: int) -> int:
    """Offset of the start of the line after `line` (0-based), clamped to the end."""
    lines = _LINE_RE.findall(text)
    return sum(len(ln) for ln in lines[:line + 1])


def insert_block(workspace, path: str, fragment: Fragment, line: int) -> None:
    """Insert a new block below `line` without looking for an existing one."""
    if line < 0:
        raise ValueError(f"line must be >= 0, got {line}")

    text = _read(workspace, path, fragment.identifier)
    offset = insertion_offset(text, line)

    block = "\n" + render_block(fragment) + "\n"
    if offset == len(text) and text and not text.endswith(("\n", "\r")):
        block = "\n" + block

    if not workspace.replace_span(path, offset, offset, block):
        raise DocumentEditFailed(fragment.identifier, path)
    logger.info("Inserted block for marker %s into %s after line %d",
                fragment.identifier, path, line + 1)
