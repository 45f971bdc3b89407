"""
Tests for block rendering, block lookup, replacement and insertion.
"""

import pytest

from snippet_sync.config import Settings
from snippet_sync.errors import DocumentEditFailed, DocumentReadFailed
from snippet_sync.pipeline.assembler import render_block
from snippet_sync.pipeline.extractor import extract_fragment
from snippet_sync.pipeline.loader import FileWorkspace
from snippet_sync.pipeline.reconciler import (
    find_block,
    insert_block,
    insertion_offset,
    reconcile_document,
)
from snippet_sync.state import Fragment

FRAGMENT = Fragment("42", "py", "print(2)", "a.py")

BLOCK = (
    "```py\n"
    "// Extracted from source code\n"
    "/* extract-start 42 */\n"
    "print(2)\n"
    "/* extract-end 42 */\n"
    "```"
)


class _RefusingWorkspace(FileWorkspace):
    def replace_span(self, path, start, end, new_text):
        return False


def test_render_block_layout():
    assert render_block(FRAGMENT) == BLOCK


# =============================================================================
# FIND
# =============================================================================

def test_find_block_requires_matching_type_tag():
    text = (
        "```ts\n/* extract-start 42 */\nold\n/* extract-end 42 */\n```\n"
        "\n"
        "```py\n/* extract-start 42 */\nold\n/* extract-end 42 */\n```\n"
    )
    start, end = find_block(text, "42", "py")

    assert text[start:end].startswith("```py\n")
    assert text[end:] == "\n"
    assert find_block(text, "42", "java") is None


def test_find_block_skips_blocks_for_other_markers():
    text = (
        "```py\n/* extract-start 7 */\nx\n/* extract-end 7 */\n```\n"
        "```py\n/* extract-start 42 */\ny\n/* extract-end 42 */\n```\n"
    )
    start, _ = find_block(text, "42", "py")

    assert start == text.index("```py\n/* extract-start 42")


def test_find_block_first_match_wins():
    block = "```py\n/* extract-start 42 */\nx\n/* extract-end 42 */\n```"
    text = block + "\n\n" + block + "\n"

    assert find_block(text, "42", "py") == (0, len(block))


def test_find_block_does_not_match_longer_identifier():
    text = "```py\n/* extract-start 420 */\nx\n/* extract-end 420 */\n```\n"

    assert find_block(text, "42", "py") is None


# =============================================================================
# RECONCILE
# =============================================================================

def test_replaces_only_the_matching_block(write, workspace):
    doc = write("README.md", (
        "# Title\n"
        "\n"
        "```py\n"
        "// Extracted from source code\n"
        "/* extract-start 42 */old/* extract-end 42 */\n"
        "```\n"
        "\n"
        "```py\n"
        "other = 1\n"
        "```\n"
    ))

    assert reconcile_document(workspace, str(doc), FRAGMENT) is True
    assert doc.read_text(encoding="utf-8") == (
        "# Title\n\n" + BLOCK + "\n\n```py\nother = 1\n```\n"
    )


def test_document_without_block_is_untouched(write, workspace):
    content = "# Notes\n\n```py\nprint('unrelated')\n```\n"
    doc = write("NOTES.md", content)
    before = doc.stat().st_mtime_ns

    assert reconcile_document(workspace, str(doc), FRAGMENT) is False
    assert doc.read_text(encoding="utf-8") == content
    assert doc.stat().st_mtime_ns == before


def test_refused_edit_raises(tmp_path, write):
    doc = write("README.md", "```py\n/* extract-start 42 */\nold\n/* extract-end 42 */\n```\n")
    workspace = _RefusingWorkspace(Settings(root=str(tmp_path)))

    with pytest.raises(DocumentEditFailed) as exc_info:
        reconcile_document(workspace, str(doc), FRAGMENT)
    assert exc_info.value.path == str(doc)


def test_rendered_block_extracts_back_to_fragment(tmp_path, write):
    fragment = Fragment("42", "py", "def f():\n    return 2", "a.py")
    write("README.md", "intro\n\n" + render_block(fragment) + "\n")
    workspace = FileWorkspace(Settings(root=str(tmp_path), source_extensions=("md",)))

    assert extract_fragment("42", workspace).text == fragment.text


# =============================================================================
# INSERT
# =============================================================================

def test_insertion_offset():
    text = "one\ntwo\nthree\n"

    assert insertion_offset(text, 0) == len("one\n")
    assert insertion_offset(text, 1) == len("one\ntwo\n")
    assert insertion_offset(text, 10) == len(text)
    assert insertion_offset("", 0) == 0


def test_insert_below_line(write, workspace):
    doc = write("README.md", "line1\nline2\nline3\n")

    insert_block(workspace, str(doc), FRAGMENT, 0)

    assert doc.read_text(encoding="utf-8") == "line1\n\n" + BLOCK + "\nline2\nline3\n"


def test_insert_past_end_without_trailing_newline(write, workspace):
    doc = write("README.md", "a\nb")

    insert_block(workspace, str(doc), FRAGMENT, 5)

    assert doc.read_text(encoding="utf-8") == "a\nb\n\n" + BLOCK + "\n"


def test_insert_does_not_replace_existing_block(write, workspace):
    doc = write("README.md", BLOCK + "\n")

    insert_block(workspace, str(doc), FRAGMENT, 0)

    assert doc.read_text(encoding="utf-8").count("/* extract-start 42 */") == 2


def test_insert_rejects_negative_line(write, workspace):
    doc = write("README.md", "x\n")

    with pytest.raises(ValueError):
        insert_block(workspace, str(doc), FRAGMENT, -1)


def test_insertion_offset_counts_only_newline_breaks():
    text = "one\x0cstill one same\r\ntwo\rthree\n"

    assert insertion_offset(text, 0) == text.index("two")
    assert insertion_offset(text, 1) == text.index("three")


# =============================================================================
# EDGE CASES
# =============================================================================

def test_fragment_with_backticks_stays_idempotent(write, workspace):
    fragment = Fragment("42", "py", 'FENCE = "```py"\nprint(FENCE)', "a.py")
    doc = write("README.md", (
        "```py\n/* extract-start 42 */\nold\n/* extract-end 42 */\n```\n\ntail\n"
    ))

    reconcile_document(workspace, str(doc), fragment)
    first = doc.read_text(encoding="utf-8")
    reconcile_document(workspace, str(doc), fragment)

    assert doc.read_text(encoding="utf-8") == first
    assert first == render_block(fragment) + "\n\ntail\n"


def test_closing_fence_must_start_a_line():
    text = "```py\n/* extract-start 42 */\nx = '```'\n/* extract-end 42 */\n```\n"

    assert find_block(text, "42", "py") == (0, len(text) - 1)


def test_undecodable_document_raises_read_failure(tmp_path, workspace):
    doc = tmp_path / "README.md"
    doc.write_bytes(b"\xff\xfe bad")

    with pytest.raises(DocumentReadFailed) as exc_info:
        reconcile_document(workspace, str(doc), FRAGMENT)
    assert "not valid UTF-8" in str(exc_info.value)
    assert doc.read_bytes() == b"\xff\xfe bad"
