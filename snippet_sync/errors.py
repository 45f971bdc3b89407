"""
Error kinds raised by the extraction and sync stages.

Every error names the marker identifier and, where one is involved, the
offending file. None of them is retried: they point at bad input or at
source annotations a human has to fix.
"""


class SnippetSyncError(Exception):
    kind = "error"

    def __init__(self, identifier: str, message: str, path: str | None = None):
        super().__init__(message)
        self.identifier = identifier
        self.path = path


class ExtractionError(SnippetSyncError):
    """Terminal for the whole request: nothing is reconciled."""

    kind = "extraction_error"


class InvalidIdentifier(ExtractionError):
    kind = "invalid_identifier"

    def __init__(self, identifier: str):
        super().__init__(
            identifier,
            f"Invalid marker {identifier!r}: only decimal digits are allowed",
        )


class DuplicateStartMarker(ExtractionError):
    kind = "duplicate_start_marker"

    def __init__(self, identifier: str, path: str):
        super().__init__(
            identifier,
            f"Marker {identifier}: second 'extract-start {identifier}' before "
            f"the block was closed in {path}; add the missing 'extract-end {identifier}'",
            path,
        )


class OrphanEndMarker(ExtractionError):
    kind = "orphan_end_marker"

    def __init__(self, identifier: str, path: str):
        super().__init__(
            identifier,
            f"Marker {identifier}: 'extract-end {identifier}' without a preceding "
            f"'extract-start {identifier}' in {path}",
            path,
        )


class UnterminatedMarker(ExtractionError):
    kind = "unterminated_marker"

    def __init__(self, identifier: str, path: str):
        super().__init__(
            identifier,
            f"Marker {identifier}: 'extract-start {identifier}' is never closed in {path}; "
            f"add 'extract-end {identifier}' before the end of the file",
            path,
        )


class NotFound(ExtractionError):
    kind = "not_found"

    def __init__(self, identifier: str):
        super().__init__(
            identifier,
            f"No extractable code block found for marker {identifier!r} in the source files",
        )


class Ambiguous(ExtractionError):
    kind = "ambiguous"

    def __init__(self, identifier: str, paths: list[str]):
        super().__init__(
            identifier,
            f"Marker {identifier} is not unique: {len(paths)} blocks found in "
            + ", ".join(paths)
            + "; give each block its own identifier",
            paths[0] if paths else None,
        )
        self.paths = paths


class DocumentError(SnippetSyncError):
    """Scoped to one document; a sync moves on to the next one."""

    kind = "document_error"


class DocumentEditFailed(DocumentError):
    kind = "document_edit_failed"

    def __init__(self, identifier: str, path: str):
        super().__init__(
            identifier,
            f"Failed to update the block for marker {identifier} in {path}",
            path,
        )


class DocumentReadFailed(DocumentError):
    kind = "document_read_failed"

    def __init__(self, identifier: str, path: str, reason: str):
        super().__init__(
            identifier,
            f"Could not read {path} while syncing marker {identifier}: {reason}",
            path,
        )


class DocumentOutsideWorkspace(DocumentError):
    kind = "document_outside_workspace"

    def __init__(self, identifier: str, path: str, root: str):
        super().__init__(
            identifier,
            f"Cannot insert marker {identifier}: {path} is not inside the workspace {root}",
            path,
        )
