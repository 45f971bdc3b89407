"""
File discovery and text I/O over a directory tree.

Source files and documentation files are picked by extension allowlist;
any path running through an excluded directory name (node_modules, ...)
is skipped. Nothing is cached between requests except the snapshot of
each document last read, which guards span replacement.
"""

import logging
from pathlib import Path

from snippet_sync.config import Settings

logger = logging.getLogger(__name__)


class FileWorkspace:
    def __init__(self, settings: Settings):
        root = Path(settings.root)
        if not root.is_dir():
            raise FileNotFoundError(f"Workspace root not found: {settings.root}")
        self.root = root.resolve()
        self.source_extensions = {ext.lower() for ext in settings.source_extensions}
        self.doc_extensions = {ext.lower() for ext in settings.doc_extensions}
        self.exclude_dirs = set(settings.exclude_dirs)
        self._snapshots: dict[str, str] = {}

    def _is_excluded(self, path: Path) -> bool:
        parts = path.relative_to(self.root).parts[:-1]
        return any(part in self.exclude_dirs for part in parts)

    def _list(self, extensions: set[str]) -> list[str]:
        found = []
        for path in sorted(self.root.rglob("*")):
            if not path.is_file():
                continue
            if path.suffix[1:].lower() not in extensions:
                continue
            if self._is_excluded(path):
                continue
            found.append(str(path))
        return found

    def list_candidate_files(self) -> list[str]:
        files = self._list(self.source_extensions)
        logger.debug("Source files found: %d under %s", len(files), self.root)
        return files

    def list_documents(self) -> list[str]:
        docs = self._list(self.doc_extensions)
        logger.debug("Documentation files found: %d under %s", len(docs), self.root)
        return docs

    def resolve_document(self, document: str) -> Path | None:
        """Absolute path for document, relative ones taken from the root.

        None when the result lies outside the root.
        """
        path = Path(document)
        if not path.is_absolute():
            path = self.root / path
        path = path.resolve()
        try:
            path.relative_to(self.root)
        except ValueError:
            return None
        return path

    def read_text(self, path: str) -> str:
        # newline="" keeps \r\n intact so offsets match the bytes on disk
        with open(path, encoding="utf-8", newline="") as fh:
            return fh.read()

    def read_document_text(self, path: str) -> str:
        text = self.read_text(path)
        self._snapshots[path] = text
        return text

    def replace_span(self, path: str, start: int, end: int, new_text: str) -> bool:
        """Splice new_text over [start, end) of the snapshot last read for path.

        Returns False when the file changed since that snapshot, the span is
        out of range, or the write fails.
        """
        snapshot = self._snapshots.get(path)
        if snapshot is None:
            logger.error("No snapshot for %s; read it before editing", path)
            return False
        if not 0 <= start <= end <= len(snapshot):
            logger.error("Span %d-%d out of range for %s", start, end, path)
            return False

        try:
            current = self.read_text(path)
            if current != snapshot:
                logger.error("%s changed on disk since it was read", path)
                return False
            updated = snapshot[:start] + new_text + snapshot[end:]
            with open(path, "w", encoding="utf-8", newline="") as fh:
                fh.write(updated)
        except OSError as exc:
            logger.error("Write failed for %s: %s", path, exc)
            return False

        self._snapshots[path] = updated
        return True
