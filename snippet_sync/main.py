"""CLI entry point for syncing source code fragments into documentation."""

import argparse
import dataclasses
import json
import logging
import sys
import time

from dotenv import load_dotenv

load_dotenv()

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from snippet_sync.config import LOG_LEVELS, load_settings
from snippet_sync.errors import (
    DocumentError,
    DocumentOutsideWorkspace,
    ExtractionError,
    SnippetSyncError,
)
from snippet_sync.pipeline.extractor import discover_identifiers, extract_fragment
from snippet_sync.pipeline.loader import FileWorkspace
from snippet_sync.pipeline.markers import validate_identifier
from snippet_sync.pipeline.reconciler import insert_block, reconcile_document
from snippet_sync.state import DocumentOutcome, Fragment, SyncReport

logger = logging.getLogger(__name__)


def run_extract(identifier: str, workspace) -> Fragment:
    """Extract one fragment. Never touches a document."""
    return extract_fragment(identifier, workspace)


def run_sync(identifier: str, workspace) -> SyncReport:
    """Extract the fragment, then update its block in every document.

    Extraction errors abort before any document is read. A document that
    cannot be read or edited is recorded as failed and the loop moves on.
    """
    fragment = extract_fragment(identifier, workspace)

    outcomes: list[DocumentOutcome] = []
    updated = 0
    for path in workspace.list_documents():
        try:
            changed = reconcile_document(workspace, path, fragment)
        except DocumentError as exc:
            logger.error(str(exc))
            outcomes.append({"path": path, "status": "failed", "message": str(exc)})
            continue
        if changed:
            updated += 1
            outcomes.append({"path": path, "status": "updated", "message": ""})
        else:
            outcomes.append({"path": path, "status": "no_match", "message": ""})

    logger.info("Marker %s: %d document(s) updated", identifier, updated)
    return {"identifier": identifier, "documents_updated": updated,
            "outcomes": outcomes, "error": ""}


def run_sync_all(workspace) -> list[SyncReport]:
    """Sync every marker found in the source files, one at a time."""
    reports: list[SyncReport] = []
    for identifier in discover_identifiers(workspace):
        try:
            reports.append(run_sync(identifier, workspace))
        except ExtractionError as exc:
            logger.error(str(exc))
            reports.append({"identifier": identifier, "documents_updated": 0,
                            "outcomes": [], "error": str(exc)})
    return reports


def run_insert(identifier: str, workspace, document: str, line: int) -> Fragment:
    """Extract a fragment and insert a fresh block below `line` (0-based) of document.

    A relative document path is taken from the workspace root; documents
    outside the root are refused.
    """
    path = workspace.resolve_document(document)
    if path is None:
        raise DocumentOutsideWorkspace(identifier, document, str(workspace.root))
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    fragment = extract_fragment(identifier, workspace)
    insert_block(workspace, str(path), fragment, line)
    return fragment


def _print_reports(reports: list[SyncReport]) -> None:
    table = Table(title="Documentation sync", box=box.SIMPLE_HEAD)
    table.add_column("Marker", justify="right")
    table.add_column("Document")
    table.add_column("Status")

    for report in reports:
        if report["error"]:
            table.add_row(report["identifier"], "-", f"[red]{escape(report['error'])}[/red]")
            continue
        touched = [o for o in report["outcomes"] if o["status"] != "no_match"]
        if not touched:
            table.add_row(report["identifier"], "-", "[yellow]no matching block[/yellow]")
        for outcome in touched:
            status = "[green]updated[/green]" if outcome["status"] == "updated" else "[red]failed[/red]"
            table.add_row(report["identifier"], escape(outcome["path"]), status)

    Console().print(table)


def _has_failures(reports: list[SyncReport]) -> bool:
    return any(
        r["error"] or any(o["status"] == "failed" for o in r["outcomes"])
        for r in reports
    )


def build_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snippet-sync",
        description="Mirror marked source code fragments into documentation code blocks.",
    )
    parser.add_argument("--root", default=settings.root,
                        help="Directory to scan for sources and documents")
    parser.add_argument("--log-level", default=settings.log_level,
                        choices=LOG_LEVELS)

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    extract = subparsers.add_parser("extract", help="Print the fragment for a marker")
    extract.add_argument("identifier", help="Marker number, e.g. 457659")
    extract.add_argument("--json", action="store_true", help="Print the fragment as JSON")

    sync = subparsers.add_parser("sync", help="Update documentation blocks for a marker")
    target = sync.add_mutually_exclusive_group(required=True)
    target.add_argument("identifier", nargs="?", help="Marker number")
    target.add_argument("--all", action="store_true", help="Sync every marker in the sources")

    insert = subparsers.add_parser("insert", help="Insert a new block into a document")
    insert.add_argument("identifier", help="Marker number")
    insert.add_argument("document", help="Documentation file to insert into")
    insert.add_argument("--line", type=int, required=True,
                        help="1-based line number; the block goes below it")

    return parser


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    args = build_parser(settings).parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    settings = dataclasses.replace(settings, root=args.root)
    start = time.time()

    try:
        if args.command != "sync" or not args.all:
            # reject bad input before touching the filesystem
            validate_identifier(args.identifier)
        workspace = FileWorkspace(settings)

        if args.command == "extract":
            fragment = run_extract(args.identifier, workspace)
            if args.json:
                print(json.dumps(fragment._asdict(), indent=2, ensure_ascii=False))
            else:
                print(fragment.text)
            return 0

        if args.command == "insert":
            if args.line < 1:
                logger.error("--line must be 1 or greater")
                return 1
            run_insert(args.identifier, workspace, args.document, args.line - 1)
            logger.info("Code fragment inserted successfully.")
            return 0

        if args.all:
            reports = run_sync_all(workspace)
        else:
            reports = [run_sync(args.identifier, workspace)]
    except (SnippetSyncError, FileNotFoundError) as exc:
        logger.error(str(exc))
        return 1
    except Exception:
        logger.exception("%s failed", args.command)
        return 1

    _print_reports(reports)
    logger.info("Documentation sync completed (%.1fs)", time.time() - start)
    return 1 if _has_failures(reports) else 0


if __name__ == "__main__":
    sys.exit(main())
