"""
Shared value types passed between the extraction and sync stages.
"""

from typing import NamedTuple, TypedDict


class Fragment(NamedTuple):
    identifier: str
    type_tag: str    # source file extension without the dot: py, ts, ...
    text: str        # interior of the marker pair, trimmed
    path: str        # file the fragment was extracted from


class DocumentOutcome(TypedDict):
    path: str
    status: str      # updated, no_match, failed
    message: str


class SyncReport(TypedDict):
    identifier: str
    documents_updated: int
    outcomes: list[DocumentOutcome]
    error: str       # extraction failure, empty on success
