"""Error taxonomy and shared error messaging for searches and CLIs."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, TypedDict

from sigsearch.logging_utils import get_logger

logger = get_logger(__name__)


class ErrorEntry(TypedDict):
    message: str
    suggestions: List[str]


ERROR_MESSAGES: Dict[str, ErrorEntry] = {
    "configuration": {
        "message": "Invalid search configuration: {details}",
        "suggestions": [
            "Use one of the methods 'spearman', 'kendall' or 'pearson'",
            "Pass a query with exactly one numeric column indexed by gene id",
            "Use a positive integer for chunk_size and workers",
        ],
    },
    "input": {
        "message": "Invalid search input: {details}",
        "suggestions": [
            "Check the requested treatment names against the reference column names",
            "Confirm the reference database path or name exists",
        ],
    },
    "data": {
        "message": "Reference data cannot be searched: {details}",
        "suggestions": [
            "Make sure query and reference use the same gene identifier type",
            "Map gene symbols to Entrez ids (or vice versa) before searching",
        ],
    },
    "computation": {
        "message": "Correlation could not be computed: {details}",
        "suggestions": [
            "Inspect the reference block for non-numeric or corrupt values",
        ],
    },
    "worker": {
        "message": "Search worker failed: {details}",
        "suggestions": [
            "Re-run with workers=1 to reproduce the failure sequentially",
            "Check that the reference file is readable from worker processes",
        ],
    },
    "file_not_found": {
        "message": "File not found: {path}",
        "suggestions": [
            "Confirm the path exists and is readable",
            "Check working directory and relative paths",
            "Regenerate or download the missing file",
        ],
    },
    "network_error": {
        "message": "Network request failed: {details}",
        "suggestions": [
            "Check internet connectivity and proxies",
            "Retry the request; transient failures are common",
        ],
    },
}


def format_error(category: str, **kwargs: str) -> str:
    """Format an error message with suggestions for the given category."""
    details = kwargs.get("details", "unspecified error")
    service = kwargs.get("service", "service")
    path = kwargs.get("path", "")

    entry = ERROR_MESSAGES.get(category)
    if not entry:
        return f"[{category}] {details}"

    message = entry["message"].format(details=details, service=service, path=path)
    suggestions = entry.get("suggestions", [])
    if not suggestions:
        return message

    tips = "\n".join(f"- {tip}" for tip in suggestions)
    return f"{message}\nSuggestions:\n{tips}"


def render_cli_error(category: str, **kwargs: str) -> None:
    """Print a colored CLI error with suggestions."""
    text = format_error(category, **kwargs)
    red = "\033[91m"
    reset = "\033[0m"
    logger.error(f"{red}{text}{reset}")


class SignatureSearchError(Exception):
    """Base error for all search failures."""

    category = "search"

    def __init__(self, details: str):
        super().__init__(details)
        self.details = details

    def render(self) -> None:
        render_cli_error(self.category, details=self.details)


class ConfigurationError(SignatureSearchError):
    """Bad method tag, malformed query shape or non-positive chunk/worker counts."""

    category = "configuration"


class InputError(SignatureSearchError):
    """Requested entries or reference files do not exist."""

    category = "input"


class DataError(SignatureSearchError):
    """Query and reference share no alignable genes."""

    category = "data"


class ComputationError(SignatureSearchError):
    category = "computation"


class WorkerError(SignatureSearchError):
    """A block failed inside the worker pool; the search is aborted."""

    category = "worker"

    def __init__(
        self,
        details: str,
        block_index: Optional[int] = None,
        entries: Optional[Sequence[str]] = None,
    ):
        super().__init__(details)
        self.block_index = block_index
        self.entries = list(entries) if entries is not None else []


__all__ = [
    "ERROR_MESSAGES",
    "format_error",
    "render_cli_error",
    "SignatureSearchError",
    "ConfigurationError",
    "InputError",
    "DataError",
    "ComputationError",
    "WorkerError",
]
