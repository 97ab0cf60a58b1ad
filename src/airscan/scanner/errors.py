"""Scan and persistence error types."""

from airscan.scanner.models import SourceType


class AdapterError(Exception):
    """A single source failed to produce results."""

    def __init__(self, source: SourceType, cause: BaseException) -> None:
        super().__init__(f"{source} scan failed: {cause}")
        self.source = source
        self.cause = cause


class AllSourcesFailedError(Exception):
    """Every selected source failed; no batch can be produced."""

    def __init__(self, errors: list[AdapterError]) -> None:
        sources = ", ".join(str(e.source) for e in errors)
        super().__init__(f"All selected sources failed: {sources}")
        self.errors = errors


class PersistenceError(Exception):
    """Writing a batch to one or more sink targets failed."""

    def __init__(self, failures: dict[str, BaseException]) -> None:
        targets = ", ".join(sorted(failures))
        super().__init__(f"Failed to persist batch to: {targets}")
        self.failures = failures
