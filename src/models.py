# src/models.py
"""Domain models and protocols for the content sanitizer."""

from dataclasses import dataclass, field
from typing import Literal, NewType, Protocol

# =============================================================================
# Semantic Type Aliases
# =============================================================================

RecordId = NewType("RecordId", int)

# Record statuses the batch driver processes ("future" is scheduled)
PostStatus = Literal["publish", "pending", "draft", "future", "private"]

RecordStatus = Literal["unchanged", "updated", "failed"]


# =============================================================================
# Errors
# =============================================================================


class RepositoryError(Exception):
    """Raised when the content repository cannot serve a request."""


# =============================================================================
# Domain Models
# =============================================================================


@dataclass(frozen=True, slots=True)
class ContentRecord:
    """A content record owned by the host repository. Immutable snapshot."""

    id: RecordId
    type: str
    body: str
    status: str = "publish"


@dataclass(frozen=True, slots=True)
class FeatureFlags:
    """Link filters enabled for a single pipeline invocation."""

    safelink_filtering: bool = False
    postmaster_filtering: bool = False


@dataclass(frozen=True, slots=True)
class SanitizationOutcome:
    """Result of sanitizing a single body.

    ``changed`` is exact string inequality and is the only trigger for a
    repository write.
    """

    original_body: str
    sanitized_body: str

    @property
    def changed(self) -> bool:
        return self.sanitized_body != self.original_body


@dataclass(frozen=True, slots=True)
class RecordResult:
    """Per-record outcome of a batch run."""

    record_id: RecordId
    status: RecordStatus
    error: str | None = None


@dataclass
class BatchRunResult:
    """Accumulated result of a single batch driver invocation.

    Attributes:
        total_examined: Size of the fetched snapshot
        total_changed: Records whose new body was written successfully
        records: Per-record results in fetch order
    """

    total_examined: int = 0
    total_changed: int = 0
    records: list[RecordResult] = field(default_factory=list)

    @property
    def failed_ids(self) -> list[RecordId]:
        return [r.record_id for r in self.records if r.status == "failed"]

    @property
    def total_failed(self) -> int:
        return len(self.failed_ids)

    def summary(self) -> str:
        """Human-readable completion line for the batch command."""
        return (
            f"Updated post content within {self.total_changed} posts "
            f"out of {self.total_examined} processed posts."
        )


# =============================================================================
# Protocols for Testability
# =============================================================================


class ContentRepository(Protocol):
    """Host content repository operations required by the batch driver."""

    def fetch(self, types: tuple[str, ...], statuses: tuple[str, ...]) -> list[ContentRecord]:
        """Return every record matching the given types and statuses."""
        ...

    def update_body(self, record_id: RecordId, new_body: str) -> bool:
        """Write a new body for one record. Returns True on success."""
        ...

    def invalidate_cache(self, record_id: RecordId) -> None:
        """Drop any cached copy of the record."""
        ...


class ProgressReporter(Protocol):
    """Observability hook ticked once per processed record."""

    def start(self, total: int) -> None: ...

    def tick(self) -> None: ...

    def finish(self) -> None: ...


class ContentSanitizer(Protocol):
    """Protocol for HTML sanitization - enables testing with mocks."""

    def clean(self, html: str) -> str:
        """Sanitize HTML content and return safe HTML."""
        ...


class NoOpProgress:
    """Progress reporter that ignores ticks."""

    def start(self, total: int) -> None:
        pass

    def tick(self) -> None:
        pass

    def finish(self) -> None:
        pass
