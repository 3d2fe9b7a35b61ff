# src/batch.py
"""Bulk sanitization of an existing content corpus.

The driver fetches every eligible record once, runs the batch pipeline over
each body, and writes back only bodies that actually changed. A failed write
is recorded against that record and never retried within the run; it does
not stop the remaining records from being processed.

Usage:
    result = run_batch(repository, flags, enabled_types=("post", "page"))
    print(result.summary())
"""

from collections.abc import Iterable

from models import (
    BatchRunResult,
    ContentRecord,
    ContentRepository,
    FeatureFlags,
    NoOpProgress,
    PostStatus,
    ProgressReporter,
    RecordResult,
)
from observability import BatchRunEvent, Timer, emit_event
from pipeline import SanitizerContext, sanitize_record_body
from utils import log_error, log_op, truncate_error

# Statuses eligible for bulk sanitization ("future" is scheduled)
BATCH_STATUSES: tuple[PostStatus, ...] = ("publish", "pending", "draft", "future", "private")


class BatchSanitizer:
    """Runs the batch pipeline over every eligible record in a repository.

    Attributes:
        repository: Host content repository
        flags: Feature flags resolved for the batch context
        enabled_types: Content types eligible for sanitization
        progress: Reporter ticked once per record
    """

    def __init__(
        self,
        repository: ContentRepository,
        flags: FeatureFlags,
        enabled_types: Iterable[str],
        progress: ProgressReporter | None = None,
    ):
        self.repository = repository
        self.flags = flags
        self.enabled_types = tuple(enabled_types)
        self.progress = progress or NoOpProgress()

    def _fetch(self) -> list[ContentRecord]:
        return list(self.repository.fetch(self.enabled_types, BATCH_STATUSES))

    def _write(self, record: ContentRecord, new_body: str) -> RecordResult:
        """Persist a changed body; failures are returned, never raised."""
        try:
            written = self.repository.update_body(record.id, new_body)
        except Exception as e:
            log_error("batch_write_failed", e, record_id=record.id, record_type=record.type)
            return RecordResult(record.id, "failed", truncate_error(e))

        if not written:
            log_op("batch_write_rejected", record_id=record.id, record_type=record.type)
            return RecordResult(record.id, "failed", "update rejected by repository")

        try:
            self.repository.invalidate_cache(record.id)
        except Exception as e:
            # The body is already persisted, so the record still counts as updated
            log_error("batch_cache_invalidate_failed", e, record_id=record.id)

        log_op("batch_record_updated", record_id=record.id, record_type=record.type)
        return RecordResult(record.id, "updated")

    def process_record(self, record: ContentRecord) -> RecordResult:
        """Sanitize one record and write it back if the body changed."""
        outcome = sanitize_record_body(record.body, self.flags, SanitizerContext.CLI)
        if not outcome.changed:
            return RecordResult(record.id, "unchanged")
        return self._write(record, outcome.sanitized_body)

    def run(self) -> BatchRunResult:
        """Process the full snapshot and return the accumulated counts.

        Raises:
            Exception: Whatever the repository raises while fetching. Without a
                snapshot there is nothing to process.
        """
        event = BatchRunEvent(
            enabled_types=list(self.enabled_types),
            safelink_filtering=self.flags.safelink_filtering,
            postmaster_filtering=self.flags.postmaster_filtering,
        )
        result = BatchRunResult()

        with Timer() as timer:
            try:
                with Timer() as fetch_timer:
                    records = self._fetch()
            except Exception as e:
                event.wall_time_ms = timer.elapsed()
                event.outcome = "error"
                event.error_type = type(e).__name__
                event.error_message = truncate_error(e)
                emit_event(event, force=True)
                raise

            event.fetch_time_ms = fetch_timer.elapsed_ms
            result.total_examined = len(records)
            self.progress.start(result.total_examined)

            for record in records:
                record_result = self.process_record(record)
                result.records.append(record_result)
                if record_result.status == "updated":
                    result.total_changed += 1
                self.progress.tick()

            self.progress.finish()

        event.wall_time_ms = timer.elapsed_ms
        event.records_examined = result.total_examined
        event.records_changed = result.total_changed
        event.records_failed = result.total_failed
        event.outcome = "partial" if result.total_failed else "success"
        emit_event(event, force=True)

        return result


def run_batch(
    repository: ContentRepository,
    flags: FeatureFlags,
    enabled_types: Iterable[str],
    progress: ProgressReporter | None = None,
) -> BatchRunResult:
    """Convenience function to run a batch sanitization.

    Args:
        repository: Host content repository
        flags: Feature flags resolved for the batch context
        enabled_types: Content types eligible for sanitization
        progress: Optional per-record progress reporter

    Returns:
        BatchRunResult with examined/changed counts and per-record results
    """
    return BatchSanitizer(repository, flags, enabled_types, progress).run()
