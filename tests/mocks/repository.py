# tests/mocks/repository.py
"""In-memory content repository with failure injection."""

from models import ContentRecord, RecordId


class InMemoryRepository:
    """
    Mock content repository.

    Failure injection:
    - reject_ids: update_body returns False for these records
    - raise_ids: update_body raises RuntimeError for these records
    - fetch_error: fetch raises this exception
    """

    def __init__(
        self,
        records: list[ContentRecord] | None = None,
        reject_ids: set[int] | None = None,
        raise_ids: set[int] | None = None,
        fetch_error: Exception | None = None,
    ):
        self.records: dict[RecordId, ContentRecord] = {r.id: r for r in records or []}
        self.reject_ids = reject_ids or set()
        self.raise_ids = raise_ids or set()
        self.fetch_error = fetch_error

        self.fetch_calls: list[tuple[tuple[str, ...], tuple[str, ...]]] = []
        self.updates: list[tuple[RecordId, str]] = []
        self.invalidated: list[RecordId] = []

    def fetch(self, types, statuses):
        self.fetch_calls.append((tuple(types), tuple(statuses)))
        if self.fetch_error is not None:
            raise self.fetch_error
        return [r for r in self.records.values() if r.type in types and r.status in statuses]

    def update_body(self, record_id, new_body):
        if record_id in self.raise_ids:
            raise RuntimeError(f"write failed for {record_id}")
        if record_id in self.reject_ids:
            return False
        record = self.records[record_id]
        self.records[record_id] = ContentRecord(record.id, record.type, new_body, record.status)
        self.updates.append((record_id, new_body))
        return True

    def invalidate_cache(self, record_id):
        self.invalidated.append(record_id)

    def body(self, record_id) -> str:
        return self.records[record_id].body


class RecordingProgress:
    """Progress reporter that records calls."""

    def __init__(self):
        self.total: int | None = None
        self.ticks = 0
        self.finished = False

    def start(self, total: int) -> None:
        self.total = total

    def tick(self) -> None:
        self.ticks += 1

    def finish(self) -> None:
        self.finished = True
