"""Append-only workflow ledger."""

import threading

from .types import WorkflowRecord


class WorkflowLedger:
    """In-memory history of workflow records.

    Records are frozen and only ever appended. A lock guards the list
    because sync API endpoints run in a threadpool.
    """

    def __init__(self):
        self._records: list[WorkflowRecord] = []
        self._index: dict[str, WorkflowRecord] = {}
        self._lock = threading.Lock()

    def append(self, record: WorkflowRecord) -> None:
        """Add a record.

        Raises:
            ValueError: If a record with the same id was already written.
        """
        with self._lock:
            if record.id in self._index:
                raise ValueError(f"Workflow {record.id} is already recorded")
            self._records.append(record)
            self._index[record.id] = record

    def records(self) -> list[WorkflowRecord]:
        """Return a copy of all records in insertion order."""
        with self._lock:
            return list(self._records)

    def get(self, workflow_id: str) -> WorkflowRecord | None:
        with self._lock:
            return self._index.get(workflow_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
