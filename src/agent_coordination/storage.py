"""Persistence contract and the fire-and-forget artifact writer.

Persistence is a side effect of producing an artifact: failures are
logged and never reach the user-facing result.
"""

import threading
import uuid
from typing import Any, Protocol, runtime_checkable

from .artifacts import Artifact, GeneratedDocument, LearningPath, utc_now
from .exceptions import PersistenceError
from .logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Storage(Protocol):
    """Storage operations used by the coordination core."""

    def create_document(self, document: dict[str, Any]) -> dict[str, Any]: ...

    def create_knowledge_context(self, context: dict[str, Any]) -> dict[str, Any]: ...

    def create_activity(self, activity: dict[str, Any]) -> dict[str, Any]: ...


class InMemoryStorage:
    """Storage kept in process memory; useful for tests and the CLI."""

    def __init__(self):
        self.documents: list[dict[str, Any]] = []
        self.knowledge_contexts: list[dict[str, Any]] = []
        self.activities: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def _store(self, bucket: list[dict[str, Any]], item: dict[str, Any]) -> dict[str, Any]:
        stored = {"id": uuid.uuid4().hex, "created_at": utc_now().isoformat(), **item}
        with self._lock:
            bucket.append(stored)
        return stored

    def create_document(self, document: dict[str, Any]) -> dict[str, Any]:
        return self._store(self.documents, document)

    def create_knowledge_context(self, context: dict[str, Any]) -> dict[str, Any]:
        return self._store(self.knowledge_contexts, context)

    def create_activity(self, activity: dict[str, Any]) -> dict[str, Any]:
        return self._store(self.activities, activity)


def _summary(artifact: Artifact) -> str:
    if isinstance(artifact, GeneratedDocument):
        return artifact.content[:500]
    if isinstance(artifact, LearningPath):
        return artifact.description
    return artifact.title


def persist_artifact(
    storage: Storage | None,
    artifact: Artifact,
    user_id: str,
    workflow_id: str,
) -> bool:
    """Write an artifact and its activity entry; never raises.

    Documents and learning paths also get a knowledge context so they can
    be found again by topic.

    Returns:
        True when every write succeeded, False otherwise.
    """
    if storage is None:
        return False

    payload = artifact.to_dict()
    operation = "create_document"
    try:
        document = storage.create_document({
            "title": artifact.title,
            "kind": payload["kind"],
            "content": payload,
            "user_id": user_id,
            "workflow_id": workflow_id,
        })
        if isinstance(artifact, (GeneratedDocument, LearningPath)):
            operation = "create_knowledge_context"
            storage.create_knowledge_context({
                "title": artifact.title,
                "summary": _summary(artifact),
                "document_id": document.get("id") if isinstance(document, dict) else None,
                "user_id": user_id,
            })
        operation = "create_activity"
        storage.create_activity({
            "user_id": user_id,
            "type": "artifact-generated",
            "description": f"Generated {payload['kind']}: {artifact.title}",
            "workflow_id": workflow_id,
        })
    except Exception as e:
        logger.error(f"workflow {workflow_id}: {PersistenceError(operation, e)}")
        return False
    return True
