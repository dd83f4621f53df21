"""
Document store abstraction for Cloud Firestore and an in-memory test
implementation.

Documents are addressed by slash-separated paths, e.g.
"users/<uid>/spots/<placeId>". Field mutators are the Firestore sentinels
(`ArrayUnion`, `ArrayRemove`, `SERVER_TIMESTAMP`, `DELETE_FIELD`), so callers
write the same data against either implementation.
"""

from __future__ import annotations

import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from google.cloud.firestore_v1 import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
)

from shared.subscriptions import Subscription
from shared.types import ChangeType, DocumentChange

logger = logging.getLogger(__name__)

ChangesCallback = Callable[[List[DocumentChange]], None]


class WriteBatch(Protocol):
    """All-or-nothing group of writes, applied by `commit()`."""

    def set(self, document_path: str, data: dict, merge: bool = False) -> None:
        ...

    def delete(self, document_path: str) -> None:
        ...

    def commit(self) -> None:
        ...


class DocumentStore(Protocol):
    """Defines the operations the spot repository needs from the store."""

    def add(self, collection_path: str, data: dict) -> str:
        ...

    def get(self, document_path: str) -> Optional[dict]:
        ...

    def list(self, collection_path: str) -> List[Tuple[str, dict]]:
        ...

    def batch(self) -> WriteBatch:
        ...

    def watch(self, collection_path: str, callback: ChangesCallback) -> Subscription:
        ...


def parent_path(document_path: str) -> str:
    return document_path.rsplit("/", 1)[0]


def document_id(document_path: str) -> str:
    return document_path.rsplit("/", 1)[-1]


def _apply_fields(existing: Any, data: dict, merge: bool) -> dict:
    """Applies `data` to `existing`, resolving Firestore sentinels."""
    result = copy.deepcopy(existing) if merge and isinstance(existing, dict) else {}
    for key, value in data.items():
        current = result.get(key)
        if value is DELETE_FIELD:
            result.pop(key, None)
        elif value is SERVER_TIMESTAMP:
            result[key] = datetime.now(timezone.utc)
        elif isinstance(value, ArrayUnion):
            merged = list(current) if isinstance(current, list) else []
            for item in value.values:
                if item not in merged:
                    merged.append(item)
            result[key] = merged
        elif isinstance(value, ArrayRemove):
            remaining = list(current) if isinstance(current, list) else []
            result[key] = [item for item in remaining if item not in value.values]
        elif isinstance(value, dict) and merge:
            result[key] = _apply_fields(current, value, merge=True)
        elif isinstance(value, dict):
            result[key] = _apply_fields(None, value, merge=False)
        else:
            result[key] = copy.deepcopy(value)
    return result


class InMemoryWriteBatch:
    def __init__(self, store: InMemoryDocumentStore):
        self._store = store
        self._writes: List[Tuple[str, str, Optional[dict], bool]] = []
        self._committed = False

    def set(self, document_path: str, data: dict, merge: bool = False) -> None:
        self._writes.append(("set", document_path, data, merge))

    def delete(self, document_path: str) -> None:
        self._writes.append(("delete", document_path, None, False))

    def commit(self) -> None:
        if self._committed:
            raise ValueError("Batch already committed.")
        self._committed = True
        self._store._apply_batch(self._writes)


class InMemoryDocumentStore:
    """Dictionary-backed document store for development and tests."""

    def __init__(self):
        self.documents: Dict[str, dict] = {}
        self.commit_count = 0
        self._watchers: List[Tuple[str, ChangesCallback]] = []

    def add(self, collection_path: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._apply_batch([("set", f"{collection_path}/{doc_id}", data, False)])
        return doc_id

    def get(self, document_path: str) -> Optional[dict]:
        data = self.documents.get(document_path)
        return copy.deepcopy(data) if data is not None else None

    def list(self, collection_path: str) -> List[Tuple[str, dict]]:
        return [
            (document_id(path), copy.deepcopy(data))
            for path, data in sorted(self.documents.items())
            if parent_path(path) == collection_path
        ]

    def batch(self) -> InMemoryWriteBatch:
        return InMemoryWriteBatch(self)

    def watch(self, collection_path: str, callback: ChangesCallback) -> Subscription:
        entry = (collection_path, callback)
        self._watchers.append(entry)
        callback(
            [
                DocumentChange(ChangeType.ADDED, doc_id, data)
                for doc_id, data in self.list(collection_path)
            ]
        )
        return Subscription(lambda: self._watchers.remove(entry))

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.documents.clear()
        self.commit_count = 0

    @property
    def watcher_count(self) -> int:
        return len(self._watchers)

    def _apply_batch(self, writes) -> None:
        # Stage on a copy so a failing write leaves the store untouched.
        staged = dict(self.documents)
        touched: List[str] = []
        for op, path, data, merge in writes:
            if op == "delete":
                staged.pop(path, None)
            else:
                staged[path] = _apply_fields(staged.get(path), data, merge)
            if path not in touched:
                touched.append(path)
        before = self.documents
        self.documents = staged
        self.commit_count += 1
        self._notify(before, touched)

    def _notify(self, before: Dict[str, dict], touched: List[str]) -> None:
        for collection_path, callback in list(self._watchers):
            changes = []
            for path in touched:
                if parent_path(path) != collection_path:
                    continue
                old, new = before.get(path), self.documents.get(path)
                if old is None and new is not None:
                    change_type = ChangeType.ADDED
                elif old is not None and new is None:
                    change_type = ChangeType.REMOVED
                elif old != new:
                    change_type = ChangeType.MODIFIED
                else:
                    continue
                data = copy.deepcopy(new if new is not None else old)
                changes.append(DocumentChange(change_type, document_id(path), data))
            if changes:
                callback(changes)


class FirestoreWriteBatch:
    def __init__(self, client: Any):
        self._client = client
        self._batch = client.batch()

    def set(self, document_path: str, data: dict, merge: bool = False) -> None:
        self._batch.set(self._client.document(document_path), data, merge=merge)

    def delete(self, document_path: str) -> None:
        self._batch.delete(self._client.document(document_path))

    def commit(self) -> None:
        self._batch.commit()


class FirestoreDocumentStore:
    """Cloud Firestore implementation (firebase_admin.firestore client)."""

    def __init__(self, client: Any):
        self._client = client

    def add(self, collection_path: str, data: dict) -> str:
        _, doc_ref = self._client.collection(collection_path).add(data)
        return doc_ref.id

    def get(self, document_path: str) -> Optional[dict]:
        snapshot = self._client.document(document_path).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def list(self, collection_path: str) -> List[Tuple[str, dict]]:
        return [
            (snapshot.id, snapshot.to_dict())
            for snapshot in self._client.collection(collection_path).stream()
        ]

    def batch(self) -> FirestoreWriteBatch:
        return FirestoreWriteBatch(self._client)

    def watch(self, collection_path: str, callback: ChangesCallback) -> Subscription:
        def on_snapshot(_docs, changes, _read_time):
            callback(
                [
                    DocumentChange(
                        ChangeType(change.type.name.lower()),
                        change.document.id,
                        change.document.to_dict(),
                    )
                    for change in changes
                ]
            )

        watch = self._client.collection(collection_path).on_snapshot(on_snapshot)
        return Subscription(watch.unsubscribe)
