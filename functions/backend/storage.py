"""
Blob storage abstraction for Firebase Storage and in-memory testing.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Protocol
from urllib.parse import quote

from google.api_core import exceptions as google_exceptions

from backend.errors import BlobNotFoundError


class BlobStore(Protocol):
    """Defines the operations the spot repository needs from object storage."""

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> None:
        ...

    def download_url(self, path: str) -> str:
        ...

    def delete(self, path: str) -> None:
        """Deletes the object; raises BlobNotFoundError if it does not exist."""
        ...

    def exists(self, path: str) -> bool:
        ...


def blob_name(path: str) -> str:
    """Storage object name for a path; the leading slash is not part of it."""
    return path.lstrip("/")


@dataclass
class InMemoryBlobStore:
    """Test double for storage interactions."""

    base_url: str = "https://storage.example.test/v0/b/spot-map/o"
    stored_objects: Dict[str, bytes] = field(default_factory=dict)
    content_types: Dict[str, str] = field(default_factory=dict)
    _tokens: Dict[str, str] = field(default_factory=dict, repr=False)
    _lock: Any = field(default_factory=threading.Lock, repr=False)

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> None:
        name = blob_name(path)
        with self._lock:
            self.stored_objects[name] = bytes(data)
            self.content_types[name] = content_type
            self._tokens[name] = uuid.uuid4().hex

    def download_url(self, path: str) -> str:
        name = blob_name(path)
        with self._lock:
            if name not in self.stored_objects:
                raise BlobNotFoundError(path)
            token = self._tokens[name]
        return f"{self.base_url}/{quote(name, safe='')}?alt=media&token={token}"

    def delete(self, path: str) -> None:
        name = blob_name(path)
        with self._lock:
            if name not in self.stored_objects:
                raise BlobNotFoundError(path)
            del self.stored_objects[name]
            self.content_types.pop(name, None)
            self._tokens.pop(name, None)

    def exists(self, path: str) -> bool:
        return blob_name(path) in self.stored_objects


TOKEN_METADATA_KEY = "firebaseStorageDownloadTokens"
FIREBASE_DOWNLOAD_BASE = "https://firebasestorage.googleapis.com/v0/b"


@dataclass
class FirebaseBlobStore:
    """
    Firebase Storage client, backed by the google-cloud-storage bucket
    returned by `firebase_admin.storage.bucket()`.

    Download URLs are Firebase token URLs. Every upload stores a
    `firebaseStorageDownloadTokens` metadata entry, so no signing key is
    needed and ApplicationDefault credentials work.
    """

    bucket: Any

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> None:
        blob = self.bucket.blob(blob_name(path))
        blob.metadata = {TOKEN_METADATA_KEY: uuid.uuid4().hex}
        blob.upload_from_string(data, content_type=content_type)

    def download_url(self, path: str) -> str:
        name = blob_name(path)
        blob = self.bucket.get_blob(name)
        if blob is None:
            raise BlobNotFoundError(path)
        metadata = blob.metadata or {}
        token = (metadata.get(TOKEN_METADATA_KEY) or "").split(",")[0].strip()
        if not token:
            # Objects uploaded outside this client carry no token yet.
            token = uuid.uuid4().hex
            blob.metadata = {**metadata, TOKEN_METADATA_KEY: token}
            blob.patch()
        return (
            f"{FIREBASE_DOWNLOAD_BASE}/{self.bucket.name}/o/"
            f"{quote(name, safe='')}?alt=media&token={token}"
        )

    def delete(self, path: str) -> None:
        blob = self.bucket.blob(blob_name(path))
        try:
            blob.delete()
        except google_exceptions.NotFound as e:
            raise BlobNotFoundError(path) from e

    def exists(self, path: str) -> bool:
        return self.bucket.blob(blob_name(path)).exists()
