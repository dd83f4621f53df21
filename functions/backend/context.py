"""
Explicit wiring of the backend clients used by the repository and the map view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore, storage

from backend.auth import AuthSession
from backend.config import Settings, get_settings
from backend.document_store import (
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
)
from backend.storage import BlobStore, FirebaseBlobStore, InMemoryBlobStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a client needs to talk to the backend, passed explicitly."""

    settings: Settings
    session: AuthSession
    documents: DocumentStore
    blobs: BlobStore


def in_memory_context(settings: Optional[Settings] = None) -> AppContext:
    return AppContext(
        settings=settings or Settings(use_in_memory_backends=True),
        session=AuthSession(),
        documents=InMemoryDocumentStore(),
        blobs=InMemoryBlobStore(),
    )


def _get_or_initialize_app(settings: Settings) -> Any:
    try:
        return firebase_admin.get_app(settings.firebase_app_name)
    except ValueError:
        pass

    if settings.firebase_credentials_path:
        credential = credentials.Certificate(settings.firebase_credentials_path)
    else:
        credential = credentials.ApplicationDefault()
    options = {"projectId": settings.firebase_project_id}
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket
    return firebase_admin.initialize_app(
        credential, options=options, name=settings.firebase_app_name
    )


def create_context(settings: Optional[Settings] = None) -> AppContext:
    """
    Builds a new context. In-memory backends are used when requested or when
    no Firebase project is configured.
    """
    settings = settings or get_settings()
    if settings.use_in_memory_backends or not settings.firebase_project_id:
        logger.info("Using in-memory document and blob stores")
        return in_memory_context(settings)

    app = _get_or_initialize_app(settings)
    logger.info("Using Firebase project %s", settings.firebase_project_id)
    return AppContext(
        settings=settings,
        session=AuthSession(app=app),
        documents=FirestoreDocumentStore(firestore.client(app)),
        blobs=FirebaseBlobStore(bucket=storage.bucket(app=app)),
    )
