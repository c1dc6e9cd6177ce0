"""Document persistence collaborators."""

from habitblocks.platform.storage.documents import (
    DocumentStore,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
)
from habitblocks.platform.storage.transaction import DocumentTransaction

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "JsonFileDocumentStore",
    "DocumentTransaction",
]
