"""Wallpaper storage module

Provides abstract base classes and concrete implementations for the blob
store (selection and assets) and the metadata store.
"""

from wallsync.storage.base import BlobStore, MetadataStore
from wallsync.storage.file_store import FileBlobStore
from wallsync.storage.metadata_store import DatabaseMetadataStore

__all__ = [
    "BlobStore",
    "DatabaseMetadataStore",
    "FileBlobStore",
    "MetadataStore",
]
