from wallsync.db.database import get_session, init_db
from wallsync.db.operations import (
    get_metadata_record,
    metadata_to_document,
    metadata_to_model,
    upsert_metadata,
)

__all__ = [
    "get_metadata_record",
    "get_session",
    "init_db",
    "metadata_to_document",
    "metadata_to_model",
    "upsert_metadata",
]
