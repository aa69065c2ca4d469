from wallsync.parsers.metadata import (
    document_digest,
    parse_metadata,
    parse_metadata_bytes,
    serialize_metadata,
)

__all__ = [
    "document_digest",
    "parse_metadata",
    "parse_metadata_bytes",
    "serialize_metadata",
]
