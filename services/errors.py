"""
Record Store Errors
====================
Read corruption is recovered inside the storage backing and never
surfaces here. Not-found is a ``None`` result, not an exception.
"""


class RecordStoreError(Exception):
    """Base class for record store failures."""


class StoreWriteError(RecordStoreError):
    """The backing document could not be written (disk full, permissions)."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to write record document {self.path}: {reason}")


class UnknownCollectionError(RecordStoreError, ValueError):
    """A collection name outside the document schema was requested."""

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Unknown collection: {collection!r}")
