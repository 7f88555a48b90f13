"""
Record Document Backing
=======================
Reads and writes the single JSON document that holds every collection.

Design principles:
  - Whole-document semantics: every save replaces the file in full.
  - Writes go to a sibling temp file and are swapped in with
    ``os.replace``; a reader never sees a half-written document.
  - Read corruption is lossy but available: a file that is not UTF-8 JSON
    with an object at the top is replaced with an empty document and the
    caller carries on. A parseable document is never discarded.
  - Write failures, including values JSON cannot represent, propagate as
    ``StoreWriteError``.
"""

import json
import logging
import os
from pathlib import Path
from typing import Union

from models.records import CaseFileDocument, utc_timestamp
from services.errors import StoreWriteError

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = "data"
DEFAULT_DOCUMENT_NAME = "database.json"


class JsonDocumentStore:
    """
    Filesystem-backed storage for the case file document.

    The data directory is created on first use. This object is the only
    component that touches the backing file.
    """

    def __init__(self, path: Union[str, Path] = Path(DEFAULT_DATA_DIR) / DEFAULT_DOCUMENT_NAME):
        self.path = Path(path).resolve()
        self.data_dir = self.path.parent
        logger.info("JsonDocumentStore initialized at %s", self.path)

    def _ensure_data_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> CaseFileDocument:
        """
        Return the persisted document.

        A missing backing is initialized to an empty document. A backing
        whose bytes are not UTF-8 JSON, or whose top level is not an object,
        is overwritten with an empty document, which is returned. Anything
        that parses is kept: odd collection or record shapes are tolerated
        by ``CaseFileDocument``.
        """
        if not self.path.exists():
            return self._reset()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.error(
                "Record document %s is unreadable, resetting to empty: %s",
                self.path,
                exc,
                exc_info=True,
            )
            return self._reset()

        if not isinstance(data, dict):
            logger.error(
                "Record document %s is unreadable, resetting to empty: top level is %s, not an object",
                self.path,
                type(data).__name__,
            )
            return self._reset()

        return CaseFileDocument.model_validate(data)

    def _reset(self) -> CaseFileDocument:
        document = CaseFileDocument.empty()
        self.save(document)
        return document

    def save(self, document: CaseFileDocument) -> None:
        """Stamp ``lastUpdated`` and replace the backing with ``document``."""
        document.last_updated = utc_timestamp()
        try:
            payload = json.dumps(document.to_wire(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.error("Record document %s not saved, unserializable value: %s", self.path, exc)
            raise StoreWriteError(self.path, f"value is not JSON serializable: {exc}") from exc

        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self._ensure_data_dir()
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            logger.error("Error saving record document %s: %s", self.path, exc)
            raise StoreWriteError(self.path, str(exc)) from exc
