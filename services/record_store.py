"""
Case File Record Store
======================
Per-collection CRUD over the single case file document.

Every operation is one load-mutate-save cycle against the document
backing, run inside a per-store lock so that two cycles never interleave
within the process. One RecordStore is created per process and handed to
every caller; nothing else opens the backing file.

Usage:
    from services.document_store import JsonDocumentStore
    from services.record_store import RecordStore

    store = RecordStore(JsonDocumentStore("data/database.json"))
    case = store.add("cases", {"caseNumber": "CASE-42", "title": "Warehouse theft"})
    store.add("evidence", {"caseId": case.id, "itemNumber": "E-1"})
    store.delete("cases", case.id)     # evidence E-1 goes with it
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

from pydantic import BaseModel

from models.records import (
    CASE_SCOPED_COLLECTIONS,
    COLLECTIONS,
    BaseRecord,
    CaseFileDocument,
    utc_timestamp,
)
from services.document_store import JsonDocumentStore
from services.errors import UnknownCollectionError
from services.record_policies import cascade_case_deletion, sort_timeline
from services.search import SearchResults, search_document

logger = logging.getLogger(__name__)

# Store-owned keys; caller field bags can never set them.
PROTECTED_FIELDS = frozenset({"id", "createdAt", "updatedAt"})

FieldBag = Union[Mapping[str, Any], BaseModel, None]


def generate_id() -> str:
    """Opaque, collision-resistant record identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class DashboardStats:
    """Headline counts for the case dashboard."""

    total_cases: int
    active_cases: int
    closed_cases: int
    evidence_count: int
    suspects_count: int
    witnesses_count: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalCases": self.total_cases,
            "activeCases": self.active_cases,
            "closedCases": self.closed_cases,
            "evidenceCount": self.evidence_count,
            "suspectsCount": self.suspects_count,
            "witnessesCount": self.witnesses_count,
        }


class RecordStore:
    """
    CRUD, cascade and search over one case file document.

    Not-found is never an error: ``get`` and ``update`` return None and
    ``delete`` always reports success. Write failures propagate as
    ``StoreWriteError``.
    """

    def __init__(self, backing: JsonDocumentStore):
        self.backing = backing
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _record_class(collection: str) -> Type[BaseRecord]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise UnknownCollectionError(collection) from None

    @staticmethod
    def _wire_fields(record_cls: Type[BaseRecord], fields: FieldBag) -> Dict[str, Any]:
        """
        Normalize a caller field bag to persisted (camelCase) keys and
        strip the store-owned keys.
        """
        if fields is None:
            return {}
        if isinstance(fields, BaseModel):
            fields = fields.model_dump(by_alias=True, exclude_unset=True)

        aliases = {
            name: info.alias or name
            for name, info in record_cls.model_fields.items()
        }
        bag: Dict[str, Any] = {}
        for key, value in dict(fields).items():
            key = aliases.get(key, key)
            if key in PROTECTED_FIELDS:
                continue
            bag[key] = value
        return bag

    @staticmethod
    def _apply_policies(document: CaseFileDocument, collection: str) -> None:
        if collection == "timeline":
            document.timeline = sort_timeline(document.timeline)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> CaseFileDocument:
        """Load the whole document."""
        with self._lock:
            return self.backing.load()

    def list(self, collection: str) -> List[BaseRecord]:
        self._record_class(collection)
        with self._lock:
            return list(self.backing.load().records(collection))

    def get(self, collection: str, record_id: str) -> Optional[BaseRecord]:
        for record in self.list(collection):
            if record.id == record_id:
                return record
        return None

    def list_by_case(self, collection: str, case_id: str) -> List[BaseRecord]:
        """Records of a case-scoped collection whose ``caseId`` is ``case_id``."""
        self._record_class(collection)
        if collection not in CASE_SCOPED_COLLECTIONS:
            raise ValueError(f"Collection {collection!r} is not case-scoped")
        return [r for r in self.list(collection) if getattr(r, "case_id", None) == case_id]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, collection: str, fields: FieldBag = None) -> BaseRecord:
        """Create a record from ``fields`` and return it with id and timestamps."""
        record_cls = self._record_class(collection)
        bag = self._wire_fields(record_cls, fields)

        with self._lock:
            document = self.backing.load()
            now = utc_timestamp()
            payload = {"id": generate_id(), **bag, "createdAt": now}
            # Timeline events only gain updatedAt once they are edited.
            if collection != "timeline":
                payload["updatedAt"] = now
            record = record_cls.model_validate(payload)

            document.records(collection).append(record)
            self._apply_policies(document, collection)
            self.backing.save(document)

        logger.info("Record added: %s/%s", collection, record.id)
        return record

    def update(self, collection: str, record_id: str, fields: FieldBag = None) -> Optional[BaseRecord]:
        """
        Shallow-merge ``fields`` into the record and refresh ``updatedAt``.

        Returns the updated record, or None when no record has ``record_id``.
        """
        record_cls = self._record_class(collection)
        bag = self._wire_fields(record_cls, fields)

        with self._lock:
            document = self.backing.load()
            records = document.records(collection)
            for index, existing in enumerate(records):
                if existing.id != record_id:
                    continue
                merged = {**existing.to_wire(), **bag, "updatedAt": utc_timestamp()}
                updated = record_cls.model_validate(merged)
                records[index] = updated
                self._apply_policies(document, collection)
                self.backing.save(document)
                logger.debug("Record updated: %s/%s", collection, record_id)
                return updated

        logger.debug("Update skipped, no record %s/%s", collection, record_id)
        return None

    def delete(self, collection: str, record_id: str) -> bool:
        """
        Remove the record with ``record_id``. Deleting a case also removes
        its evidence, timeline events and documents in the same save.

        Always returns True, whether or not the record existed.
        """
        self._record_class(collection)

        with self._lock:
            document = self.backing.load()
            records = document.records(collection)
            kept = [r for r in records if r.id != record_id]
            document.replace_records(collection, kept)
            if collection == "cases":
                cascade_case_deletion(document, record_id)
            self.backing.save(document)

        if len(kept) != len(records):
            logger.info("Record deleted: %s/%s", collection, record_id)
        return True

    # ------------------------------------------------------------------
    # Evidence photos
    # ------------------------------------------------------------------

    def add_evidence_photos(self, evidence_id: str, uris: Iterable[str]) -> Optional[BaseRecord]:
        """Append photo URIs to an evidence record's ``photos`` list."""
        with self._lock:
            evidence = self.get("evidence", evidence_id)
            if evidence is None:
                return None
            photos = evidence.photos if isinstance(evidence.photos, list) else []
            return self.update("evidence", evidence_id, {"photos": [*photos, *uris]})

    def remove_evidence_photo(self, evidence_id: str, filename: str) -> Optional[BaseRecord]:
        """Drop every photo URI of an evidence record that contains ``filename``."""
        with self._lock:
            evidence = self.get("evidence", evidence_id)
            if evidence is None:
                return None
            photos = evidence.photos if isinstance(evidence.photos, list) else []
            kept = [p for p in photos if not (isinstance(p, str) and filename in p)]
            return self.update("evidence", evidence_id, {"photos": kept})

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def stats(self) -> DashboardStats:
        document = self.snapshot()
        closed = sum(1 for c in document.cases if c.status == "closed")
        return DashboardStats(
            total_cases=len(document.cases),
            active_cases=len(document.cases) - closed,
            closed_cases=closed,
            evidence_count=len(document.evidence),
            suspects_count=len(document.suspects),
            witnesses_count=len(document.witnesses),
        )

    def search(self, query: str) -> SearchResults:
        """Case-insensitive substring search across all searchable collections."""
        return search_document(self.snapshot(), query)
