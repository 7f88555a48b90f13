"""
Case File Record Schemas
========================
One schema per collection of the case-management document: cases,
evidence, suspects, witnesses, timeline events, documents, vehicles,
officers and incidents.

Design principles:
  - Python attributes are snake_case; persisted keys are camelCase
    (``caseId``, ``dateTime``). Either spelling is accepted on input.
  - Declared fields give field-name safety only. Values are stored as
    supplied by the caller; validation of content belongs to the HTTP layer.
  - Undeclared fields survive a load/save cycle untouched.
  - Loading is tolerant: a null or non-list collection reads as empty and
    the core fields (``id``, timestamps) take whatever was stored, so one
    oddly shaped record never invalidates its siblings.
  - ``caseId`` on evidence, timeline and documents is a soft reference:
    never checked on write, enforced by cascade on case deletion.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

# Caller-supplied field values are persisted verbatim.
FieldValue = Any


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


class BaseRecord(BaseModel):
    """Fixed core shared by every record in every collection."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    # The store always writes string ids and ISO timestamps; hand-edited
    # documents may hold anything here.
    id: FieldValue = None
    created_at: FieldValue = None
    updated_at: FieldValue = None

    def to_wire(self) -> Dict[str, Any]:
        """Render the record exactly as it is persisted."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class CaseRecord(BaseRecord):
    case_number: FieldValue = None
    title: FieldValue = None
    status: FieldValue = None       # open, investigating, pending, closed
    priority: FieldValue = None     # low, medium, high
    officer: FieldValue = None
    location: FieldValue = None
    incident_date: FieldValue = None
    description: FieldValue = None
    notes: FieldValue = None


class EvidenceRecord(BaseRecord):
    item_number: FieldValue = None
    case_id: FieldValue = None
    type: FieldValue = None
    description: FieldValue = None
    officer: FieldValue = None
    collection_date: FieldValue = None
    location: FieldValue = None
    storage: FieldValue = None
    custody_chain: FieldValue = None
    notes: FieldValue = None
    photos: FieldValue = None       # list of photo URIs


class SuspectRecord(BaseRecord):
    name: FieldValue = None
    type: FieldValue = None
    aliases: FieldValue = None
    dob: FieldValue = None
    phone: FieldValue = None
    email: FieldValue = None
    address: FieldValue = None
    status: FieldValue = None
    description: FieldValue = None

    # OSINT
    social_media: FieldValue = None
    ip_addresses: FieldValue = None
    vehicles: FieldValue = None
    last_seen_location: FieldValue = None
    last_seen_date: FieldValue = None
    associates: FieldValue = None
    movement_history: FieldValue = None

    notes: FieldValue = None


class WitnessRecord(BaseRecord):
    name: FieldValue = None
    phone: FieldValue = None
    email: FieldValue = None
    address: FieldValue = None
    statement_date: FieldValue = None
    statement: FieldValue = None
    notes: FieldValue = None


class TimelineEventRecord(BaseRecord):
    case_id: FieldValue = None
    date_time: FieldValue = None
    description: FieldValue = None
    location: FieldValue = None
    officer: FieldValue = None
    notes: FieldValue = None


class DocumentRecord(BaseRecord):
    title: FieldValue = None
    case_id: FieldValue = None
    type: FieldValue = None
    author: FieldValue = None
    content: FieldValue = None
    notes: FieldValue = None


class VehicleRecord(BaseRecord):
    plate: FieldValue = None
    vin: FieldValue = None
    make: FieldValue = None
    model: FieldValue = None
    year: FieldValue = None
    color: FieldValue = None
    owner: FieldValue = None
    status: FieldValue = None
    notes: FieldValue = None


class OfficerRecord(BaseRecord):
    name: FieldValue = None
    badge_number: FieldValue = None
    rank: FieldValue = None
    unit: FieldValue = None
    phone: FieldValue = None
    email: FieldValue = None
    notes: FieldValue = None


class IncidentRecord(BaseRecord):
    incident_number: FieldValue = None
    title: FieldValue = None
    type: FieldValue = None
    date_time: FieldValue = None
    location: FieldValue = None
    officer: FieldValue = None
    description: FieldValue = None
    status: FieldValue = None
    notes: FieldValue = None


COLLECTIONS: Dict[str, Type[BaseRecord]] = {
    "cases": CaseRecord,
    "evidence": EvidenceRecord,
    "suspects": SuspectRecord,
    "witnesses": WitnessRecord,
    "timeline": TimelineEventRecord,
    "documents": DocumentRecord,
    "vehicles": VehicleRecord,
    "officers": OfficerRecord,
    "incidents": IncidentRecord,
}

# Collections whose records carry a soft ``caseId`` reference.
CASE_SCOPED_COLLECTIONS = ("evidence", "timeline", "documents")


class CaseFileDocument(BaseModel):
    """
    The whole persisted document: one ordered list per collection plus
    the timestamp of the last successful save.

    Collections missing from an older document default to empty lists, as
    do collections stored as ``null`` or any other non-list value. Entries
    that are not JSON objects are dropped with a warning.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    cases: List[CaseRecord] = Field(default_factory=list)
    evidence: List[EvidenceRecord] = Field(default_factory=list)
    suspects: List[SuspectRecord] = Field(default_factory=list)
    witnesses: List[WitnessRecord] = Field(default_factory=list)
    timeline: List[TimelineEventRecord] = Field(default_factory=list)
    documents: List[DocumentRecord] = Field(default_factory=list)
    vehicles: List[VehicleRecord] = Field(default_factory=list)
    officers: List[OfficerRecord] = Field(default_factory=list)
    incidents: List[IncidentRecord] = Field(default_factory=list)
    last_updated: FieldValue = None

    @field_validator(*COLLECTIONS, mode="before")
    @classmethod
    def _coerce_collection(cls, value, info):
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning(
                "Collection %s is %s, not a list; reading it as empty",
                info.field_name,
                type(value).__name__,
            )
            return []
        entries = [item for item in value if isinstance(item, (dict, BaseRecord))]
        if len(entries) != len(value):
            logger.warning(
                "Dropped %d non-object entries from collection %s",
                len(value) - len(entries),
                info.field_name,
            )
        return entries

    @classmethod
    def empty(cls) -> "CaseFileDocument":
        return cls(last_updated=utc_timestamp())

    def records(self, collection: str) -> List[BaseRecord]:
        return getattr(self, collection)

    def replace_records(self, collection: str, records: List[BaseRecord]) -> None:
        setattr(self, collection, list(records))

    def to_wire(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            name: [record.to_wire() for record in self.records(name)]
            for name in COLLECTIONS
        }
        payload["lastUpdated"] = self.last_updated
        for key, value in (self.model_extra or {}).items():
            payload.setdefault(key, value)
        return payload
