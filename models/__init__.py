"""Record schemas for the case file document."""

from models.records import (
    CASE_SCOPED_COLLECTIONS,
    COLLECTIONS,
    BaseRecord,
    CaseFileDocument,
    CaseRecord,
    DocumentRecord,
    EvidenceRecord,
    IncidentRecord,
    OfficerRecord,
    SuspectRecord,
    TimelineEventRecord,
    VehicleRecord,
    WitnessRecord,
    utc_timestamp,
)

__all__ = [
    "CASE_SCOPED_COLLECTIONS",
    "COLLECTIONS",
    "BaseRecord",
    "CaseFileDocument",
    "CaseRecord",
    "DocumentRecord",
    "EvidenceRecord",
    "IncidentRecord",
    "OfficerRecord",
    "SuspectRecord",
    "TimelineEventRecord",
    "VehicleRecord",
    "WitnessRecord",
    "utc_timestamp",
]
