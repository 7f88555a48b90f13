"""
Record Search
=============
Case-insensitive substring search fanned out over every searchable
collection of one document snapshot.

A record matches when the query occurs in any of its collection's
declared fields. Non-string, empty and absent fields are skipped. Results
keep each collection's stored order, and every searchable collection is
present in the result even when nothing matched.

This is a full scan by design; the corpus is a single operator's case
file.
"""

from typing import Dict, List, Sequence, Tuple

from models.records import BaseRecord, CaseFileDocument

# Persisted (camelCase) field names, in match order.
SEARCH_FIELDS: Dict[str, Tuple[str, ...]] = {
    "cases": ("caseNumber", "title", "description", "location", "status", "officer"),
    "evidence": ("itemNumber", "description", "type", "location", "officer", "notes"),
    "suspects": ("name", "aliases", "address", "phone", "email", "description", "notes"),
    "witnesses": ("name", "address", "phone", "email", "statement", "notes"),
    "timeline": ("description", "location", "officer", "notes"),
    "documents": ("title", "content", "type", "author", "notes"),
    "vehicles": ("plate", "vin", "make", "model", "color", "owner", "status", "notes"),
}

SearchResults = Dict[str, List[BaseRecord]]


def matches(record: BaseRecord, needle: str, fields: Sequence[str]) -> bool:
    """True if the lower-cased ``needle`` occurs in any declared string field."""
    wire = record.to_wire()
    for field in fields:
        value = wire.get(field)
        if isinstance(value, str) and value and needle in value.lower():
            return True
    return False


def search_document(document: CaseFileDocument, query: str) -> SearchResults:
    """
    Search every collection in ``SEARCH_FIELDS``.

    Raises ValueError for an empty or whitespace-only query.
    """
    if not isinstance(query, str) or not query.strip():
        raise ValueError("Search query is required")

    needle = query.lower()
    results: SearchResults = {}
    for collection, fields in SEARCH_FIELDS.items():
        results[collection] = [
            record
            for record in document.records(collection)
            if matches(record, needle, fields)
        ]
    return results
