"""
Record Policies
===============
Collection-specific rules applied by the record store inside a single
load-mutate-save cycle.

  - Cascade: deleting a case removes its evidence, timeline events and
    documents in the same document rewrite.
  - Ordering: the timeline is kept ascending by ``dateTime``. The sort is
    stable; events whose ``dateTime`` is missing or unparseable sort after
    every dated event, in their existing relative order.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from models.records import CASE_SCOPED_COLLECTIONS, CaseFileDocument, TimelineEventRecord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Cascade
# ---------------------------------------------------------------------------


def cascade_case_deletion(document: CaseFileDocument, case_id: str) -> Dict[str, int]:
    """
    Drop every case-scoped record whose ``caseId`` equals ``case_id``.

    Mutates ``document`` in place and returns the number of records
    removed per collection. The caller is responsible for saving.
    """
    removed: Dict[str, int] = {}
    for collection in CASE_SCOPED_COLLECTIONS:
        records = document.records(collection)
        kept = [r for r in records if getattr(r, "case_id", None) != case_id]
        removed[collection] = len(records) - len(kept)
        document.replace_records(collection, kept)

    if any(removed.values()):
        logger.info("Cascade for case %s removed %s", case_id, removed)
    return removed


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def parse_event_time(value: Any) -> Optional[datetime]:
    """
    Parse a timeline ``dateTime`` value.

    Accepts ISO-8601 dates and date-times (``2024-03-01``,
    ``2024-03-01T10:30``, ``...Z``, ``...+02:00``). Naive values are taken
    as UTC. Returns None for anything else.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _timeline_sort_key(event: TimelineEventRecord) -> Tuple[int, float]:
    parsed = parse_event_time(event.date_time)
    if parsed is None:
        return (1, 0.0)
    return (0, parsed.timestamp())


def sort_timeline(events: Sequence[TimelineEventRecord]) -> List[TimelineEventRecord]:
    """Return ``events`` sorted ascending by ``dateTime`` (stable)."""
    return sorted(events, key=_timeline_sort_key)
