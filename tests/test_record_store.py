"""
Tests for the Case File Record Store
====================================
Verifies:
  1. add() returns the stored record with a generated id and timestamps.
  2. Generated ids are pairwise distinct.
  3. Caller fields never override id / createdAt / updatedAt.
  4. update() shallow-merges, refreshes updatedAt, returns None when missing.
  5. delete() is idempotent and always reports success.
  6. Unknown collections are rejected.
  7. list_by_case() filters case-scoped collections.
  8. Evidence photo URIs can be attached and detached.
  9. Dashboard stats.
  10. Concurrent operations in one process do not lose writes.
"""

import threading
from datetime import datetime

import pytest

from models.records import (
    COLLECTIONS,
    CaseRecord,
    EvidenceRecord,
    TimelineEventRecord,
    VehicleRecord,
)
from services.document_store import JsonDocumentStore
from services.errors import UnknownCollectionError
from services.record_store import RecordStore


# ===========================================================================
# 1. add / list / get
# ===========================================================================


class TestAdd:

    def test_add_returns_record_with_identity(self, store):
        case = store.add("cases", {"caseNumber": "CASE-42", "title": "Warehouse theft"})

        assert isinstance(case, CaseRecord)
        assert case.id
        assert case.case_number == "CASE-42"
        assert case.title == "Warehouse theft"
        assert case.created_at == case.updated_at
        datetime.fromisoformat(case.created_at)

    def test_add_persists(self, store, db_path):
        case = store.add("cases", {"title": "Persisted"})

        fresh = RecordStore(JsonDocumentStore(db_path))
        assert fresh.get("cases", case.id).to_wire() == case.to_wire()

    def test_add_appends_in_order(self, store):
        ids = [store.add("suspects", {"name": f"Suspect {i}"}).id for i in range(3)]
        assert [s.id for s in store.list("suspects")] == ids

    @pytest.mark.parametrize("collection", sorted(COLLECTIONS))
    def test_every_collection_supports_crud(self, store, collection):
        record = store.add(collection, {"notes": "first"})
        assert store.get(collection, record.id).notes == "first"

        updated = store.update(collection, record.id, {"notes": "second"})
        assert updated.notes == "second"

        assert store.delete(collection, record.id) is True
        assert store.get(collection, record.id) is None

    def test_timeline_event_has_no_updated_at_on_creation(self, store):
        event = store.add("timeline", {"dateTime": "2024-01-01", "description": "Call received"})

        assert isinstance(event, TimelineEventRecord)
        assert event.created_at
        assert "updatedAt" not in event.to_wire()

    def test_snake_case_fields_are_stored_camel_case(self, store):
        evidence = store.add("evidence", {"case_id": "c1", "item_number": "E-1"})

        assert isinstance(evidence, EvidenceRecord)
        wire = evidence.to_wire()
        assert wire["caseId"] == "c1"
        assert wire["itemNumber"] == "E-1"
        assert "case_id" not in wire

    def test_field_values_are_not_validated(self, store):
        vehicle = store.add("vehicles", {"year": 2019, "plate": None, "tags": ["stolen"]})

        assert isinstance(vehicle, VehicleRecord)
        wire = store.get("vehicles", vehicle.id).to_wire()
        assert wire["year"] == 2019
        assert wire["plate"] is None
        assert wire["tags"] == ["stolen"]

    def test_orphaned_case_id_is_allowed(self, store):
        evidence = store.add("evidence", {"caseId": "no-such-case"})
        assert store.get("evidence", evidence.id).case_id == "no-such-case"

    def test_get_missing_returns_none(self, store):
        assert store.get("cases", "nope") is None

    def test_list_empty_collection(self, store):
        assert store.list("officers") == []


# ===========================================================================
# 2. Identity
# ===========================================================================


class TestIdentity:

    def test_ids_are_unique(self, store):
        ids = {store.add("cases", {"title": f"Case {i}"}).id for i in range(50)}
        assert len(ids) == 50

    def test_ids_are_opaque_strings(self, store):
        record = store.add("witnesses", {"name": "W"})
        assert isinstance(record.id, str)
        assert len(record.id) >= 16


# ===========================================================================
# 3. Immutable fields
# ===========================================================================


class TestImmutableFields:

    def test_add_ignores_caller_identity(self, store):
        case = store.add("cases", {"id": "mine", "createdAt": "2000-01-01", "updatedAt": "2000-01-01"})

        assert case.id != "mine"
        assert case.created_at != "2000-01-01"
        assert case.updated_at != "2000-01-01"

    def test_update_ignores_caller_identity(self, store):
        case = store.add("cases", {"title": "Original"})

        updated = store.update("cases", case.id, {"id": "other", "createdAt": "2000-01-01"})

        assert updated.id == case.id
        assert updated.created_at == case.created_at
        stored = store.get("cases", case.id)
        assert stored.created_at == case.created_at
        assert store.get("cases", "other") is None

    def test_update_ignores_snake_case_identity(self, store):
        case = store.add("cases", {"title": "Original"})
        updated = store.update("cases", case.id, {"created_at": "2000-01-01", "updated_at": "2000-01-01"})

        assert updated.created_at == case.created_at
        assert updated.updated_at != "2000-01-01"


# ===========================================================================
# 4. update
# ===========================================================================


class TestUpdate:

    def test_shallow_merge(self, store):
        case = store.add("cases", {"title": "Theft", "status": "open", "notes": "n1"})

        updated = store.update("cases", case.id, {"status": "closed"})

        assert updated.title == "Theft"
        assert updated.status == "closed"
        assert updated.notes == "n1"
        assert store.get("cases", case.id).status == "closed"

    def test_nested_values_are_replaced_not_merged(self, store):
        evidence = store.add("evidence", {"photos": ["/uploads/a.jpg", "/uploads/b.jpg"]})
        updated = store.update("evidence", evidence.id, {"photos": ["/uploads/c.jpg"]})
        assert updated.photos == ["/uploads/c.jpg"]

    def test_refreshes_updated_at(self, store):
        case = store.add("cases", {"title": "T"})
        updated = store.update("cases", case.id, {"title": "T2"})

        assert datetime.fromisoformat(updated.updated_at) >= datetime.fromisoformat(case.updated_at)
        assert updated.created_at == case.created_at

    def test_timeline_event_gains_updated_at(self, store):
        event = store.add("timeline", {"dateTime": "2024-01-01"})
        updated = store.update("timeline", event.id, {"description": "edited"})
        assert updated.updated_at

    def test_missing_record_returns_none(self, store, db_path):
        store.add("cases", {"title": "T"})
        before = db_path.read_text(encoding="utf-8")

        assert store.update("cases", "missing", {"title": "x"}) is None
        assert db_path.read_text(encoding="utf-8") == before


# ===========================================================================
# 5. delete
# ===========================================================================


class TestDelete:

    def test_delete_removes_record(self, store):
        keep = store.add("witnesses", {"name": "Keep"})
        drop = store.add("witnesses", {"name": "Drop"})

        assert store.delete("witnesses", drop.id) is True

        assert [w.id for w in store.list("witnesses")] == [keep.id]

    def test_delete_nonexistent_is_success_and_no_change(self, store):
        case = store.add("cases", {"title": "Stays"})
        store.add("evidence", {"caseId": case.id})
        before = store.snapshot().to_wire()

        assert store.delete("cases", "nonexistent-id") is True

        after = store.snapshot().to_wire()
        before.pop("lastUpdated")
        after.pop("lastUpdated")
        assert before == after

    def test_delete_twice(self, store):
        case = store.add("cases", {"title": "Once"})
        assert store.delete("cases", case.id) is True
        assert store.delete("cases", case.id) is True


# ===========================================================================
# 6. Collection names
# ===========================================================================


class TestUnknownCollection:

    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.list("bogus"),
            lambda s: s.get("bogus", "x"),
            lambda s: s.add("bogus", {}),
            lambda s: s.update("bogus", "x", {}),
            lambda s: s.delete("bogus", "x"),
        ],
    )
    def test_rejected(self, store, call):
        with pytest.raises(UnknownCollectionError):
            call(store)

    def test_is_value_error(self, store):
        with pytest.raises(ValueError):
            store.list("lastUpdated")


# ===========================================================================
# 7. Case-scoped listing
# ===========================================================================


class TestListByCase:

    def test_filters_by_case(self, store):
        a = store.add("cases", {"title": "A"})
        b = store.add("cases", {"title": "B"})
        e1 = store.add("evidence", {"caseId": a.id})
        store.add("evidence", {"caseId": b.id})
        e3 = store.add("evidence", {"caseId": a.id})

        assert [e.id for e in store.list_by_case("evidence", a.id)] == [e1.id, e3.id]

    def test_works_for_timeline_and_documents(self, store):
        store.add("timeline", {"caseId": "c1", "dateTime": "2024-01-01"})
        store.add("documents", {"caseId": "c1", "title": "Report"})

        assert len(store.list_by_case("timeline", "c1")) == 1
        assert len(store.list_by_case("documents", "c1")) == 1

    def test_rejects_unscoped_collection(self, store):
        with pytest.raises(ValueError):
            store.list_by_case("suspects", "c1")


# ===========================================================================
# 8. Evidence photos
# ===========================================================================


class TestEvidencePhotos:

    def test_attach_appends(self, store):
        evidence = store.add("evidence", {"itemNumber": "E-1"})

        store.add_evidence_photos(evidence.id, ["/uploads/1-a.jpg"])
        updated = store.add_evidence_photos(evidence.id, ["/uploads/2-b.jpg", "/uploads/3-c.jpg"])

        assert updated.photos == ["/uploads/1-a.jpg", "/uploads/2-b.jpg", "/uploads/3-c.jpg"]

    def test_detach_by_filename(self, store):
        evidence = store.add("evidence", {"photos": ["/uploads/1-a.jpg", "/uploads/2-b.jpg"]})

        updated = store.remove_evidence_photo(evidence.id, "1-a.jpg")

        assert updated.photos == ["/uploads/2-b.jpg"]

    def test_unknown_evidence(self, store):
        assert store.add_evidence_photos("missing", ["/uploads/x.jpg"]) is None
        assert store.remove_evidence_photo("missing", "x.jpg") is None


# ===========================================================================
# 9. Stats
# ===========================================================================


class TestStats:

    def test_counts(self, store):
        store.add("cases", {"status": "open"})
        store.add("cases", {"status": "investigating"})
        store.add("cases", {"status": "closed"})
        store.add("cases", {})
        store.add("evidence", {})
        store.add("suspects", {})
        store.add("suspects", {})

        stats = store.stats()

        assert stats.to_dict() == {
            "totalCases": 4,
            "activeCases": 3,
            "closedCases": 1,
            "evidenceCount": 1,
            "suspectsCount": 2,
            "witnessesCount": 0,
        }


# ===========================================================================
# 10. Serialized load-mutate-save
# ===========================================================================


class TestConcurrency:

    def test_threads_do_not_lose_writes(self, store):
        def _worker(n):
            for i in range(10):
                store.add("cases", {"title": f"worker-{n}-{i}"})

        threads = [threading.Thread(target=_worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.list("cases")) == 80

    def test_concurrent_updates_all_apply(self, store):
        case = store.add("cases", {})

        def _worker(n):
            store.update("cases", case.id, {f"field{n}": n})

        threads = [threading.Thread(target=_worker, args=(n,)) for n in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        wire = store.get("cases", case.id).to_wire()
        for n in range(10):
            assert wire[f"field{n}"] == n
