import uuid
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.errors import (
    DocumentNotFound,
    InvalidActivityType,
    NotAuthorized,
    RecordWriteError,
)
from app.models.pdf import Activity, ActivityType, Document
from app.services.activity import Activities, parse_activity_type
from app.services.dedup import Deduplication
from tests.mocks import make_pdf


def _make_document(db_session, owner_id, object_store, title="doc"):
    result = Deduplication.resolve(
        db_session, make_pdf(title), f"{title}.pdf", owner_id, object_store
    )
    return result.document


def _count_activities(db_session, **filters):
    stmt = select(func.count(Activity.id))
    for key, value in filters.items():
        stmt = stmt.where(getattr(Activity, key) == value)
    return db_session.scalar(stmt)


class TestParseActivityType:
    @pytest.mark.parametrize(
        "value", ["UPLOAD", "VIEW", "DOWNLOAD", "DELETE", "STAR", "UNSTAR", "SHARE"]
    )
    def test_known_types(self, value):
        assert parse_activity_type(value).value == value

    def test_enum_passthrough(self):
        assert parse_activity_type(ActivityType.view) is ActivityType.view

    def test_unknown_type(self):
        with pytest.raises(InvalidActivityType) as exc:
            parse_activity_type("PRINT")
        assert exc.value.status_code == 400
        assert "UPLOAD" in exc.value.detail


class TestRecordSideEffects:
    def test_view_increments_counter(self, db_session, owner_id, object_store):
        doc = _make_document(db_session, owner_id, object_store)
        last = None
        for _ in range(3):
            last = Activities.record(db_session, "VIEW", owner_id, str(doc.id))

        db_session.refresh(doc)
        assert doc.view_count == 3
        assert doc.last_viewed_at == last.created_at
        assert _count_activities(db_session, document_id=doc.id, type=ActivityType.view) == 3

    def test_star_and_unstar(self, db_session, owner_id, object_store):
        doc = _make_document(db_session, owner_id, object_store)

        Activities.record(db_session, "STAR", owner_id, str(doc.id))
        db_session.refresh(doc)
        assert doc.is_starred is True

        Activities.record(db_session, "STAR", owner_id, str(doc.id))
        db_session.refresh(doc)
        assert doc.is_starred is True

        Activities.record(db_session, "UNSTAR", owner_id, str(doc.id))
        db_session.refresh(doc)
        assert doc.is_starred is False

        Activities.record(db_session, "STAR", owner_id, str(doc.id))
        db_session.refresh(doc)
        assert doc.is_starred is True

    @pytest.mark.parametrize("activity_type", ["UPLOAD", "DOWNLOAD", "DELETE", "SHARE"])
    def test_audit_only_types(self, db_session, owner_id, object_store, activity_type):
        doc = _make_document(db_session, owner_id, object_store)
        activity = Activities.record(
            db_session, activity_type, owner_id, str(doc.id), details="note"
        )
        db_session.refresh(doc)
        assert activity.type.value == activity_type
        assert activity.details == "note"
        assert doc.view_count == 0
        assert doc.is_starred is False
        assert doc.last_viewed_at is None

    def test_account_level_event(self, db_session, owner_id):
        activity = Activities.record(db_session, "SHARE", owner_id, details="invite")
        assert activity.document_id is None
        assert activity.owner_id == owner_id


class TestRecordValidation:
    def test_invalid_type_records_nothing(self, db_session, owner_id):
        with pytest.raises(InvalidActivityType):
            Activities.record(db_session, "PRINT", owner_id)
        assert _count_activities(db_session, owner_id=owner_id) == 0

    def test_missing_document(self, db_session, owner_id):
        with pytest.raises(DocumentNotFound) as exc:
            Activities.record(db_session, "VIEW", owner_id, str(uuid.uuid4()))
        assert exc.value.status_code == 404

    def test_malformed_document_id(self, db_session, owner_id):
        with pytest.raises(DocumentNotFound):
            Activities.record(db_session, "VIEW", owner_id, "not-a-uuid")

    def test_other_owner_not_authorized(
        self, db_session, owner_id, other_owner_id, object_store
    ):
        doc = _make_document(db_session, owner_id, object_store)
        with pytest.raises(NotAuthorized) as exc:
            Activities.record(db_session, "STAR", other_owner_id, str(doc.id))
        assert exc.value.status_code == 403

        db_session.refresh(doc)
        assert doc.is_starred is False
        assert _count_activities(db_session, owner_id=other_owner_id) == 0

    def test_commit_failure_applies_nothing(self, db_session, owner_id, object_store):
        doc = _make_document(db_session, owner_id, object_store)
        with patch.object(
            db_session,
            "commit",
            side_effect=OperationalError("UPDATE", {}, Exception("db down")),
        ):
            with pytest.raises(RecordWriteError):
                Activities.record(db_session, "VIEW", owner_id, str(doc.id))

        db_session.refresh(doc)
        assert doc.view_count == 0
        assert _count_activities(db_session, document_id=doc.id) == 0


class TestActivityQueries:
    def test_recent_is_reverse_chronological(self, db_session, owner_id, object_store):
        doc = _make_document(db_session, owner_id, object_store)
        recorded = [
            Activities.record(db_session, t, owner_id, str(doc.id))
            for t in ("VIEW", "STAR", "DOWNLOAD")
        ]

        recent = Activities.recent(db_session, owner_id, limit=10)
        assert [a.id for a in recent] == [a.id for a in reversed(recorded)]
        assert recent[0].document.id == doc.id

    def test_recent_respects_limit_and_owner(
        self, db_session, owner_id, other_owner_id
    ):
        for _ in range(4):
            Activities.record(db_session, "SHARE", owner_id)
        Activities.record(db_session, "SHARE", other_owner_id)

        recent = Activities.recent(db_session, owner_id, limit=3)
        assert len(recent) == 3
        assert all(a.owner_id == owner_id for a in recent)

    def test_recent_orders_ties_by_id(self, db_session, owner_id):
        stamp = datetime(2026, 1, 1, tzinfo=timezone.utc)
        entries = [
            Activity(type=ActivityType.share, owner_id=owner_id, created_at=stamp)
            for _ in range(3)
        ]
        db_session.add_all(entries)
        db_session.commit()

        recent = Activities.recent(db_session, owner_id, limit=10)
        assert [a.id for a in recent] == sorted(
            (e.id for e in entries), reverse=True
        )

    def test_list_filters_by_type(self, db_session, owner_id, object_store):
        doc = _make_document(db_session, owner_id, object_store)
        Activities.record(db_session, "VIEW", owner_id, str(doc.id))
        Activities.record(db_session, "STAR", owner_id, str(doc.id))

        results = Activities.list(
            db_session,
            owner_id,
            activity_type="VIEW",
            document_id=str(doc.id),
            order_by="created_at",
            order_dir="desc",
            limit=50,
            offset=0,
        )
        assert [a.type for a in results] == [ActivityType.view]

    def test_list_response_envelope(self, db_session, owner_id):
        Activities.record(db_session, "SHARE", owner_id)
        response = Activities.list_response(
            db_session, owner_id, None, None, "created_at", "desc", limit=10, offset=0
        )
        assert response["count"] == 1
        assert response["limit"] == 10
        assert response["offset"] == 0

    def test_existing_rows_never_change(self, db_session, owner_id, object_store):
        doc = _make_document(db_session, owner_id, object_store)
        first = Activities.record(db_session, "VIEW", owner_id, str(doc.id), "first")
        snapshot = (first.id, first.type, first.details, first.created_at)

        Activities.record(db_session, "VIEW", owner_id, str(doc.id), "second")
        Activities.record(db_session, "STAR", owner_id, str(doc.id))

        db_session.expire_all()
        reloaded = db_session.get(Activity, snapshot[0])
        assert (reloaded.id, reloaded.type, reloaded.details, reloaded.created_at) == snapshot
        assert db_session.get(Document, doc.id).view_count == 2
