import uuid
from dataclasses import replace
from datetime import datetime, timezone
from unittest.mock import patch

from app.config import settings
from app.models.pdf import Activity, ActivityType, Document
from app.services import stats as stats_service
from app.services.stats import UserStatsService, _recent_months

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def _document(owner_id, created_at, **kwargs):
    doc_id = uuid.uuid4()
    values = dict(
        id=doc_id,
        owner_id=owner_id,
        name=f"{doc_id}.pdf",
        file_hash=uuid.uuid4().hex * 2,
        dedup_key=uuid.uuid4().hex * 2,
        storage_key=f"pdfs/{doc_id}.pdf",
        storage_url=f"/uploads/pdfs/{doc_id}.pdf",
        file_size=1000,
        created_at=created_at,
        updated_at=created_at,
    )
    values.update(kwargs)
    return Document(**values)


class TestRecentMonths:
    def test_oldest_first(self):
        assert _recent_months(NOW, 3) == [(2026, 1), (2026, 2), (2026, 3)]

    def test_wraps_year(self):
        assert _recent_months(NOW, 6) == [
            (2025, 10),
            (2025, 11),
            (2025, 12),
            (2026, 1),
            (2026, 2),
            (2026, 3),
        ]


class TestUserStats:
    def test_empty_account(self, db_session, owner_id):
        stats = UserStatsService.get(db_session, owner_id, now=NOW)
        assert stats.total_pdfs == 0
        assert stats.starred_pdfs == 0
        assert stats.total_views == 0
        assert stats.storage.used == 0
        assert stats.storage.percentage == 0
        assert [m.count for m in stats.activity_data] == [0] * 6
        assert stats.activity_counts == {t.value: 0 for t in ActivityType}

    def test_totals(self, db_session, owner_id, other_owner_id):
        db_session.add_all(
            [
                _document(owner_id, NOW, is_starred=True, view_count=3),
                _document(owner_id, NOW, view_count=2, file_size=500),
                _document(other_owner_id, NOW, view_count=9),
            ]
        )
        db_session.commit()

        stats = UserStatsService.get(db_session, owner_id, now=NOW)
        assert stats.total_pdfs == 2
        assert stats.starred_pdfs == 1
        assert stats.total_views == 5
        assert stats.storage.used == 1500

    def test_storage_percentage(self, db_session, owner_id):
        db_session.add(_document(owner_id, NOW, file_size=250))
        db_session.commit()
        limited = replace(settings, storage_limit_bytes=1000)
        with patch.object(stats_service, "settings", limited):
            stats = UserStatsService.get(db_session, owner_id, now=NOW)
        assert stats.storage.limit == 1000
        assert stats.storage.percentage == 25.0

    def test_monthly_buckets(self, db_session, owner_id):
        db_session.add_all(
            [
                _document(owner_id, datetime(2026, 3, 1, tzinfo=timezone.utc)),
                _document(owner_id, datetime(2026, 3, 10, tzinfo=timezone.utc)),
                _document(owner_id, datetime(2025, 12, 24, tzinfo=timezone.utc)),
                # outside the six month window
                _document(owner_id, datetime(2025, 9, 30, tzinfo=timezone.utc)),
            ]
        )
        db_session.commit()

        stats = UserStatsService.get(db_session, owner_id, now=NOW)
        assert [(m.month, m.count) for m in stats.activity_data] == [
            ("Oct", 0),
            ("Nov", 0),
            ("Dec", 1),
            ("Jan", 0),
            ("Feb", 0),
            ("Mar", 2),
        ]
        assert stats.total_pdfs == 4

    def test_activity_counts_zero_filled(self, db_session, owner_id, other_owner_id):
        db_session.add_all(
            [
                Activity(type=ActivityType.share, owner_id=owner_id),
                Activity(type=ActivityType.share, owner_id=owner_id),
                Activity(type=ActivityType.delete, owner_id=owner_id),
                Activity(type=ActivityType.share, owner_id=other_owner_id),
            ]
        )
        db_session.commit()

        counts = UserStatsService.get(db_session, owner_id, now=NOW).activity_counts
        assert counts["SHARE"] == 2
        assert counts["DELETE"] == 1
        assert counts["VIEW"] == 0
        assert set(counts) == {t.value for t in ActivityType}

    def test_camel_case_payload(self, db_session, owner_id):
        payload = UserStatsService.get(db_session, owner_id, now=NOW).model_dump(
            by_alias=True
        )
        assert {"totalPdfs", "starredPdfs", "totalViews", "activityData"} <= set(
            payload
        )
