from __future__ import annotations

import calendar
from collections import Counter
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.config import settings
from app.models.pdf import Activity, ActivityType, Document
from app.schemas.pdf import MonthlyCount, StorageUsage, UserStats

ACTIVITY_MONTHS = 6


def _recent_months(now: datetime, count: int) -> list[tuple[int, int]]:
    year, month = now.year, now.month
    months = []
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


class UserStatsService:
    @staticmethod
    def get(db: Session, owner_id: str, now: datetime | None = None) -> UserStats:
        now = now or datetime.now(timezone.utc)
        owned = Document.owner_id == owner_id

        total_pdfs, starred_pdfs, total_views, storage_used = db.execute(
            select(
                func.count(Document.id),
                func.count(Document.id).filter(Document.is_starred.is_(True)),
                func.coalesce(func.sum(Document.view_count), 0),
                func.coalesce(func.sum(Document.file_size), 0),
            ).where(owned)
        ).one()

        storage_limit = settings.storage_limit_bytes
        percentage = (int(storage_used) / (storage_limit or 1)) * 100

        months = _recent_months(now, ACTIVITY_MONTHS)
        window_start = datetime(months[0][0], months[0][1], 1, tzinfo=timezone.utc)
        created = db.scalars(
            select(Document.created_at).where(owned, Document.created_at >= window_start)
        ).all()
        per_month = Counter((ts.year, ts.month) for ts in created)

        type_counts = dict(
            db.execute(
                select(Activity.type, func.count(Activity.id))
                .where(Activity.owner_id == owner_id)
                .group_by(Activity.type)
            ).all()
        )

        return UserStats(
            total_pdfs=total_pdfs,
            starred_pdfs=starred_pdfs,
            total_views=int(total_views),
            storage=StorageUsage(
                used=int(storage_used),
                limit=storage_limit,
                percentage=round(percentage, 2),
            ),
            activity_data=[
                MonthlyCount(month=calendar.month_abbr[m], count=per_month[(y, m)])
                for y, m in months
            ],
            activity_counts={
                t.value: type_counts.get(t, 0) for t in ActivityType
            },
        )


user_stats = UserStatsService()
