from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.errors import (
    DocumentNotFound,
    InvalidActivityType,
    NotAuthorized,
    RecordWriteError,
)
from app.metrics import ACTIVITY_EVENTS
from app.models.pdf import Activity, ActivityType, Document
from app.services.common import apply_ordering, apply_pagination, coerce_uuid
from app.services.response import ListResponseMixin

logger = logging.getLogger(__name__)

_VALID_TYPES = sorted(e.value for e in ActivityType)


def parse_activity_type(value: str | ActivityType) -> ActivityType:
    if isinstance(value, ActivityType):
        return value
    try:
        return ActivityType(value)
    except ValueError:
        raise InvalidActivityType(
            f"Invalid activity type. Allowed: {', '.join(_VALID_TYPES)}"
        ) from None


def get_owned_document(db: Session, document_id, owner_id: str) -> Document:
    try:
        document = db.get(Document, coerce_uuid(document_id))
    except ValueError:
        document = None
    if not document:
        raise DocumentNotFound()
    if document.owner_id != owner_id:
        raise NotAuthorized()
    return document


def _apply_side_effect(
    document: Document, activity_type: ActivityType, now: datetime
) -> None:
    if activity_type == ActivityType.view:
        # SQL-side increment so concurrent views never lose a count
        document.view_count = Document.view_count + 1
        document.last_viewed_at = now
    elif activity_type == ActivityType.star:
        document.is_starred = True
    elif activity_type == ActivityType.unstar:
        document.is_starred = False


class Activities(ListResponseMixin):
    @staticmethod
    def record(
        db: Session,
        activity_type: str | ActivityType,
        owner_id: str,
        document_id: str | None = None,
        details: str | None = None,
    ) -> Activity:
        """Append an activity entry and apply its document side effect.

        The side effect (view counter, star flag) and the audit row are
        committed together, so neither exists without the other.
        """
        activity_type = parse_activity_type(activity_type)

        document = None
        if document_id is not None:
            document = get_owned_document(db, document_id, owner_id)

        now = datetime.now(timezone.utc)
        if document is not None:
            _apply_side_effect(document, activity_type, now)

        activity = Activity(
            type=activity_type,
            document_id=document.id if document is not None else None,
            owner_id=owner_id,
            details=details,
            created_at=now,
        )
        db.add(activity)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to record %s activity: %s", activity_type.value, e)
            raise RecordWriteError("Activity could not be recorded") from e

        db.refresh(activity)
        if document is not None:
            db.refresh(document)
        ACTIVITY_EVENTS.labels(type=activity_type.value).inc()
        logger.info(
            "Recorded %s activity %s for %s",
            activity_type.value,
            activity.id,
            owner_id,
        )
        return activity

    @staticmethod
    def list(
        db: Session,
        owner_id: str,
        activity_type: str | None,
        document_id: str | None,
        order_by: str,
        order_dir: str,
        limit: int,
        offset: int,
    ) -> list[Activity]:  # type: ignore[override]
        stmt = select(Activity).where(Activity.owner_id == owner_id)
        if activity_type is not None:
            stmt = stmt.where(Activity.type == parse_activity_type(activity_type))
        if document_id is not None:
            try:
                stmt = stmt.where(Activity.document_id == coerce_uuid(document_id))
            except ValueError:
                raise DocumentNotFound() from None
        stmt = apply_ordering(
            stmt,
            order_by,
            order_dir,
            {"created_at": Activity.created_at},
            tiebreaker=Activity.id,
        )
        return db.scalars(apply_pagination(stmt, limit, offset)).all()

    @staticmethod
    def recent(db: Session, owner_id: str, limit: int) -> list[Activity]:
        stmt = (
            select(Activity)
            .where(Activity.owner_id == owner_id)
            .options(selectinload(Activity.document))
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(limit)
        )
        return db.scalars(stmt).all()


activities = Activities()
