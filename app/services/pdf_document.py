from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import RecordWriteError
from app.metrics import ACTIVITY_EVENTS
from app.models.pdf import Activity, ActivityType, Document
from app.services.activity import Activities, get_owned_document
from app.services.common import apply_ordering, apply_pagination
from app.services.response import ListResponseMixin
from app.services.storage import ObjectStore

logger = logging.getLogger(__name__)


class Documents(ListResponseMixin):
    @staticmethod
    def get(db: Session, document_id: str, owner_id: str) -> Document:
        return get_owned_document(db, document_id, owner_id)

    @staticmethod
    def list(
        db: Session,
        owner_id: str,
        starred: bool | None,
        order_by: str,
        order_dir: str,
        limit: int,
        offset: int,
    ) -> list[Document]:  # type: ignore[override]
        stmt = select(Document).where(Document.owner_id == owner_id)
        if starred is not None:
            stmt = stmt.where(Document.is_starred == starred)
        stmt = apply_ordering(
            stmt,
            order_by,
            order_dir,
            {
                "created_at": Document.created_at,
                "name": Document.name,
                "file_size": Document.file_size,
                "view_count": Document.view_count,
                "last_viewed_at": Document.last_viewed_at,
            },
            tiebreaker=Document.id,
        )
        return db.scalars(apply_pagination(stmt, limit, offset)).all()

    @staticmethod
    def star(db: Session, document_id: str, owner_id: str) -> Document:
        Activities.record(db, ActivityType.star, owner_id, document_id=document_id)
        return get_owned_document(db, document_id, owner_id)

    @staticmethod
    def unstar(db: Session, document_id: str, owner_id: str) -> Document:
        Activities.record(db, ActivityType.unstar, owner_id, document_id=document_id)
        return get_owned_document(db, document_id, owner_id)

    @staticmethod
    def read_content(
        db: Session,
        document_id: str,
        owner_id: str,
        store: ObjectStore,
        download: bool = False,
    ) -> tuple[Document, bytes]:
        document = get_owned_document(db, document_id, owner_id)
        # A download is only recorded once the bytes were actually read
        content = store.get(document.storage_key)
        if download:
            Activities.record(
                db, ActivityType.download, owner_id, document_id=str(document.id)
            )
        return document, content

    @staticmethod
    def delete(
        db: Session, document_id: str, owner_id: str, store: ObjectStore
    ) -> None:
        """Delete a document and its activity history.

        The DELETE entry is account-level (no document reference) so it
        survives the cascade. The stored object is removed after the commit;
        if that fails the object is left for the orphan sweep.
        """
        document = get_owned_document(db, document_id, owner_id)
        storage_key = document.storage_key
        name = document.name

        db.delete(document)
        db.add(
            Activity(
                type=ActivityType.delete,
                document_id=None,
                owner_id=owner_id,
                details=name,
            )
        )
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to delete document %s: %s", document_id, e)
            raise RecordWriteError("Document could not be deleted") from e
        ACTIVITY_EVENTS.labels(type=ActivityType.delete.value).inc()
        logger.info("Deleted document %s for %s", document_id, owner_id)

        try:
            store.delete(storage_key)
        except Exception as e:
            logger.warning("Failed to remove stored object %s: %s", storage_key, e)


documents = Documents()
