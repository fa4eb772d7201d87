from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import RecordWriteError
from app.models.pdf import PDF_MIME_TYPE, Document
from app.services.fingerprint import fingerprint
from app.services.pdf_file import count_pages
from app.services.storage import ObjectStore

logger = logging.getLogger(__name__)

DEDUP_SCOPES = {"global", "owner"}


@dataclass(frozen=True)
class ResolveResult:
    document: Document
    is_new_object: bool

    @property
    def document_id(self) -> uuid.UUID:
        return self.document.id

    @property
    def document_name(self) -> str:
        return self.document.name


def build_dedup_key(file_hash: str, owner_id: str) -> str:
    scope = settings.dedup_scope
    if scope not in DEDUP_SCOPES:
        raise ValueError(
            f"Invalid DEDUP_SCOPE {scope!r}. Allowed: {sorted(DEDUP_SCOPES)}"
        )
    if scope == "owner":
        return f"{owner_id}:{file_hash}"
    return file_hash


class Deduplication:
    @staticmethod
    def find_existing(db: Session, dedup_key: str) -> Document | None:
        stmt = select(Document).where(Document.dedup_key == dedup_key)
        return db.scalars(stmt).first()

    @staticmethod
    def resolve(
        db: Session,
        data: bytes,
        file_name: str,
        owner_id: str,
        store: ObjectStore,
    ) -> ResolveResult:
        """Return the canonical Document for ``data``, storing it if new.

        The order is fixed: fingerprint, lookup, object-store write, record
        insert. The insert commit is the point of no return; anything
        written to the store before it may be left orphaned on failure.
        A unique-constraint conflict on insert means a concurrent upload of
        the same content won, so its row is returned as a duplicate.
        """
        file_hash = fingerprint(data)
        dedup_key = build_dedup_key(file_hash, owner_id)

        existing = Deduplication.find_existing(db, dedup_key)
        if existing is not None:
            logger.info(
                "Duplicate upload of %s by %s resolved to document %s",
                file_hash[:12],
                owner_id,
                existing.id,
            )
            return ResolveResult(document=existing, is_new_object=False)

        document_id = uuid.uuid4()
        storage_key = store.generate_storage_key(str(document_id))
        storage_url = store.put(storage_key, data, PDF_MIME_TYPE)

        document = Document(
            id=document_id,
            owner_id=owner_id,
            name=file_name,
            file_hash=file_hash,
            dedup_key=dedup_key,
            storage_key=storage_key,
            storage_url=storage_url,
            file_size=len(data),
            mime_type=PDF_MIME_TYPE,
            page_count=count_pages(data),
        )
        db.add(document)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            winner = Deduplication.find_existing(db, dedup_key)
            if winner is None:
                logger.error("Document insert for %s failed: %s", file_hash[:12], e)
                raise RecordWriteError() from e
            logger.info(
                "Concurrent upload of %s already stored as document %s; "
                "object %s left orphaned",
                file_hash[:12],
                winner.id,
                storage_key,
            )
            return ResolveResult(document=winner, is_new_object=False)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Document insert for %s failed: %s", file_hash[:12], e)
            raise RecordWriteError() from e

        db.refresh(document)
        logger.info(
            "Stored new document %s (%d bytes) for %s",
            document.id,
            document.file_size,
            owner_id,
        )
        return ResolveResult(document=document, is_new_object=True)


deduplication = Deduplication()
