from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.config import settings
from app.errors import (
    RecordWriteError,
    ServiceError,
    StorageWriteError,
    ValidationError,
)
from app.metrics import UPLOADS
from app.models.pdf import ActivityType
from app.schemas.pdf import UploadResult
from app.services.activity import Activities
from app.services.dedup import Deduplication
from app.services.pdf_file import has_pdf_signature, sanitize_file_name
from app.services.storage import ObjectStore

logger = logging.getLogger(__name__)


def get_allowed_types() -> set[str]:
    return {t.strip() for t in settings.upload_allowed_types.split(",") if t.strip()}


def validate_upload(data: bytes, content_type: str | None) -> None:
    if not data:
        raise ValidationError("Uploaded file is empty")

    allowed_types = get_allowed_types()
    if content_type not in allowed_types:
        raise ValidationError(
            f"Invalid file type. Allowed: {', '.join(sorted(allowed_types))}",
            status_code=415,
        )

    if len(data) > settings.upload_max_size_bytes:
        raise ValidationError(
            f"File too large. Maximum size: {settings.upload_max_size_bytes // 1024 // 1024}MB",
            status_code=413,
        )

    if not has_pdf_signature(data[:8]):
        raise ValidationError(
            "File content is not a valid PDF document.", status_code=415
        )


class Uploads:
    @staticmethod
    def upload(
        db: Session,
        data: bytes,
        file_name: str | None,
        content_type: str | None,
        owner_id: str,
        store: ObjectStore,
    ) -> UploadResult:
        try:
            validate_upload(data, content_type)
        except ValidationError:
            UPLOADS.labels(outcome="rejected").inc()
            raise

        name = sanitize_file_name(file_name)
        try:
            resolved = Deduplication.resolve(db, data, name, owner_id, store)
        except (StorageWriteError, RecordWriteError):
            UPLOADS.labels(outcome="failed").inc()
            raise

        is_duplicate = not resolved.is_new_object
        UPLOADS.labels(outcome="duplicate" if is_duplicate else "new").inc()

        if resolved.is_new_object or settings.record_duplicate_uploads:
            details = (
                f"Duplicate upload of {name}" if is_duplicate else f"Uploaded {name}"
            )
            try:
                Activities.record(
                    db,
                    ActivityType.upload,
                    owner_id,
                    document_id=str(resolved.document_id),
                    details=details,
                )
            except ServiceError as e:
                # Audit failures never fail an upload that is already stored.
                db.rollback()
                logger.warning(
                    "Upload activity for document %s not recorded: %s",
                    resolved.document_id,
                    e.detail,
                )
            except Exception as e:
                db.rollback()
                logger.exception(
                    "Failed to record upload activity for document %s: %s",
                    resolved.document_id,
                    e,
                )

        return UploadResult(
            id=resolved.document_id,
            name=resolved.document_name,
            url=f"/pdf/{resolved.document_id}",
            is_duplicate=is_duplicate,
        )


uploads = Uploads()
