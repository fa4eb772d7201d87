import logging
from datetime import datetime, timedelta, timezone

from app.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.storage.purge_orphaned_objects", ignore_result=True)
def purge_orphaned_objects() -> int:
    """Periodic task removing stored objects that no Document references.

    Orphans come from record inserts that failed or lost a race after the
    object-store write. Objects younger than the grace period are skipped
    since their record insert may still be in flight.
    """
    from sqlalchemy import select

    from app.config import settings
    from app.db import SessionLocal
    from app.models.pdf import Document
    from app.services.storage import get_object_store

    store = get_object_store()
    cutoff = datetime.now(timezone.utc) - timedelta(
        seconds=settings.orphan_grace_seconds
    )
    db = SessionLocal()
    count = 0
    try:
        referenced = set(db.scalars(select(Document.storage_key)).all())
        for stored in store.list_objects():
            if stored.key in referenced or stored.last_modified > cutoff:
                continue
            try:
                store.delete(stored.key)
                count += 1
            except Exception as e:
                logger.warning("Failed to purge orphaned object %s: %s", stored.key, e)

        logger.info("Purged %d orphaned objects", count)
    except Exception as e:
        logger.exception("Failed to purge orphaned objects: %s", e)
    finally:
        db.close()
    return count
