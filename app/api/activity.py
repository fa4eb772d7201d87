from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import require_user_auth
from app.config import settings
from app.db import get_db
from app.schemas.common import ListResponse
from app.schemas.pdf import ActivityCreate, ActivityRead, RecentActivityRead
from app.services.activity import activities

router = APIRouter(prefix="/activity", tags=["activity"])


@router.post("", response_model=ActivityRead, status_code=status.HTTP_201_CREATED)
def record_activity(
    payload: ActivityCreate,
    owner_id: str = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return activities.record(
        db,
        payload.type,
        owner_id,
        document_id=payload.document_id,
        details=payload.details,
    )


@router.get("/recent", response_model=list[RecentActivityRead])
def recent_activity(
    limit: int | None = Query(default=None, ge=1, le=50),
    owner_id: str = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return activities.recent(db, owner_id, limit or settings.recent_activity_limit)


@router.get("", response_model=ListResponse[ActivityRead])
def list_activity(
    type_filter: str | None = Query(default=None, alias="type"),
    document_id: str | None = Query(default=None, alias="documentId"),
    order_dir: str = Query(default="desc", pattern="^(asc|desc)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    owner_id: str = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return activities.list_response(
        db,
        owner_id,
        type_filter,
        document_id,
        "created_at",
        order_dir,
        limit=limit,
        offset=offset,
    )
