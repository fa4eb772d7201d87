from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_user_auth
from app.db import get_db
from app.schemas.pdf import UserStats
from app.services.stats import user_stats

router = APIRouter(prefix="/user", tags=["stats"])


@router.get("/stats", response_model=UserStats)
def get_user_stats(
    owner_id: str = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return user_stats.get(db, owner_id)
