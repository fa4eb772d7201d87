from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.api.deps import get_store, require_user_auth
from app.config import settings
from app.db import get_db
from app.schemas.pdf import UploadResult
from app.services.storage import ObjectStore
from app.services.upload import uploads

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadResult)
def upload_pdf(
    file: UploadFile = File(...),
    owner_id: str = Depends(require_user_auth),
    store: ObjectStore = Depends(get_store),
    db: Session = Depends(get_db),
):
    # One byte past the ceiling is enough to reject oversize bodies
    data = file.file.read(settings.upload_max_size_bytes + 1)
    return uploads.upload(db, data, file.filename, file.content_type, owner_id, store)
