from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_store, require_user_auth
from app.db import get_db
from app.models.pdf import PDF_MIME_TYPE
from app.schemas.common import ListResponse
from app.schemas.pdf import DocumentRead
from app.services.pdf_document import documents
from app.services.storage import ObjectStore

router = APIRouter(prefix="/pdfs", tags=["pdfs"])


@router.get("", response_model=ListResponse[DocumentRead])
def list_pdfs(
    starred: bool | None = None,
    order_by: str = Query(default="created_at"),
    order_dir: str = Query(default="desc", pattern="^(asc|desc)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    owner_id: str = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return documents.list_response(
        db,
        owner_id,
        starred,
        order_by,
        order_dir,
        limit=limit,
        offset=offset,
    )


@router.get("/{document_id}", response_model=DocumentRead)
def get_pdf(
    document_id: str,
    owner_id: str = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return documents.get(db, document_id, owner_id)


@router.get("/{document_id}/file")
def get_pdf_file(
    document_id: str,
    download: bool = False,
    owner_id: str = Depends(require_user_auth),
    store: ObjectStore = Depends(get_store),
    db: Session = Depends(get_db),
):
    document, content = documents.read_content(
        db, document_id, owner_id, store, download=download
    )
    disposition = "attachment" if download else "inline"
    filename = quote(document.name)
    return Response(
        content=content,
        media_type=PDF_MIME_TYPE,
        headers={"Content-Disposition": f"{disposition}; filename*=UTF-8''{filename}"},
    )


@router.post("/{document_id}/star", response_model=DocumentRead)
def star_pdf(
    document_id: str,
    owner_id: str = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return documents.star(db, document_id, owner_id)


@router.delete("/{document_id}/star", response_model=DocumentRead)
def unstar_pdf(
    document_id: str,
    owner_id: str = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return documents.unstar(db, document_id, owner_id)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pdf(
    document_id: str,
    owner_id: str = Depends(require_user_auth),
    store: ObjectStore = Depends(get_store),
    db: Session = Depends(get_db),
):
    documents.delete(db, document_id, owner_id, store)
