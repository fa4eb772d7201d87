from fastapi import HTTPException, Request

from app.config import settings
from app.services.storage import ObjectStore, get_object_store


def require_user_auth(request: Request) -> str:
    """Return the caller's owner id as forwarded by the identity provider."""
    owner_id = (request.headers.get(settings.identity_header) or "").strip()
    if not owner_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return owner_id


def get_store() -> ObjectStore:
    return get_object_store()


__all__ = [
    "get_store",
    "require_user_auth",
]
