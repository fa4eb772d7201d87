def list_response(items, limit: int, offset: int) -> dict:
    items = list(items)
    return {"items": items, "count": len(items), "limit": limit, "offset": offset}


class ListResponseMixin:
    """Adds ``list_response`` to services whose ``list`` takes limit and offset."""

    @classmethod
    def list_response(cls, db, *args, limit: int, offset: int, **kwargs) -> dict:
        items = cls.list(db, *args, limit=limit, offset=offset, **kwargs)
        return list_response(items, limit, offset)
