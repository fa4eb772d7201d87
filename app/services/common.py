import uuid

from app.errors import ValidationError


def coerce_uuid(value):
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def apply_ordering(query, order_by, order_dir, allowed_columns, tiebreaker=None):
    """Order by a whitelisted column; ``tiebreaker`` keeps pages stable on ties."""
    if order_by not in allowed_columns:
        raise ValidationError(
            f"Invalid order_by. Allowed: {', '.join(sorted(allowed_columns))}"
        )
    column = allowed_columns[order_by]
    direction = column.desc() if order_dir == "desc" else column.asc()
    query = query.order_by(direction)
    if tiebreaker is not None and tiebreaker is not column:
        query = query.order_by(
            tiebreaker.desc() if order_dir == "desc" else tiebreaker.asc()
        )
    return query


def apply_pagination(query, limit, offset):
    return query.limit(limit).offset(offset)
