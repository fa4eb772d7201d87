from app.models.pdf import (  # noqa: F401
    PDF_MIME_TYPE,
    Activity,
    ActivityType,
    Document,
)
