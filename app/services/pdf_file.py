import io
import logging
from pathlib import PurePosixPath, PureWindowsPath

from pypdf import PdfReader

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"
DEFAULT_FILE_NAME = "document.pdf"


def has_pdf_signature(file_header: bytes) -> bool:
    return file_header.startswith(PDF_SIGNATURE)


def sanitize_file_name(file_name: str | None) -> str:
    if not file_name:
        return DEFAULT_FILE_NAME
    # Browsers on Windows may send the full client-side path
    name = PureWindowsPath(PurePosixPath(file_name).name).name.strip()
    return name[:500] or DEFAULT_FILE_NAME


def count_pages(data: bytes) -> int | None:
    try:
        return len(PdfReader(io.BytesIO(data)).pages)
    except Exception as e:
        logger.warning("Could not read page count: %s", e)
        return None
