"""Content fingerprints used as the deduplication key."""

import hashlib
from typing import BinaryIO

CHUNK_SIZE = 1 << 20


def fingerprint(
    source: bytes | bytearray | memoryview | BinaryIO,
    expected_size: int | None = None,
) -> str:
    """Return the lowercase hex SHA-256 digest of ``source``.

    ``source`` is either a bytes-like object or a binary stream, which is
    read to exhaustion in chunks. When ``expected_size`` is given, a stream
    that ends early raises ``OSError`` instead of hashing a truncated
    payload. Read errors from the stream propagate unchanged.
    """
    digest = hashlib.sha256()
    if isinstance(source, (bytes, bytearray, memoryview)):
        digest.update(source)
        total = len(source)
    else:
        total = 0
        for chunk in iter(lambda: source.read(CHUNK_SIZE), b""):
            digest.update(chunk)
            total += len(chunk)

    if expected_size is not None and total != expected_size:
        raise OSError(
            f"Truncated input: read {total} bytes, expected {expected_size}"
        )
    return digest.hexdigest()
