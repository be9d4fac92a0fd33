"""
Module for building the per-part headers expected by the storage backend.
"""
import hashlib
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from botocore.auth import SIGV4_TIMESTAMP

from .models import ByteContent

DATE_HEADER = "X-Amz-Date"
CONTENT_SHA256_HEADER = "X-Amz-Content-Sha256"
ALGORITHM_HEADER = "X-Amz-Algorithm"
SIGNING_ALGORITHM = "AWS4-HMAC-SHA256"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransferHeaderBuilder:
    """Builds SigV4-style transfer headers for a presigned part upload.

    The presigned URL already carries the signature, but some backends still
    validate the payload hash at request time, so every part gets the real
    SHA-256 of its own bytes.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """Initialize the header builder.

        Args:
            clock: Returns the current time; defaults to UTC now
        """
        self._clock = clock or _utcnow

    def build(self, data: ByteContent) -> Dict[str, str]:
        """Build the headers for sending exactly ``data``.

        Args:
            data: The bytes of one part

        Returns:
            Dictionary of header names to values
        """
        now = self._clock()
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return {
            DATE_HEADER: now.strftime(SIGV4_TIMESTAMP),
            CONTENT_SHA256_HEADER: hashlib.sha256(data).hexdigest(),
            ALGORITHM_HEADER: SIGNING_ALGORITHM,
        }
