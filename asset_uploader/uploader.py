"""
Module for transferring single parts to presigned storage URLs.
"""
import logging
from typing import Dict, Optional

import httpx

from .errors import PartTransferError
from .models import PartSpec, UploadedPart

logger = logging.getLogger(__name__)

# Presigned part URLs are signed without a content type; sending one breaks
# the signature check on the storage backend.
SUPPRESSED_HEADERS = ("Content-Type",)


def strip_etag(value: str) -> str:
    """Remove the quote characters surrounding an ETag value."""
    return value.strip().strip('"')


class PartUploader:
    """Uploads one byte range to one presigned URL."""

    def __init__(self, client: Optional[httpx.Client] = None,
                 timeout: float = 300.0):
        """Initialize the part uploader.

        Args:
            client: HTTP client for storage requests. It must not carry
                control-plane credentials.
            timeout: Seconds allowed for each phase of a part request
                (connect, write, read, pool). It bounds stalls rather than
                the total transfer time, so a backend that keeps making
                slow progress is not cut off.
        """
        self.client = client or httpx.Client()
        self.timeout = httpx.Timeout(timeout)

    def close(self) -> None:
        self.client.close()

    def upload(self, part: PartSpec, headers: Dict[str, str],
               data: bytes) -> UploadedPart:
        """PUT the part bytes and return the backend-assigned ETag.

        Args:
            part: The part being uploaded
            headers: Transfer headers for exactly these bytes
            data: The part body

        Returns:
            UploadedPart for this part number

        Raises:
            PartTransferError: If the request fails, is rejected, or the
                response carries no ETag
        """
        request = self.client.build_request(
            "PUT",
            part.url,
            content=data,
            headers=headers,
            timeout=self.timeout,
        )
        for name in SUPPRESSED_HEADERS:
            request.headers.pop(name, None)

        logger.debug(f"PUT part {part.part_number} [{part.start}, {part.end}) to {part.url}")
        try:
            response = self.client.send(request)
        except httpx.TimeoutException as e:
            raise PartTransferError(part.part_number, f"timed out: {e}") from e
        except httpx.HTTPError as e:
            raise PartTransferError(part.part_number, f"request failed: {e}") from e

        if not response.is_success:
            logger.error(
                f"Part {part.part_number} rejected with status {response.status_code}: "
                f"{response.text}"
            )
            raise PartTransferError(
                part.part_number,
                f"storage backend returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        etag = response.headers.get("ETag")
        if not etag or not strip_etag(etag):
            raise PartTransferError(
                part.part_number,
                "response has no ETag header",
                status_code=response.status_code,
                body=response.text,
            )

        uploaded = UploadedPart(part_number=part.part_number, etag=strip_etag(etag))
        logger.debug(f"ETag {uploaded}")
        return uploaded
