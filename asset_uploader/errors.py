"""
Module containing the exception hierarchy for the asset uploader.
"""
from typing import List, Optional


class UploadError(Exception):
    """Base class for all upload failures."""

    stage: str = "upload"


class InvalidRange(UploadError, ValueError):
    """Raised when a byte range falls outside of the source content."""

    stage = "transfer"


class ConfigError(ValueError):
    """Raised when the uploader configuration is incomplete."""


class PlanError(UploadError):
    """The part plan could not be fetched or is structurally invalid."""

    stage = "planning"

    def __init__(self, message: str, status_code: Optional[int] = None,
                 body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TransferError(UploadError):
    """One or more parts failed to transfer.

    Raised by the orchestrator with every part failure it observed, so callers
    can see exactly which parts need attention.
    """

    stage = "transfer"

    def __init__(self, message: str,
                 failures: Optional[List["PartTransferError"]] = None):
        super().__init__(message)
        self.failures = list(failures or [])

    @property
    def part_numbers(self) -> List[int]:
        """Sorted part numbers of the failed parts."""
        return sorted(f.part_number for f in self.failures)


class PartTransferError(TransferError):
    """A single part PUT failed or returned an unusable response."""

    def __init__(self, part_number: int, message: str,
                 status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(f"part {part_number}: {message}")
        self.part_number = part_number
        self.status_code = status_code
        self.body = body
        self.failures = [self]


class CompletionError(UploadError):
    """The control plane rejected or failed the completion call."""

    stage = "completion"

    def __init__(self, message: str, status_code: Optional[int] = None,
                 body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
