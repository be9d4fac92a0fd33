"""
Module containing data models for the asset uploader.
"""
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .errors import PlanError, UploadError

ByteContent = Union[bytes, bytearray, memoryview]


class UploadState(enum.Enum):
    """Lifecycle states of a single upload."""
    PLANNING = "planning"
    TRANSFERRING = "transferring"
    COMPLETING = "completing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class FileMetadata:
    """Represents the local file being uploaded."""
    name: str
    size: int
    mime_type: str
    content: ByteContent = field(repr=False)

    def __post_init__(self):
        """Validate the file metadata."""
        if not self.name:
            raise ValueError("name cannot be empty")
        if self.size < 0:
            raise ValueError(f"size must be non-negative, got {self.size}")
        if len(self.content) != self.size:
            raise ValueError(
                f"content length {len(self.content)} does not match size {self.size}"
            )


@dataclass(frozen=True)
class PartSpec:
    """One part of a part plan, as issued by the control plane."""
    part_number: int
    start: int
    end: int
    url: str = field(repr=False)

    @property
    def size(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class PartPlan:
    """The presigned part layout for one multipart upload."""
    upload_id: str
    asset_id: str
    parts: Tuple[PartSpec, ...]

    @property
    def total_bytes(self) -> int:
        return self.parts[-1].end if self.parts else 0

    def validate(self, size: int) -> None:
        """Check that the parts are numbered 1..n and exactly cover [0, size).

        Args:
            size: Size of the file the plan must cover

        Raises:
            PlanError: On an empty part list, misnumbered parts, empty
                ranges, gaps, overlaps, or a size mismatch
        """
        if not self.parts:
            raise PlanError("part plan has no parts")

        expected_start = 0
        for index, part in enumerate(self.parts, start=1):
            if part.part_number != index:
                raise PlanError(
                    f"part at position {index} has part number {part.part_number}"
                )
            if not part.url:
                raise PlanError(f"part {index} has an empty url")
            if part.end <= part.start:
                raise PlanError(f"part {index} has empty range [{part.start}, {part.end})")
            if part.start != expected_start:
                kind = "gap" if part.start > expected_start else "overlap"
                raise PlanError(
                    f"part {index} starts at {part.start}, expected {expected_start} ({kind})"
                )
            expected_start = part.end

        if expected_start != size:
            raise PlanError(f"parts cover [0, {expected_start}) but file size is {size}")


@dataclass(frozen=True)
class UploadedPart:
    """A part accepted by the storage backend."""
    part_number: int
    etag: str

    def to_payload(self) -> Dict[str, Any]:
        return {"PartNumber": self.part_number, "ETag": self.etag}


@dataclass(frozen=True)
class CompletionRequest:
    """The final part list reported back to the control plane."""
    upload_id: str
    parts: Tuple[UploadedPart, ...]

    @classmethod
    def from_parts(cls, upload_id: str,
                   parts: Iterable[UploadedPart]) -> "CompletionRequest":
        """Build a request ordered by part number.

        Args:
            upload_id: Multipart upload ID from the part plan
            parts: Uploaded parts in any order

        Returns:
            CompletionRequest with one entry per part number

        Raises:
            ValueError: If a part number appears more than once
        """
        by_number: Dict[int, UploadedPart] = {}
        for part in parts:
            if part.part_number in by_number:
                raise ValueError(f"duplicate part number {part.part_number}")
            by_number[part.part_number] = part
        return cls(
            upload_id=upload_id,
            parts=tuple(by_number[n] for n in sorted(by_number))
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "upload_id": self.upload_id,
            "parts": [part.to_payload() for part in self.parts],
        }


@dataclass(frozen=True)
class UploadProgress:
    """Represents the progress of an ongoing upload."""
    asset_id: str
    total_parts: int
    completed_parts: int
    failed_parts: int
    bytes_uploaded: int
    total_bytes: int


@dataclass(frozen=True)
class UploadResult:
    """Represents the outcome of a single file upload."""
    file_name: str
    state: UploadState
    asset_id: Optional[str] = None
    upload_id: Optional[str] = None
    parts: List[UploadedPart] = field(default_factory=list)
    error: Optional[UploadError] = None

    @property
    def success(self) -> bool:
        return self.state is UploadState.DONE
