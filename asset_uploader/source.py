"""
Module for slicing file content by absolute byte offsets.
"""
from .errors import InvalidRange
from .models import ByteContent


class ByteRangeSource:
    """Read-only view over a file's bytes, sliced without copying."""

    def __init__(self, content: ByteContent):
        self._view = memoryview(content).cast("B").toreadonly()

    @property
    def length(self) -> int:
        return len(self._view)

    def slice(self, start: int, end: int) -> memoryview:
        """Return the bytes in the half-open range [start, end).

        Args:
            start: First byte offset (inclusive)
            end: Last byte offset (exclusive)

        Returns:
            Read-only memoryview sharing memory with the source

        Raises:
            InvalidRange: Unless 0 <= start < end <= length
        """
        if not isinstance(start, int) or not isinstance(end, int):
            raise InvalidRange(f"range bounds must be integers, got [{start!r}, {end!r})")
        if not 0 <= start < end <= self.length:
            raise InvalidRange(
                f"range [{start}, {end}) is outside of [0, {self.length})"
            )
        return self._view[start:end]
