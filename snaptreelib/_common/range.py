"""Last-modified ranges used to partition or bound a document scan."""

import sys
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


MAX_MODIFIED = sys.maxsize


@dataclass(frozen=True)
class LastModifiedRange:
    """Half-open interval ``[lower, upper)`` of document modification times.

    Documents whose ``modified`` value is on or after ``lower`` and before
    ``upper`` fall inside the range. The default instance covers every
    document in the store.
    """

    lower: int = 0
    upper: int = MAX_MODIFIED

    def __post_init__(self):
        if self.lower > self.upper:
            raise ValueError(
                f"Lower limit {self.lower} cannot be higher than upper limit {self.upper}"
            )

    def contains(self, modified: Optional[int]) -> bool:
        """Check whether a document modified at ``modified`` is in range.

        Documents without a modification time are never in a range.
        """
        if modified is None:
            return False
        return self.lower <= modified < self.upper

    def __contains__(self, modified) -> bool:
        return self.contains(modified)

    def covers_all_documents(self) -> bool:
        return self.lower == 0 and self.upper == MAX_MODIFIED

    def is_empty(self) -> bool:
        return self.lower == self.upper

    def check_overlap(self, other: 'LastModifiedRange') -> bool:
        """True if the two ranges share at least one timestamp."""
        if self.is_empty() or other.is_empty():
            return False
        return self.lower < other.upper and other.lower < self.upper

    def split_at(self, boundary: int) -> Tuple['LastModifiedRange', 'LastModifiedRange']:
        """Split into the adjacent ranges ``[lower, boundary)`` and ``[boundary, upper)``."""
        if not self.lower <= boundary <= self.upper:
            raise ValueError(f"Boundary {boundary} is outside {self}")
        return (LastModifiedRange(self.lower, boundary),
                LastModifiedRange(boundary, self.upper))

    def split(self, parts: int) -> List['LastModifiedRange']:
        """Split into ``parts`` disjoint, adjacent ranges covering this one.

        The last range absorbs any remainder. Ranges narrower than ``parts``
        produce empty leading partitions rather than failing.
        """
        if parts <= 0:
            raise ValueError(f"parts must be positive, got {parts}")
        width = (self.upper - self.lower) // parts
        boundaries = [self.lower + width * i for i in range(1, parts)]
        return self.split_at_boundaries(boundaries)

    def split_at_boundaries(self, boundaries: Iterable[int]) -> List['LastModifiedRange']:
        """Split at each of ``boundaries`` (must be sorted and inside the range)."""
        ranges = []
        lower = self.lower
        for boundary in boundaries:
            if boundary < lower or boundary > self.upper:
                raise ValueError(f"Boundaries must be sorted and within {self}")
            ranges.append(LastModifiedRange(lower, boundary))
            lower = boundary
        ranges.append(LastModifiedRange(lower, self.upper))
        return ranges

    def __str__(self) -> str:
        upper = "inf" if self.upper == MAX_MODIFIED else str(self.upper)
        return f"LastModifiedRange[{self.lower}, {upper})"
