from dataclasses import dataclass
from enum import Enum
from typing import Union

# Stable identifier of one data item (string or number)
ItemId = Union[str, int]


class Direction(Enum):
    """Scroll direction of the last scroll event."""
    FRONT = "front"
    BEHIND = "behind"
    STATIC = "static"


@dataclass(frozen=True)
class Range:
    """Indices to materialize (inclusive) and the padding standing in for everything else.

    pad_front covers items [0, start) plus the header, pad_behind covers (end, length) plus the footer.
    """
    start: int = 0
    end: int = 0
    pad_front: float = 0.0
    pad_behind: float = 0.0

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index <= self.end

    def indices(self) -> range:
        """Indices covered by this range, in render order."""
        return range(self.start, self.end + 1)
