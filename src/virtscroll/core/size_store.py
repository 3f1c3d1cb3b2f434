import math
from numbers import Real
from typing import Dict, Optional

from .range import ItemId


class SizeStore:
    """
    Measured size per item plus a running average used for everything not yet measured.

    The average always reflects current values only: re-measuring an item replaces its
    contribution instead of adding to it. `version` changes whenever any estimate may have
    changed, so callers can cache derived data (cumulative offsets) and rebuild it lazily.
    """

    def __init__(self, estimate_size: float) -> None:
        """Create an empty store. estimate_size is the fallback while nothing is measured."""
        self._estimate_size: float = float(estimate_size)
        self._sizes: Dict[ItemId, float] = {}
        self._total: float = 0.0
        self.version: int = 0

    @property
    def estimate_size(self) -> float:
        return self._estimate_size

    @estimate_size.setter
    def estimate_size(self, value: float) -> None:
        if value != self._estimate_size:
            self._estimate_size = float(value)
            self.version += 1

    @property
    def total_measured_size(self) -> float:
        return self._total

    @property
    def average_size(self) -> float:
        """Mean of all recorded sizes, or estimate_size when nothing is recorded."""
        if not self._sizes:
            return self._estimate_size
        return self._total / len(self._sizes)

    def record(self, item_id: ItemId, size: float) -> bool:
        """Store the latest size of item_id. Returns False (and changes nothing) for malformed sizes."""
        if isinstance(size, bool) or not isinstance(size, Real):
            return False
        size = float(size)
        if not math.isfinite(size) or size < 0:
            return False

        previous = self._sizes.get(item_id)
        if previous is None:
            self._total += size
        elif previous == size:
            return True
        else:
            self._total += size - previous
        self._sizes[item_id] = size
        self.version += 1
        return True

    def estimate(self, item_id: ItemId) -> float:
        """Recorded size if measured, else the running average."""
        size = self._sizes.get(item_id)
        return size if size is not None else self.average_size

    def size_of(self, item_id: ItemId) -> Optional[float]:
        """Recorded size, or None if item_id was never measured."""
        return self._sizes.get(item_id)

    def count(self) -> int:
        """Number of measured items."""
        return len(self._sizes)

    def reset(self) -> None:
        self._sizes.clear()
        self._total = 0.0
        self.version += 1

    def __len__(self) -> int:
        return len(self._sizes)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._sizes
