import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import VirtualConfig, normalize_config, normalize_param
from .range import Direction, ItemId, Range
from .size_store import SizeStore

_LOG = logging.getLogger("virtscroll.core")

RangeCallback = Callable[[Range], None]
DiagnosticCallback = Callable[[str], None]


class RangeEngine:
    """
    Maps a scroll offset onto the slice of items to materialize.

    The engine owns the configuration, the current Range, the scroll checkpoint and the
    SizeStore. The owning view forwards raw events (scroll offsets, size reports, data
    changes) and receives every new Range through on_range_changed.

    Offsets are derived from a cumulative-size array built from per-index arrays of measured
    sizes and a measured mask; unmeasured slots count at the running average. A size report
    writes its own slot only, and the next handle_scroll or handle_slot_size_change rebuilds
    the cumulative array with one vectorized pass. Paddings computed before that are stale
    estimates until then. The per-index arrays are rebuilt only when unique_ids changes.
    """

    def __init__(
        self,
        config: Optional[VirtualConfig],
        unique_ids: Sequence[ItemId],
        on_range_changed: Optional[RangeCallback] = None,
        on_diagnostic: Optional[DiagnosticCallback] = None,
    ) -> None:
        """Create engine and emit the initial range anchored at index 0."""
        self.on_range_changed: Optional[RangeCallback] = on_range_changed
        self.on_diagnostic: Optional[DiagnosticCallback] = on_diagnostic

        self._config, issues = normalize_config(config)
        for issue in issues:
            self._diagnose(issue)

        self._unique_ids: Sequence[ItemId] = unique_ids if unique_ids is not None else []
        self._sizes: Optional[SizeStore] = SizeStore(self._config.estimate_size)
        self._offset: float = 0.0
        self._direction: Direction = Direction.STATIC

        # Per-index measured size (0 when unmeasured) and mask, aligned with unique_ids
        self._measured: Optional[np.ndarray] = None
        self._is_measured: Optional[np.ndarray] = None
        self._positions: Dict[ItemId, List[int]] = {}
        self._prefix: Optional[np.ndarray] = None
        self._prefix_key: Optional[Tuple[int, int]] = None

        self._range = self._build_range(0, self._end_for(0))
        self._emit()

    # -- accessors ------------------------------------------------------

    @property
    def config(self) -> VirtualConfig:
        return replace(self._config)

    @property
    def sizes(self) -> SizeStore:
        return self._sizes

    @property
    def unique_ids(self) -> Sequence[ItemId]:
        return self._unique_ids

    @property
    def offset(self) -> float:
        """Last scroll offset passed to handle_scroll."""
        return self._offset

    @property
    def direction(self) -> Direction:
        return self._direction

    def get_range(self) -> Range:
        return self._range

    def is_front(self) -> bool:
        return self._direction is Direction.FRONT

    def is_behind(self) -> bool:
        return self._direction is Direction.BEHIND

    # -- inbound events -------------------------------------------------

    def update_param(self, key: str, value: Any) -> None:
        """Merge one configuration field and recompute what depends on it."""
        value, issue = normalize_param(key, value, self._config)
        if issue:
            _LOG.warning("Config: %s", issue)
            self._diagnose(issue)

        if key == "unique_ids":
            # Callers follow up with handle_data_sources_change()
            self._unique_ids = value if value is not None else []
            self._drop_caches()
            return

        previous = getattr(self._config, key)
        self._config = replace(self._config, **{key: value})

        if key in ("keeps", "buffer"):
            start = self._range.start
            self._set_range(self._build_range(start, self._end_for(start)))
        elif key == "estimate_size":
            self._sizes.estimate_size = value
            self._set_range(self._build_range(self._range.start, self._range.end))
        elif self._length() > 0:
            delta = value - previous
            current = self._range
            if key == "slot_header_size":
                self._set_range(replace(current, pad_front=max(0.0, current.pad_front + delta)))
            else:
                self._set_range(replace(current, pad_behind=max(0.0, current.pad_behind + delta)))

    def handle_data_sources_change(self) -> None:
        """Fit the window to the current length of unique_ids and recompute paddings."""
        length = self._length()
        if length == 0:
            self._set_range(Range())
            return

        start = self._range.start
        end = self._end_for(start)
        if self._range.end > length - 1:
            # Tail was cut: slide back so the window still shows `keeps` items
            start = min(start, max(0, end - self._config.keeps + 1))
        start = min(start, end)
        self._set_range(self._build_range(start, end))

    def handle_slot_size_change(self) -> None:
        """Recompute paddings for the current window with the latest header/footer sizes."""
        if self._length() == 0:
            return
        self._set_range(self._build_range(self._range.start, self._range.end))

    def handle_scroll(self, offset: float) -> None:
        """Classify direction and move the window to cover offset. No-op when offset did not change."""
        if offset > self._offset:
            self._direction = Direction.BEHIND
        elif offset < self._offset:
            self._direction = Direction.FRONT
        else:
            self._direction = Direction.STATIC
        self._offset = offset

        if self._direction is Direction.STATIC:
            return
        if self._length() == 0:
            self._set_range(Range())
            return

        overs = self._scroll_overs(offset)
        start = max(0, overs - self._config.buffer)
        self._set_range(self._build_range(start, self._end_for(start)))

    def save_size(self, item_id: ItemId, size: float) -> None:
        """Record a measurement. Paddings are corrected on the next recompute."""
        if not self._sizes.record(item_id, size):
            message = f"Ignored malformed size {size!r} for item {item_id!r}"
            _LOG.debug(message)
            self._diagnose(message)
            return
        if self._measured is not None:
            recorded = self._sizes.size_of(item_id)
            for index in self._positions.get(item_id, ()):
                self._measured[index] = recorded
                self._is_measured[index] = True

    def get_offset(self, index: int) -> float:
        """Scroll position of the leading edge of item `index`."""
        index = max(0, min(int(index), self._length()))
        estimate = self._sizes.estimate
        return self._config.slot_header_size + sum(estimate(item_id) for item_id in self._unique_ids[:index])

    def destroy(self) -> None:
        """Release sizes and caches. The engine must not be used afterwards."""
        if self._sizes is not None:
            self._sizes.reset()
        self._sizes = None
        self._drop_caches()
        self._unique_ids = []
        self.on_range_changed = None
        self.on_diagnostic = None

    # -- internals ------------------------------------------------------

    def _length(self) -> int:
        return len(self._unique_ids)

    def _end_for(self, start: int) -> int:
        return max(0, min(self._length() - 1, start + self._config.span - 1))

    def _drop_caches(self) -> None:
        self._measured = None
        self._is_measured = None
        self._positions = {}
        self._prefix = None
        self._prefix_key = None

    def _index_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Measured sizes and mask per index. Rebuilt only when the id list changes."""
        length = self._length()
        if self._measured is None or len(self._measured) != length:
            measured = np.zeros(length, dtype=np.float64)
            is_measured = np.zeros(length, dtype=bool)
            positions: Dict[ItemId, List[int]] = {}
            size_of = self._sizes.size_of
            for index, item_id in enumerate(self._unique_ids):
                if item_id is None:
                    continue
                positions.setdefault(item_id, []).append(index)
                size = size_of(item_id)
                if size is not None:
                    measured[index] = size
                    is_measured[index] = True
            self._measured = measured
            self._is_measured = is_measured
            self._positions = positions
            self._prefix = None
        return self._measured, self._is_measured

    def _prefix_sizes(self) -> np.ndarray:
        """prefix[i] is the estimated size of items [0, i), header excluded."""
        measured, is_measured = self._index_arrays()
        key = (self._sizes.version, self._length())
        if self._prefix is None or self._prefix_key != key:
            prefix = np.zeros(len(measured) + 1, dtype=np.float64)
            unmeasured = np.cumsum(~is_measured)
            prefix[1:] = np.cumsum(measured) + unmeasured * self._sizes.average_size
            self._prefix = prefix
            self._prefix_key = key
        return self._prefix

    def _scroll_overs(self, offset: float) -> int:
        """Index whose leading edge is the greatest one at or above offset."""
        prefix = self._prefix_sizes()
        length = self._length()
        target = offset - self._config.slot_header_size

        # Search on the side of the previous start only
        anchor = min(self._range.start, length)
        if prefix[anchor] <= target:
            index = anchor + int(np.searchsorted(prefix[anchor:], target, side="right")) - 1
        else:
            index = int(np.searchsorted(prefix[:anchor + 1], target, side="right")) - 1
        return max(0, min(index, length - 1))

    def _build_range(self, start: int, end: int) -> Range:
        length = self._length()
        if length == 0:
            return Range()
        end = max(0, min(end, length - 1))
        start = max(0, min(start, end))

        prefix = self._prefix_sizes()
        pad_front = float(prefix[start]) + self._config.slot_header_size
        pad_behind = float(prefix[length] - prefix[end + 1]) + self._config.slot_footer_size
        return Range(start, end, max(0.0, pad_front), max(0.0, pad_behind))

    def _set_range(self, new_range: Range) -> None:
        if new_range == self._range:
            return
        self._range = new_range
        self._emit()

    def _emit(self) -> None:
        _LOG.debug("Range changed: %s", self._range)
        if self.on_range_changed is not None:
            self.on_range_changed(self._range)

    def _diagnose(self, message: str) -> None:
        if self.on_diagnostic is not None:
            self.on_diagnostic(message)
