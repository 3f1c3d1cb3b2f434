import logging
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Union

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QPainter
from PySide6.QtWidgets import QFrame, QScrollArea, QScrollBar, QWidget

from virtscroll.colors.modes import ColorMap
from virtscroll.core.config import VirtualConfig
from virtscroll.core.range import ItemId, Range
from virtscroll.core.range_engine import RangeEngine
from .item_widget import ItemFactory, SlotType, VirtualItem, VirtualSlot, box_layout

_LOG = logging.getLogger("virtscroll.widgets")

BOTTOM_RETRY_LIMIT = 50
BOTTOM_RETRY_DELAY_MS = 3

DataKey = Union[str, Callable[[Any], Any]]


def unique_ids_from_sources(data_sources: Sequence[Any], data_key: DataKey) -> List[Optional[ItemId]]:
    """Unique id per data source (key/attribute name or callable). None where no valid id exists."""
    ids: List[Optional[ItemId]] = []
    for source in data_sources:
        if callable(data_key):
            key = data_key(source)
        elif isinstance(source, dict):
            key = source.get(data_key)
        else:
            key = getattr(source, data_key, None)
        valid = isinstance(key, (str, int)) and not isinstance(key, bool)
        ids.append(key if valid else None)
    return ids


class _ListCanvas(QWidget):
    def __init__(self, color_map: ColorMap, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.color_map = color_map

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), self.color_map.get_role_color("viewport"))


class VirtualListWidget(QScrollArea):
    """
    Scrollable list that only materializes the items of the current Range.

    Layout along the scroll axis:
    - header slot (optional)
    - front spacer (pad_front minus header)
    - rendered items [start, end]
    - behind spacer (pad_behind minus footer)
    - footer slot (optional)
    - zero-size sentinel used by scroll_to_bottom

    Callbacks (all optional):
    - on_scroll(range): after every accepted scroll event
    - on_to_top() / on_to_bottom(): scrolling toward an edge within the thresholds
    - on_resized(key, size): an item reported a new size
    - on_range_changed(range): the engine produced a new Range
    - on_diagnostic(message): degraded configuration or measurement input
    """

    def __init__(
        self,
        data_sources: Sequence[Any],
        data_key: DataKey,
        item_factory: ItemFactory,
        keeps: int = 30,
        estimate_size: float = 50,
        orientation: Literal['x', 'y'] = 'y',
        header: Optional[QWidget] = None,
        footer: Optional[QWidget] = None,
        top_threshold: float = 0,
        bottom_threshold: float = 0,
        start: int = 0,
        offset: float = 0,
        color_map: Optional[ColorMap] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.data_key: DataKey = data_key
        self.item_factory: ItemFactory = item_factory
        self.orientation: Literal['x', 'y'] = orientation
        self.top_threshold: float = top_threshold
        self.bottom_threshold: float = bottom_threshold
        self.color_map: ColorMap = color_map or ColorMap(darkmode=True)

        self.on_scroll: Optional[Callable[[Range], None]] = None
        self.on_to_top: Optional[Callable[[], None]] = None
        self.on_to_bottom: Optional[Callable[[], None]] = None
        self.on_resized: Optional[Callable[[ItemId, float], None]] = None
        self.on_range_changed: Optional[Callable[[Range], None]] = None
        self.on_diagnostic: Optional[Callable[[str], None]] = None

        self._data_sources: List[Any] = list(data_sources)
        self._items: Dict[ItemId, VirtualItem] = {}
        self._initial_start: int = start
        self._initial_offset: float = offset
        self._shown_once: bool = False
        self._rendering: bool = False
        self._render_pending: bool = False
        self._engine: Optional[RangeEngine] = None

        self._bottom_timer = QTimer(self)
        self._bottom_timer.setSingleShot(True)
        self._bottom_timer.setInterval(BOTTOM_RETRY_DELAY_MS)
        self._bottom_timer.timeout.connect(self._check_bottom)
        self._bottom_attempts: int = 0

        # Fallback for range changes that no public path flushes, e.g. direct engine calls
        self._render_timer = QTimer(self)
        self._render_timer.setSingleShot(True)
        self._render_timer.setInterval(0)
        self._render_timer.timeout.connect(self._flush_render)

        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setWidgetResizable(True)
        if orientation == 'x':
            self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        else:
            self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)

        self._canvas = _ListCanvas(self.color_map)
        root = box_layout(orientation, self._canvas)

        self._header: Optional[VirtualSlot] = None
        if header is not None:
            self._header = VirtualSlot(SlotType.HEADER, header, self._on_slot_resized, orientation)
            root.addWidget(self._header)

        self._front_spacer = QWidget()
        self._body = QWidget()
        self._body_layout = box_layout(orientation, self._body)
        self._behind_spacer = QWidget()
        root.addWidget(self._front_spacer)
        root.addWidget(self._body)
        root.addWidget(self._behind_spacer)

        self._footer: Optional[VirtualSlot] = None
        if footer is not None:
            self._footer = VirtualSlot(SlotType.FOOTER, footer, self._on_slot_resized, orientation)
            root.addWidget(self._footer)

        self._shepherd = QWidget()
        if orientation == 'x':
            self._shepherd.setFixedWidth(0)
        else:
            self._shepherd.setFixedHeight(0)
        root.addWidget(self._shepherd)
        root.addStretch(1)

        self.setWidget(self._canvas)

        self._engine = RangeEngine(
            VirtualConfig(keeps=keeps, estimate_size=estimate_size),
            self._unique_ids(),
            self._on_range_changed,
            self._on_diagnostic,
        )
        self._render()
        self._scroll_bar().valueChanged.connect(self._on_scroll)

    # --- Public API ---

    @property
    def data_sources(self) -> List[Any]:
        return list(self._data_sources)

    @property
    def engine(self) -> Optional[RangeEngine]:
        return self._engine

    def set_data_sources(self, data_sources: Sequence[Any]) -> None:
        """Replace the backing collection and refit the rendered window."""
        self._data_sources = list(data_sources)
        self._engine.update_param("unique_ids", self._unique_ids())
        self._engine.handle_data_sources_change()
        # Sources may change behind unchanged keys
        self._render_pending = True
        self._flush_render()

    def set_keeps(self, keeps: int) -> None:
        self._engine.update_param("keeps", keeps)
        self._engine.handle_slot_size_change()
        self._flush_render()

    def get_range(self) -> Range:
        return self._engine.get_range()

    def get_offset(self) -> int:
        """Current scroll position along the scroll axis."""
        return self._scroll_bar().value()

    def get_client_size(self) -> int:
        viewport = self.viewport()
        return viewport.width() if self.orientation == 'x' else viewport.height()

    def get_scroll_size(self) -> int:
        return self._canvas.width() if self.orientation == 'x' else self._canvas.height()

    def get_sizes(self) -> int:
        """Number of items measured so far."""
        return self._engine.sizes.count()

    def get_size(self, key: ItemId) -> Optional[float]:
        return self._engine.sizes.size_of(key)

    def rendered_keys(self) -> List[ItemId]:
        """Keys of the materialized items, in order."""
        return list(self._items.keys())

    def scroll_to_index(self, index: int) -> None:
        if index >= len(self._data_sources) - 1:
            self.scroll_to_bottom()
        else:
            self.scroll_to_offset(self._engine.get_offset(index))

    def scroll_to_offset(self, offset: float) -> None:
        self._scroll_bar().setValue(int(round(offset)))

    def scroll_to_bottom(self) -> None:
        """Scroll to the end, retrying until the last range is rendered and laid out."""
        self._bottom_timer.stop()
        self._bottom_attempts = 0
        self._scroll_to_shepherd()
        self._bottom_timer.start()

    def dispose(self) -> None:
        """Tear down rendered items and the engine. The widget must not be used afterwards."""
        self._bottom_timer.stop()
        self._render_timer.stop()
        self._render_pending = False
        for item in self._items.values():
            item.dispose()
        self._items.clear()
        if self._engine is not None:
            self._engine.destroy()
            self._engine = None

    # --- Qt events ---

    def showEvent(self, event):
        super().showEvent(event)
        if self._engine is None:
            return
        if not self._shown_once:
            self._shown_once = True
            QTimer.singleShot(0, self._apply_initial_position)
        else:
            # Shown again after being hidden: restore the last known offset
            self.scroll_to_offset(self._engine.offset)

    # --- Internals ---

    def _scroll_bar(self) -> QScrollBar:
        return self.horizontalScrollBar() if self.orientation == 'x' else self.verticalScrollBar()

    def _unique_ids(self) -> List[Optional[ItemId]]:
        return unique_ids_from_sources(self._data_sources, self.data_key)

    def _apply_initial_position(self) -> None:
        if self._engine is None:
            return
        if self._initial_start:
            self.scroll_to_index(self._initial_start)
        elif self._initial_offset:
            self.scroll_to_offset(self._initial_offset)

    def _scroll_to_shepherd(self) -> None:
        self.scroll_to_offset(self._shepherd.x() if self.orientation == 'x' else self._shepherd.y())

    def _check_bottom(self) -> None:
        if self._engine is None:
            return
        if self.get_offset() + self.get_client_size() >= self.get_scroll_size():
            return
        self._bottom_attempts += 1
        if self._bottom_attempts >= BOTTOM_RETRY_LIMIT:
            _LOG.debug("scroll_to_bottom gave up after %d attempts", self._bottom_attempts)
            return
        self._scroll_to_shepherd()
        self._bottom_timer.start()

    def _on_scroll(self, _value: int) -> None:
        if self._engine is None:
            return
        if self._rendering:
            # Layout changes while rendering; pick the offset up once the engine call returned
            QTimer.singleShot(0, lambda: self._on_scroll(self.get_offset()))
            return

        offset = self.get_offset()
        client_size = self.get_client_size()
        scroll_size = self.get_scroll_size()
        if offset < 0 or offset + client_size > scroll_size + 1 or not scroll_size:
            return

        self._engine.handle_scroll(offset)
        self._flush_render()
        self._emit_scroll_events(offset, client_size, scroll_size)

    def _emit_scroll_events(self, offset: int, client_size: int, scroll_size: int) -> None:
        if self.on_scroll is not None:
            self.on_scroll(self._engine.get_range())

        if self._engine.is_front() and self._data_sources and offset - self.top_threshold <= 0:
            if self.on_to_top is not None:
                self.on_to_top()
        elif self._engine.is_behind() and offset + client_size + self.bottom_threshold >= scroll_size:
            if self.on_to_bottom is not None:
                self.on_to_bottom()

    def _on_range_changed(self, new_range: Range) -> None:
        # Callers flush once the engine call returned; nothing is mounted while it runs.
        # The engine emits once while it is still being constructed
        if self._engine is not None:
            self._render_pending = True
            self._render_timer.start()
        if self.on_range_changed is not None:
            self.on_range_changed(new_range)

    def _on_diagnostic(self, message: str) -> None:
        if self.on_diagnostic is not None:
            self.on_diagnostic(message)

    def _on_item_resized(self, key: ItemId, size: float, has_initial: bool) -> None:
        if self._engine is None:
            return
        self._engine.save_size(key, size)
        if self.on_resized is not None:
            self.on_resized(key, size)

    def _on_slot_resized(self, slot_type: SlotType, size: float, has_initial: bool) -> None:
        if self._engine is None:
            return
        if slot_type is SlotType.HEADER:
            self._engine.update_param("slot_header_size", size)
        else:
            self._engine.update_param("slot_footer_size", size)
        if has_initial:
            self._engine.handle_slot_size_change()
        self._flush_render()

    def _flush_render(self) -> None:
        self._render_timer.stop()
        if self._render_pending and self._engine is not None:
            self._render_pending = False
            self._render()

    def _render(self) -> None:
        """Materialize items of the current range, reusing wrappers whose key stays in range."""
        self._rendering = True
        try:
            current = self._engine.get_range()
            unique_ids = self._engine.unique_ids
            wanted: Dict[ItemId, VirtualItem] = {}
            mounted: List[VirtualItem] = []

            if self._data_sources:
                for index in current.indices():
                    if index >= len(self._data_sources):
                        _LOG.warning("Cannot get the index %d from data sources.", index)
                        continue
                    key = unique_ids[index]
                    if key is None:
                        _LOG.warning("Cannot get the data key %r from data source at index %d.", self.data_key, index)
                        continue
                    source = self._data_sources[index]
                    item = self._items.pop(key, None)
                    if item is not None and item.source is not source:
                        item.dispose()
                        item = None
                    if item is None:
                        item = VirtualItem(key, index, source, self.item_factory, self._on_item_resized, self.orientation)
                        item.reporter.paused = True
                        mounted.append(item)
                    item.index = index
                    wanted[key] = item

            for item in self._items.values():
                item.dispose()

            while self._body_layout.count():
                self._body_layout.takeAt(0)
            for item in wanted.values():
                self._body_layout.addWidget(item)
                item.show()
            self._items = wanted

            self._apply_padding(current)
            for item in mounted:
                item.reporter.paused = False
            if mounted:
                QTimer.singleShot(0, self._measure_mounted)
        finally:
            self._rendering = False

    def _measure_mounted(self) -> None:
        """First report of items mounted by the last render, once the layout has run."""
        if self._engine is None:
            return
        for item in list(self._items.values()):
            if not item.reporter.has_initial:
                item.reporter.report_if_changed()

    def _apply_padding(self, current: Range) -> None:
        config = self._engine.config
        front = int(round(max(0.0, current.pad_front - config.slot_header_size)))
        behind = int(round(max(0.0, current.pad_behind - config.slot_footer_size)))
        if self.orientation == 'x':
            self._front_spacer.setFixedWidth(front)
            self._behind_spacer.setFixedWidth(behind)
        else:
            self._front_spacer.setFixedHeight(front)
            self._behind_spacer.setFixedHeight(behind)
