from enum import Enum
from typing import Any, Callable, Literal, Optional

from PySide6.QtWidgets import QBoxLayout, QHBoxLayout, QVBoxLayout, QWidget

from virtscroll.core.range import ItemId
from .size_reporter import ReportCallback, SizeReporter

# factory(source, index) -> widget showing that data source
ItemFactory = Callable[[Any, int], QWidget]


class SlotType(Enum):
    """Fixed regions around the list."""
    HEADER = "header"
    FOOTER = "footer"


def box_layout(orientation: Literal['x', 'y'], parent: QWidget) -> QBoxLayout:
    layout = QHBoxLayout(parent) if orientation == 'x' else QVBoxLayout(parent)
    layout.setContentsMargins(0, 0, 0, 0)
    layout.setSpacing(0)
    return layout


class VirtualItem(QWidget):
    """Wrapper around one rendered data source. Reports its size under its unique key."""

    def __init__(self, key: ItemId, index: int, source: Any, factory: ItemFactory, report: ReportCallback, orientation: Literal['x', 'y'] = 'y', parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.key: ItemId = key
        self.index: int = index
        self.source = source
        self.content: QWidget = factory(source, index)
        box_layout(orientation, self).addWidget(self.content)
        self.reporter = SizeReporter(self, key, report, orientation)

    def dispose(self) -> None:
        self.reporter.detach()
        self.hide()
        self.setParent(None)
        self.deleteLater()


class VirtualSlot(QWidget):
    """Wrapper around a header or footer widget. Reports its size under its SlotType."""

    def __init__(self, slot_type: SlotType, content: QWidget, report: ReportCallback, orientation: Literal['x', 'y'] = 'y', parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.slot_type: SlotType = slot_type
        self.content: QWidget = content
        box_layout(orientation, self).addWidget(content)
        self.reporter = SizeReporter(self, slot_type, report, orientation)
