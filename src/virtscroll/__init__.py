"""virtscroll public API."""

from .core import Direction, Range, RangeEngine, SizeStore, VirtualConfig
from .colors.modes import ColorMap
from .widgets import SizeReporter, SlotType, VirtualListWidget

__all__ = [
    "Direction",
    "Range",
    "RangeEngine",
    "SizeStore",
    "VirtualConfig",
    "ColorMap",
    "SizeReporter",
    "SlotType",
    "VirtualListWidget",
]
