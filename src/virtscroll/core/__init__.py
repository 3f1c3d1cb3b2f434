from .config import VirtualConfig, normalize_config, normalize_param
from .range import Direction, ItemId, Range
from .size_store import SizeStore
from .range_engine import RangeEngine

__all__ = [
    "VirtualConfig",
    "normalize_config",
    "normalize_param",
    "Direction",
    "ItemId",
    "Range",
    "SizeStore",
    "RangeEngine",
]
