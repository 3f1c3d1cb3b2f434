from .size_reporter import SizeReporter
from .item_widget import SlotType, VirtualItem, VirtualSlot
from .virtual_list_widget import VirtualListWidget, unique_ids_from_sources

__all__ = ['SizeReporter', 'SlotType', 'VirtualItem', 'VirtualSlot', 'VirtualListWidget', 'unique_ids_from_sources']
