"""
Adapters layer - Store implementations for schedule and order data.
"""

from .config_schedule_store import ConfigScheduleStore
from .memory_order_store import InMemoryOrderStore

__all__ = ["ConfigScheduleStore", "InMemoryOrderStore"]
