"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityService, ScheduleStoreProtocol
from .order_workflow import OrderStoreProtocol, OrderWorkflowService, StatusHistoryEntry

__all__ = [
    "AvailabilityService",
    "OrderStoreProtocol",
    "OrderWorkflowService",
    "ScheduleStoreProtocol",
    "StatusHistoryEntry",
]
