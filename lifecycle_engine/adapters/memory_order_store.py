"""
In-memory order store for local use and testing.
"""

from typing import Dict, List, Optional

from ..domain.models import OrderStatus
from ..services.order_workflow import StatusHistoryEntry


class InMemoryOrderStore:
    """
    Keeps order statuses and history in dictionaries.

    Useful for testing the workflow service without a real database.
    """

    def __init__(self, orders: Optional[Dict[str, OrderStatus]] = None):
        self.orders: Dict[str, OrderStatus] = dict(orders or {})
        self.history: List[StatusHistoryEntry] = []

    async def get_status(self, order_id: str) -> Optional[OrderStatus]:
        return self.orders.get(order_id)

    async def save_status(self, order_id: str, status: OrderStatus) -> None:
        self.orders[order_id] = status

    async def append_history(self, entry: StatusHistoryEntry) -> None:
        self.history.append(entry)

    def history_for(self, order_id: str) -> List[StatusHistoryEntry]:
        return [entry for entry in self.history if entry.order_id == order_id]
