from __future__ import annotations

import logging

from .dataservice import DataService, DataServiceError, OrderRecord
from .shell import Identity

log = logging.getLogger(__name__)

STATUS_COLORS = {
    "pending": "#eab308",
    "confirmed": "#3b82f6",
    "preparing": "#a855f7",
    "out_for_delivery": "#f97316",
    "delivered": "#22c55e",
    "cancelled": "#ef4444",
}
DEFAULT_STATUS_COLOR = "#6b7280"


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, DEFAULT_STATUS_COLOR)


def status_label(status: str) -> str:
    # "out_for_delivery" -> "Out For Delivery"
    return " ".join(word[:1].upper() + word[1:] for word in status.split("_"))


def short_id(order_id: str) -> str:
    return order_id[:8]


class OrderHistory:
    def __init__(self, data: DataService, identity: Identity):
        self.data = data
        self.identity = identity
        self.orders: list[OrderRecord] = []

    def load(self) -> None:
        try:
            orders = self.data.list_orders(self.identity.id)
        except DataServiceError:
            log.exception("failed to load orders for %s", self.identity.id)
            return
        self.orders = sorted(orders, key=lambda o: o.created_at, reverse=True)
