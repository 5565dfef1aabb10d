from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from .dataservice import CartLine, DataService, DataServiceError
from .shell import Identity, Notice
from .utils import to_cents

log = logging.getLogger(__name__)


def cart_total(lines: Iterable[CartLine]) -> Decimal:
    """Sum of unit price x quantity over all lines, to two decimal places.

    No tax, discount or delivery fee applies, so subtotal and total match.
    """
    return to_cents(sum((l.price * l.quantity for l in lines), Decimal("0")))


class CartPage:
    def __init__(self, data: DataService, identity: Identity):
        self.data = data
        self.identity = identity
        self.lines: list[CartLine] = []
        self.delivery_address = ""
        self.phone = ""

    def load(self) -> None:
        try:
            self.lines = self.data.cart_lines(self.identity.id)
        except DataServiceError:
            log.exception("failed to load cart for %s", self.identity.id)
        try:
            profile = self.data.get_profile(self.identity.id)
        except DataServiceError:
            profile = None
        if profile:
            self.delivery_address = profile.address or ""
            self.phone = profile.phone or ""

    @property
    def subtotal(self) -> Decimal:
        return cart_total(self.lines)

    @property
    def total(self) -> Decimal:
        return cart_total(self.lines)

    def _line(self, line_id: str) -> CartLine | None:
        return next((l for l in self.lines if l.id == line_id), None)

    def update_quantity(self, line_id: str, new_quantity: int) -> bool:
        if new_quantity < 1:
            return False
        try:
            self.data.update_cart_quantity(self.identity.id, line_id, new_quantity)
        except DataServiceError:
            return False
        line = self._line(line_id)
        if line:
            line.quantity = new_quantity
        return True

    def remove(self, line_id: str) -> Notice:
        try:
            self.data.delete_cart_item(self.identity.id, line_id)
        except DataServiceError:
            return Notice.error("Failed to remove item")
        self.lines = [l for l in self.lines if l.id != line_id]
        return Notice.ok("Item removed from cart")

    def checkout(self, delivery_address: str, phone: str, notes: str = "") -> Notice:
        """Turn the loaded cart into an order.

        The writes are sequential and independent: a failure after the order
        row exists leaves it in place, and a failed cart clear is only logged.
        """
        delivery_address = delivery_address.strip()
        phone = phone.strip()
        if not delivery_address or not phone:
            return Notice.error("Delivery address and phone number are required")
        if not self.lines:
            return Notice.error("Your cart is empty")

        uid = self.identity.id
        try:
            order = self.data.insert_order(
                uid,
                total_amount=self.total,
                delivery_address=delivery_address,
                phone=phone,
                notes=notes.strip() or None,
                status="pending",
            )
        except DataServiceError:
            return Notice.error("Failed to create order")

        try:
            self.data.insert_order_items(order.id, self.lines)
        except DataServiceError:
            return Notice.error("Failed to save order items")

        try:
            self.data.clear_cart(uid)
        except DataServiceError as exc:
            log.error("Failed to clear cart for %s after order %s: %s", uid, order.id, exc)
        else:
            self.lines = []

        try:
            self.data.update_profile(uid, delivery_address, phone)
        except DataServiceError as exc:
            log.warning("Failed to save delivery details for %s: %s", uid, exc)

        self.delivery_address = delivery_address
        self.phone = phone
        return Notice.ok("Order placed successfully!")
