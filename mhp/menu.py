from __future__ import annotations

import logging

from fastapi import Request, Response
from itsdangerous import URLSafeSerializer, BadSignature

from .config import SECRET_KEY, COOKIE_SECURE
from .dataservice import DataService, DataServiceError
from .models import Category, MenuItem
from .shell import NavShell, Notice

log = logging.getLogger(__name__)

ALL_CATEGORIES = "all"

QUANTITY_COOKIE = "mhp_menu_quantities"
_quantity_serializer = URLSafeSerializer(SECRET_KEY, salt="menu-quantities")


class QuantitySelector:
    """Per-item quantity picked on the menu, keyed by menu item id.

    Unset items display as 1 but are stored as 0 until incremented.
    """

    def __init__(self, values: dict[str, int] | None = None):
        self.values: dict[str, int] = dict(values or {})

    def stored(self, item_id: str) -> int:
        return self.values.get(item_id, 0)

    def display(self, item_id: str) -> int:
        return self.stored(item_id) or 1

    def change(self, item_id: str, delta: int) -> int:
        value = max(0, self.stored(item_id) + delta)
        self.values[item_id] = value
        return value

    def reset(self, item_id: str) -> None:
        self.values[item_id] = 0

    @classmethod
    def from_request(cls, request: Request) -> "QuantitySelector":
        token = request.cookies.get(QUANTITY_COOKIE)
        if not token:
            return cls()
        try:
            data = _quantity_serializer.loads(token)
        except BadSignature:
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls({str(k): int(v) for k, v in data.items() if isinstance(v, int)})

    def save(self, response: Response) -> None:
        # zero entries are indistinguishable from unset ones
        kept = {k: v for k, v in self.values.items() if v > 0}
        response.set_cookie(
            QUANTITY_COOKIE,
            _quantity_serializer.dumps(kept),
            httponly=True,
            samesite="lax",
            secure=COOKIE_SECURE,
        )


class MenuBrowser:
    def __init__(self, data: DataService, shell: NavShell, quantities: QuantitySelector | None = None):
        self.data = data
        self.shell = shell
        self.quantities = quantities or QuantitySelector()
        self.categories: list[Category] = []
        self.items: list[MenuItem] = []

    def load(self) -> None:
        # the two reads are independent; one failing leaves the other intact
        try:
            self.categories = self.data.list_categories()
        except DataServiceError:
            log.exception("failed to load categories")
        try:
            self.items = self.data.list_available_items()
        except DataServiceError:
            log.exception("failed to load menu items")

    def filtered(self, category: str = ALL_CATEGORIES) -> list[MenuItem]:
        if category == ALL_CATEGORIES:
            return list(self.items)
        return [it for it in self.items if it.category_id == category]

    def find_item(self, item_id: str) -> MenuItem | None:
        for it in self.items:
            if it.id == item_id:
                return it
        return self.data.get_menu_item(item_id)

    def add_to_cart(self, item_id: str) -> Notice:
        identity = self.shell.require_identity("Please sign in to add items to cart")
        quantity = self.quantities.stored(item_id) or 1

        try:
            item = self.find_item(item_id)
        except DataServiceError:
            return Notice.error("Failed to add to cart")
        if not item:
            return Notice.error("Menu item not found")

        try:
            existing = self.data.find_cart_item(identity.id, item.id)
        except DataServiceError:
            existing = None

        if existing:
            try:
                self.data.update_cart_quantity(identity.id, existing.id, existing.quantity + quantity)
            except DataServiceError:
                return Notice.error("Failed to update cart")
            message = f"Added {quantity} more {item.name} to cart"
        else:
            try:
                self.data.insert_cart_item(identity.id, item.id, quantity)
            except DataServiceError:
                return Notice.error("Failed to add to cart")
            message = f"Added {item.name} to cart"

        self.quantities.reset(item.id)
        self.shell.refresh_cart_count()
        return Notice.ok(message)
