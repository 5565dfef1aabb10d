"""Client for the relational data service that owns every row the app shows.

Screens never touch the database session directly: they call the operations
below, which either return plain rows or raise :class:`DataServiceError`.
Every cart/profile/order operation is filtered by the owning identity.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from .models import User, Profile, Category, MenuItem, CartItem, Order, OrderItem
from .utils import now_utc, to_cents

log = logging.getLogger(__name__)


class DataServiceError(Exception):
    """A remote read or write did not succeed."""


@dataclass
class CartLine:
    id: str
    menu_item_id: str
    quantity: int
    name: str
    price: Decimal
    image_url: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class OrderLine:
    quantity: int
    price: Decimal
    name: str

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class OrderRecord:
    id: str
    total_amount: Decimal
    status: str
    created_at: datetime
    delivery_address: str
    phone: str
    notes: Optional[str] = None
    items: list[OrderLine] = field(default_factory=list)


class DataService:
    def __init__(self, engine):
        self.engine = engine

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with Session(self.engine, expire_on_commit=False) as session:
            try:
                yield session
            except SQLAlchemyError as exc:
                session.rollback()
                log.warning("data service call failed: %s", exc)
                raise DataServiceError(str(exc)) from exc

    # ---- Identity ----

    def get_user(self, user_id: str) -> User | None:
        with self._session() as session:
            return session.get(User, user_id)

    def find_user_by_email(self, email: str) -> User | None:
        with self._session() as session:
            return session.exec(select(User).where(User.email == email)).first()

    def create_user(self, email: str, password_hash: str, full_name: str | None = None) -> User:
        with self._session() as session:
            user = User(email=email, password_hash=password_hash)
            session.add(user)
            session.flush()
            session.add(Profile(id=user.id, full_name=full_name))
            session.commit()
            return user

    # ---- Catalog ----

    def list_categories(self) -> list[Category]:
        with self._session() as session:
            return list(session.exec(select(Category).order_by(Category.display_order)).all())

    def list_available_items(self) -> list[MenuItem]:
        with self._session() as session:
            stmt = select(MenuItem).where(MenuItem.is_available == True).order_by(MenuItem.display_order)  # noqa: E712
            return list(session.exec(stmt).all())

    def get_menu_item(self, item_id: str) -> MenuItem | None:
        with self._session() as session:
            return session.get(MenuItem, item_id)

    # ---- Cart ----

    def cart_quantities(self, user_id: str) -> list[int]:
        with self._session() as session:
            return list(session.exec(select(CartItem.quantity).where(CartItem.user_id == user_id)).all())

    def cart_lines(self, user_id: str) -> list[CartLine]:
        with self._session() as session:
            stmt = (
                select(CartItem, MenuItem)
                .join(MenuItem, CartItem.menu_item_id == MenuItem.id)
                .where(CartItem.user_id == user_id)
                .order_by(CartItem.created_at)
            )
            return [
                CartLine(
                    id=ci.id,
                    menu_item_id=ci.menu_item_id,
                    quantity=ci.quantity,
                    name=mi.name,
                    price=mi.price,
                    image_url=mi.image_url,
                )
                for ci, mi in session.exec(stmt).all()
            ]

    def find_cart_item(self, user_id: str, menu_item_id: str) -> CartItem | None:
        with self._session() as session:
            stmt = select(CartItem).where(CartItem.user_id == user_id, CartItem.menu_item_id == menu_item_id)
            return session.exec(stmt).first()

    def insert_cart_item(self, user_id: str, menu_item_id: str, quantity: int) -> CartItem:
        with self._session() as session:
            item = CartItem(user_id=user_id, menu_item_id=menu_item_id, quantity=quantity)
            session.add(item)
            session.commit()
            return item

    def update_cart_quantity(self, user_id: str, cart_item_id: str, quantity: int) -> CartItem:
        with self._session() as session:
            item = session.get(CartItem, cart_item_id)
            if not item or item.user_id != user_id:
                raise DataServiceError(f"cart item {cart_item_id} not found")
            item.quantity = quantity
            session.add(item)
            session.commit()
            return item

    def delete_cart_item(self, user_id: str, cart_item_id: str) -> None:
        with self._session() as session:
            item = session.get(CartItem, cart_item_id)
            if item and item.user_id == user_id:
                session.delete(item)
            session.commit()

    def clear_cart(self, user_id: str) -> None:
        with self._session() as session:
            for item in session.exec(select(CartItem).where(CartItem.user_id == user_id)).all():
                session.delete(item)
            session.commit()

    # ---- Profile ----

    def get_profile(self, user_id: str) -> Profile | None:
        with self._session() as session:
            return session.get(Profile, user_id)

    def update_profile(self, user_id: str, address: str, phone: str) -> None:
        with self._session() as session:
            profile = session.get(Profile, user_id)
            if not profile:
                return
            profile.address = address
            profile.phone = phone
            profile.updated_at = now_utc()
            session.add(profile)
            session.commit()

    # ---- Orders ----

    def insert_order(
        self,
        user_id: str,
        total_amount: Decimal,
        delivery_address: str,
        phone: str,
        notes: str | None,
        status: str = "pending",
    ) -> Order:
        with self._session() as session:
            order = Order(
                user_id=user_id,
                total_amount=to_cents(total_amount),
                delivery_address=delivery_address,
                phone=phone,
                notes=notes,
                status=status,
            )
            session.add(order)
            session.commit()
            return order

    def insert_order_items(self, order_id: str, lines: list[CartLine]) -> list[OrderItem]:
        with self._session() as session:
            rows = [
                OrderItem(order_id=order_id, menu_item_id=l.menu_item_id, quantity=l.quantity, price=l.price)
                for l in lines
            ]
            session.add_all(rows)
            session.commit()
            return rows

    def list_orders(self, user_id: str) -> list[OrderRecord]:
        with self._session() as session:
            stmt = (
                select(Order)
                .where(Order.user_id == user_id)
                .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
                .order_by(Order.created_at.desc())
            )
            return [
                OrderRecord(
                    id=o.id,
                    total_amount=o.total_amount,
                    status=o.status,
                    created_at=o.created_at,
                    delivery_address=o.delivery_address,
                    phone=o.phone,
                    notes=o.notes,
                    items=[
                        OrderLine(quantity=it.quantity, price=it.price, name=it.menu_item.name if it.menu_item else "")
                        for it in o.items
                    ],
                )
                for o in session.exec(stmt).all()
            ]
