import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import SQLModel, Field, Relationship

from .utils import now_utc


def new_id() -> str:
    return str(uuid.uuid4())


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    created_at: datetime = Field(default_factory=now_utc)


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"

    id: str = Field(foreign_key="users.id", primary_key=True)
    full_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    updated_at: datetime = Field(default_factory=now_utc)


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    description: Optional[str] = None
    display_order: int = 0


class MenuItem(SQLModel, table=True):
    __tablename__ = "menu_items"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    description: Optional[str] = None
    price: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    image_url: Optional[str] = None
    is_available: bool = True
    category_id: Optional[str] = Field(default=None, foreign_key="categories.id", index=True)
    display_order: int = 0


class CartItem(SQLModel, table=True):
    __tablename__ = "cart_items"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    menu_item_id: str = Field(foreign_key="menu_items.id")
    quantity: int = 1
    created_at: datetime = Field(default_factory=now_utc)


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    total_amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    delivery_address: str
    phone: str
    notes: Optional[str] = None
    status: str = "pending"  # written by the kitchen/delivery side after checkout
    created_at: datetime = Field(default_factory=now_utc, index=True)

    items: list["OrderItem"] = Relationship(back_populates="order")


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: str = Field(default_factory=new_id, primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True)
    menu_item_id: str = Field(foreign_key="menu_items.id")
    quantity: int
    # Unit price captured at checkout
    price: Decimal = Field(max_digits=10, decimal_places=2)

    order: Order = Relationship(back_populates="items")
    menu_item: MenuItem = Relationship()
