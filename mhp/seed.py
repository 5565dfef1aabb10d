from __future__ import annotations

import logging
from decimal import Decimal

from sqlmodel import Session, select

from .models import Category, MenuItem

log = logging.getLogger(__name__)

DEMO_MENU = [
    ("Starters", "Small plates to share", [
        ("Garlic Bread", "Toasted sourdough with garlic butter", "4.50"),
        ("Spring Rolls", "Crispy vegetable rolls with sweet chili dip", "5.75"),
    ]),
    ("Mains", "Hearty dishes", [
        ("Margherita Pizza", "Tomato, mozzarella and basil", "9.50"),
        ("Chicken Burger", "Grilled chicken, lettuce, house sauce", "11.00"),
        ("Veggie Curry", "Seasonal vegetables in coconut curry with rice", "10.25"),
    ]),
    ("Drinks", "Cold and hot drinks", [
        ("Lemonade", "Freshly squeezed", "3.25"),
        ("Iced Tea", "Peach iced tea", "2.95"),
    ]),
]


def seed_demo_menu(engine) -> bool:
    with Session(engine) as session:
        if session.exec(select(Category)).first():
            return False
        for c_order, (name, description, items) in enumerate(DEMO_MENU):
            category = Category(name=name, description=description, display_order=c_order)
            session.add(category)
            session.flush()
            for i_order, (item_name, item_desc, price) in enumerate(items):
                session.add(MenuItem(
                    name=item_name,
                    description=item_desc,
                    price=Decimal(price),
                    category_id=category.id,
                    display_order=c_order * 100 + i_order,
                ))
        session.commit()
    log.info("seeded demo menu")
    return True
