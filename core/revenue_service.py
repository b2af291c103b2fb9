"""
Per-location order and revenue history.

Orders belong to the location that sold them; nothing in the sync engine
reads or copies them.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pandas as pd
from sqlalchemy.orm import Session

from models.menu_item import MenuItem
from models.order import Order, OrderItem
from core.errors import NotFoundError, ValidationError
from core.session_manager import check_location

# Bill number prefix per location, e.g. CN-00042
BILL_PREFIX = {"canteen": "CN", "cafeteria": "CF"}


def record_order(db: Session, location: str, lines, created_at: datetime = None) -> Order:
    """
    Record a sale at `location` and take the quantities out of that location's stock.

    Args:
        lines: iterable of (menu_item_id, quantity)

    Raises:
        ValidationError: empty order, item from another location, or not enough stock
    """
    check_location(location)
    lines = list(lines)
    if not lines:
        raise ValidationError("An order needs at least one item", "items")

    # Check every line before touching any stock
    checked = []
    for item_id, quantity in lines:
        item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
        if not item:
            raise NotFoundError(f"Menu item {item_id} not found")
        if item.location != location:
            raise ValidationError(f"{item.name} is not sold at {location}", "items")
        if quantity <= 0:
            raise ValidationError("quantity must be positive", "quantity")
        if item.stock < quantity:
            raise ValidationError(
                f"Insufficient stock for {item.name}: requested={quantity}, available={item.stock}", "quantity"
            )
        checked.append((item, quantity))

    order = Order(location=location, total_price=Decimal("0"), created_at=created_at or datetime.utcnow())
    total = Decimal("0")
    for item, quantity in checked:
        subtotal = Decimal(str(item.price)) * quantity
        item.stock -= quantity
        order.items.append(OrderItem(menu_item_id=item.id, item_name=item.name, quantity=quantity, subtotal=subtotal))
        total += subtotal

    order.total_price = total
    db.add(order)
    try:
        db.flush()
        order.bill_number = f"{BILL_PREFIX[location]}-{order.id:05d}"
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    return order


def list_orders(db: Session, location: str, bill_search: str = None):
    """Orders of one location, newest first, optionally filtered by part of the bill number"""
    check_location(location)
    query = db.query(Order).filter(Order.location == location)
    term = (bill_search or "").strip()
    if term:
        query = query.filter(Order.bill_number.ilike(f"%{term}%"))
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_item_revenue(db: Session, item_id: int) -> dict:
    """Units sold and revenue of one location's record"""
    rows = db.query(OrderItem).filter(OrderItem.menu_item_id == item_id).all()
    return {
        "quantity": sum(r.quantity for r in rows),
        "revenue": sum((Decimal(str(r.subtotal)) for r in rows), Decimal("0")),
    }


def get_daily_revenue(db: Session, location: str, day: date) -> dict:
    """
    Revenue summary for one location and calendar day.
    Returns: dict with total_orders, total_revenue and per-product rows
    """
    check_location(location)
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1)

    orders = db.query(Order).filter(
        Order.location == location,
        Order.created_at >= start,
        Order.created_at < end,
    ).all()

    lines = [
        {"name": oi.item_name, "quantity": oi.quantity, "revenue": float(oi.subtotal)}
        for order in orders
        for oi in order.items
    ]
    if not lines:
        return {"total_orders": 0, "total_revenue": 0.0, "products": []}

    df = pd.DataFrame(lines)
    products = (
        df.groupby("name", as_index=False)[["quantity", "revenue"]]
        .sum()
        .sort_values("revenue", ascending=False)
    )
    return {
        "total_orders": len(orders),
        "total_revenue": float(df["revenue"].sum()),
        "products": [
            {"name": row.name, "quantity": int(row.quantity), "revenue": float(row.revenue)}
            for row in products.itertuples(index=False)
        ],
    }
