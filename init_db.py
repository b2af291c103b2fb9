from decimal import Decimal

from core.db import Base, engine, SessionLocal
from core.config import LOCATIONS
from core.settings_service import get_settings
from models.sub_category import SubCategory
from models.menu_item import MenuItem
from models.offer import Offer
from models.order import Order, OrderItem
from models.audit_log import AuditLog
from models.location_settings import LocationSettings

# (name, category, sub-category, price, stock per location)
SAMPLE_ITEMS = [
    ("Samosa", "Snacks", "Fried", Decimal("20"), 50),
    ("Veg Puff", "Snacks", "Baked", Decimal("25"), 30),
    ("Masala Dosa", "Breakfast", None, Decimal("60"), 20),
    ("Veg Thali", "Lunch", None, Decimal("90"), 25),
    ("Masala Chai", "Drinks", None, Decimal("15"), 100),
    ("Cold Coffee", "Drinks", None, Decimal("45"), 40),
    ("Notebook", "Stationery", None, Decimal("40"), 60),
]

SAMPLE_SUB_CATEGORIES = ["Fried", "Baked"]

def seed_menu_items(db):
    if db.query(MenuItem).first():
        print("Menu items already seeded.")
        return

    subs = {name: SubCategory(name=name) for name in SAMPLE_SUB_CATEGORIES}
    db.add_all(subs.values())
    db.flush()

    # Twins: same name and descriptive fields in both shops, separate rows and stock
    for location in LOCATIONS:
        for name, category, sub_name, price, stock in SAMPLE_ITEMS:
            db.add(MenuItem(
                name=name,
                category=category,
                sub_category_id=subs[sub_name].id if sub_name else None,
                price=price,
                stock=stock,
                location=location,
            ))
    db.commit()
    print(f"Sample menu seeded for {', '.join(LOCATIONS)}.")

def seed_settings(db):
    for location in LOCATIONS:
        get_settings(db, location)
    print("Default opening status and service hours set.")

def init_db():
    print("Rebuilding database (drop/create)...")
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("All tables created:")
    for table in Base.metadata.sorted_tables:
        print(f"   - {table.name}")

    db = SessionLocal()
    seed_menu_items(db)
    seed_settings(db)
    db.close()
    print("\nDatabase initialization complete!")

if __name__ == "__main__":
    init_db()
