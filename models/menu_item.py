from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from core.db import Base

class MenuItem(Base):
    __tablename__ = "menu_items"
    __table_args__ = (
        UniqueConstraint("location", "name", name="uq_menu_items_location_name"),
        CheckConstraint("stock >= 0", name="ck_menu_items_stock"),
        CheckConstraint("price >= 0", name="ck_menu_items_price"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)  # twin key across locations
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False)  # Snacks, Breakfast, Lunch, Drinks, ...
    sub_category_id = Column(Integer, ForeignKey("sub_categories.id", ondelete="SET NULL"), nullable=True)
    stock = Column(Integer, nullable=False, default=0)
    location = Column(String, nullable=False, index=True)  # canteen | cafeteria
    image = Column(String, nullable=True)  # stored reference, see core.image_store
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    sub_category = relationship("SubCategory", back_populates="items")

    def __repr__(self):
        return f"<MenuItem {self.location}:{self.name}>"
