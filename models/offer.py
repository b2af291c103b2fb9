from sqlalchemy import Column, Integer, String, Numeric, Date, Time, DateTime, JSON, CheckConstraint
from datetime import datetime
from core.db import Base

class Offer(Base):
    __tablename__ = "offers"
    __table_args__ = (
        CheckConstraint(
            "discount_percentage >= 0 AND discount_percentage <= 100",
            name="ck_offers_discount_percentage",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)  # None = never expires
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)  # None = end of day
    applicable_categories = Column(JSON, nullable=False, default=list)  # selection filter only
    applicable_items = Column(JSON, nullable=False, default=list)  # menu item ids, decides eligibility
    location = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Offer {self.location}:{self.name} {self.discount_percentage}%>"
