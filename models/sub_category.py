from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from core.db import Base

class SubCategory(Base):
    __tablename__ = "sub_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    image = Column(String, nullable=True)

    # Shared by both locations
    items = relationship("MenuItem", back_populates="sub_category")
