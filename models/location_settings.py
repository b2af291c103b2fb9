from sqlalchemy import Column, Integer, String, Boolean, Time, DateTime
from datetime import datetime, time
from core.db import Base

class LocationSettings(Base):
    __tablename__ = "location_settings"

    id = Column(Integer, primary_key=True, index=True)
    location = Column(String, unique=True, nullable=False)  # canteen | cafeteria
    is_open = Column(Boolean, nullable=False, default=True)
    breakfast_start = Column(Time, nullable=False, default=time(8, 0))
    breakfast_end = Column(Time, nullable=False, default=time(11, 0))
    lunch_start = Column(Time, nullable=False, default=time(12, 0))
    lunch_end = Column(Time, nullable=False, default=time(15, 0))
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<LocationSettings {self.location} {'open' if self.is_open else 'closed'}>"
