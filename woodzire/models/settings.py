from sqlalchemy import Column, Integer, String, DateTime, JSON
from datetime import datetime
from woodzire.db.base import Base

class SiteSetting(Base):
    __tablename__ = "site_settings"
    id = Column(Integer, primary_key=True)
    key = Column(String, unique=True, index=True, nullable=False)
    value = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
