# app/models/inventory/asset_counters.py
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func
from shared.core.database import Base


class AssetCounter(Base):
    __tablename__ = "asset_counters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String(32), nullable=False, unique=True)
    next_number = Column(Integer, nullable=False, default=1)
    last_updated = Column(DateTime, server_default=func.now(),
                          onupdate=func.now(), nullable=False)
