# app/models/inventory/maintenance_records.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class MaintenanceRecord(Base):
    __tablename__ = "maintenance_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    asset_id = Column(Integer, ForeignKey(
        "assets.id", ondelete="RESTRICT"), nullable=False, index=True)
    type = Column(String(24), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(String(20), default="medium")
    performed_by = Column(String(255))

    scheduled_at = Column(DateTime)
    started_at = Column(DateTime)
    completed_at = Column(DateTime)
    next_scheduled_at = Column(DateTime)

    is_completed = Column(Boolean, default=False, nullable=False)
    condition_before = Column(String(24))
    condition_after = Column(String(24))
    attachments = Column(JSON)

    created_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(),
                        onupdate=func.now(), nullable=False)

    asset = relationship("Asset", back_populates="maintenance_records")
