# app/models/inventory/audit_logs.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func
from shared.core.database import Base


class AuditLog(Base):
    """Append-only. Snapshots are stored as JSON text."""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(24), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False, index=True)
    entity_id = Column(String(255), nullable=False, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), index=True)
    user_email = Column(String(255))

    old_values = Column(Text)
    new_values = Column(Text)
    changed_fields = Column(Text)

    description = Column(Text)
    timestamp = Column(DateTime, server_default=func.now(),
                       nullable=False, index=True)
