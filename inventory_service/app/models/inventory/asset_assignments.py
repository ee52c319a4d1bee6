# app/models/inventory/asset_assignments.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class AssetAssignment(Base):
    __tablename__ = "asset_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    asset_id = Column(Integer, ForeignKey(
        "assets.id", ondelete="RESTRICT"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey(
        "users.id", ondelete="RESTRICT"), nullable=False, index=True)
    status = Column(String(24), nullable=False, default="active", index=True)

    assigned_at = Column(DateTime, server_default=func.now(), nullable=False)
    expected_return_at = Column(DateTime, index=True)
    returned_at = Column(DateTime)
    actual_return_condition = Column(String(24))

    purpose = Column(String(255))
    assigned_by = Column(Integer, ForeignKey("users.id"))
    returned_by = Column(Integer, ForeignKey("users.id"))
    notes = Column(Text)
    return_notes = Column(Text)

    # Assignment-specific location
    building = Column(String(100))
    floor = Column(String(20))
    room = Column(String(50))
    desk = Column(String(50))
    location_notes = Column(Text)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(),
                        onupdate=func.now(), nullable=False)

    __table_args__ = (
        # One active assignment per asset
        Index(
            "uix_asset_assignments_active_asset",
            asset_id,
            unique=True,
            postgresql_where=(is_active == True),
            sqlite_where=(is_active == True),
        ),
    )

    asset = relationship("Asset", back_populates="assignments")
    user = relationship("Users", back_populates="assignments",
                        foreign_keys=[user_id])
