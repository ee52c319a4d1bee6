# app/models/inventory/assets.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, Numeric, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Asset(Base):
    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    asset_tag = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(32), nullable=False, index=True)
    subcategory = Column(String(100))
    status = Column(String(24), nullable=False, default="available", index=True)
    condition = Column(String(24), nullable=False, default="good")

    # Technical specifications
    serial_number = Column(String(255), index=True)
    model = Column(String(255))
    manufacturer = Column(String(255))
    specifications = Column(JSON)

    # Financial information
    purchase_date = Column(DateTime)
    purchase_price = Column(Numeric(10, 2))
    current_value = Column(Numeric(10, 2))
    depreciation_rate = Column(Numeric(5, 2))
    warranty_expiry = Column(DateTime, index=True)

    # Location
    building = Column(String(100), index=True)
    floor = Column(String(20))
    room = Column(String(50))
    desk = Column(String(50))
    location_notes = Column(Text)

    description = Column(Text)
    notes = Column(Text)
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(),
                        onupdate=func.now(), nullable=False)

    __table_args__ = (
        # Tags stay unique among live assets; deleted rows may keep theirs
        Index(
            "uix_assets_live_asset_tag",
            asset_tag,
            unique=True,
            postgresql_where=(is_deleted == False),
            sqlite_where=(is_deleted == False),
        ),
    )

    assignments = relationship("AssetAssignment", back_populates="asset")
    maintenance_records = relationship(
        "MaintenanceRecord", back_populates="asset")
