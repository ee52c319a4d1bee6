# Import all models to ensure they are registered with SQLAlchemy
from shared.models.users import Users
from .assets import Asset
from .asset_assignments import AssetAssignment
from .maintenance_records import MaintenanceRecord
from .audit_logs import AuditLog
from .asset_counters import AssetCounter
