from enum import Enum


class AssetStatus(str, Enum):

    available = "available"
    assigned = "assigned"
    maintenance = "maintenance"
    repair = "repair"
    retired = "retired"
    lost = "lost"
    stolen = "stolen"


class AssetCategory(str, Enum):

    laptop = "laptop"
    desktop = "desktop"
    monitor = "monitor"
    printer = "printer"
    phone = "phone"
    tablet = "tablet"
    server = "server"
    network_device = "network_device"
    software_license = "software_license"
    toner = "toner"
    other = "other"


class AssetCondition(str, Enum):

    new = "new"
    excellent = "excellent"
    good = "good"
    fair = "fair"
    poor = "poor"
    damaged = "damaged"


class AssignmentStatus(str, Enum):

    active = "active"
    returned = "returned"
    overdue = "overdue"
    lost = "lost"


class MaintenanceType(str, Enum):

    preventive = "preventive"
    corrective = "corrective"
    upgrade = "upgrade"
    repair = "repair"
    inspection = "inspection"
    emergency = "emergency"


class MaintenancePriority(str, Enum):

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class AuditAction(str, Enum):

    create = "create"
    update = "update"
    delete = "delete"
    assign = "assign"
    return_ = "return"
    maintenance = "maintenance"
    login = "login"
    logout = "logout"


class BulkAssetOperation(str, Enum):

    update = "update"
    delete = "delete"
    status_change = "status_change"
    category_change = "category_change"
    location_change = "location_change"


class BulkAssignmentOperation(str, Enum):

    return_ = "return"
    status_change = "status_change"
    extend_return_date = "extend_return_date"


class ReportType(str, Enum):

    assets = "assets"
    assignments = "assignments"
    warranty = "warranty"


# Tag prefixes per category: IT-<prefix>-<NNNN>
CATEGORY_TAG_PREFIXES = {
    AssetCategory.laptop: "LAP",
    AssetCategory.desktop: "DSK",
    AssetCategory.monitor: "MON",
    AssetCategory.printer: "PRN",
    AssetCategory.phone: "PHN",
    AssetCategory.tablet: "TAB",
    AssetCategory.server: "SVR",
    AssetCategory.network_device: "NET",
    AssetCategory.software_license: "SW",
    AssetCategory.toner: "TON",
    AssetCategory.other: "OTH",
}
