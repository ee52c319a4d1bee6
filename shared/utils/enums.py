from enum import Enum


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"
    VIEWER = "viewer"


ROLE_HIERARCHY = {
    UserRole.VIEWER.value: 1,
    UserRole.USER.value: 2,
    UserRole.MANAGER.value: 3,
    UserRole.ADMIN.value: 4,
    UserRole.SUPER_ADMIN.value: 5,
}
