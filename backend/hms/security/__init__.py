# Security module
from hms.security.auth import (
    get_current_user, require_permission, require_platform_admin, require_role, require_super_admin
)

__all__ = [
    'get_current_user', 'require_permission', 'require_platform_admin', 'require_role',
    'require_super_admin'
]
