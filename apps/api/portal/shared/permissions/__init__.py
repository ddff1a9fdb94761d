"""
Shared permission system for role-based access control.

Permission keys have the form ``subject:action`` (e.g. ``ticket:view``). A
member's effective permissions are the union of their role's permissions and
their extra permissions; organisation owners hold every permission.

The pure checks (``can``, ``can_any``, ``can_all``) drive what a client shows.
Routes re-check on the server with the dependency factories.

Usage:
    from portal.shared.permissions import Permission, require_permission

    @router.get("/{org_id}/tickets")
    async def list_tickets(
        context: MemberContext = Depends(
            require_permission(Permission.VIEW_TICKETS)
        )
    ):
        pass
"""

from .ability import Ability, build_permission, define_ability_for, parse_permission
from .dependencies import (
    MemberContext,
    get_member_context,
    ensure_permission,
    permission_state_for,
    require_any_permission,
    require_permission,
)
from .models import (
    ALL_PERMISSIONS,
    DEFAULT_ROLES,
    PERMISSION_CATEGORIES,
    Permission,
    is_valid_permission,
)
from .services import (
    EMPTY_PERMISSION_STATE,
    PermissionState,
    RoleSummary,
    build_permission_state,
    can,
    can_all,
    can_any,
    cannot,
    effective_permissions,
)
from .store import PermissionSnapshot, PermissionStatus, PermissionStore

__all__ = [
    "ALL_PERMISSIONS",
    "Ability",
    "DEFAULT_ROLES",
    "EMPTY_PERMISSION_STATE",
    "MemberContext",
    "PERMISSION_CATEGORIES",
    "Permission",
    "PermissionSnapshot",
    "PermissionState",
    "PermissionStatus",
    "PermissionStore",
    "RoleSummary",
    "build_permission",
    "build_permission_state",
    "can",
    "can_all",
    "can_any",
    "cannot",
    "define_ability_for",
    "effective_permissions",
    "ensure_permission",
    "get_member_context",
    "is_valid_permission",
    "parse_permission",
    "permission_state_for",
    "require_any_permission",
    "require_permission",
]
