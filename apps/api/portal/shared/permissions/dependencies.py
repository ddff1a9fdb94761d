from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from fastapi import Depends

from portal.core.database import Database, get_db
from portal.domains.auth.dependencies import get_current_user_id
from portal.domains.auth.service import validate_organization_access
from portal.shared.exceptions import NotAuthorizedError

from .models import Permission
from .services import (
    PermissionState,
    RoleSummary,
    build_permission_state,
    can,
    can_any,
)


@dataclass(frozen=True)
class MemberContext:
    """The caller's membership in an organisation and the permissions it grants."""

    membership: Any
    state: PermissionState

    @property
    def org_id(self) -> str:
        return self.membership.orgId


def permission_state_for(membership: Any) -> PermissionState:
    """Build the permission state of a member record (with its role included)."""
    role = getattr(membership, "role", None)
    return build_permission_state(
        member_id=membership.id,
        is_owner=membership.isOwner,
        role=RoleSummary(id=role.id, name=role.name, slug=role.slug) if role else None,
        role_permissions=role.permissions if role else None,
        extra_permissions=membership.extraPermissions,
    )


async def get_member_context(
    org_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
) -> MemberContext:
    """
    Resolve the caller's membership and permissions for the organisation.

    Raises:
        NotOrganisationMemberError: If the caller is not a member
    """
    membership = await validate_organization_access(user_id, org_id, db)
    return MemberContext(membership=membership, state=permission_state_for(membership))


def ensure_permission(context: MemberContext, permission: Permission) -> None:
    """
    Check a permission that depends on the request body rather than the route.

    Raises:
        NotAuthorizedError: If the member does not hold ``permission``
    """
    if not can(context.state, permission.value):
        raise NotAuthorizedError(
            f"Insufficient permissions: {permission.value} required"
        )


def require_permission(
    permission: Permission,
) -> Callable[..., Awaitable[MemberContext]]:
    """
    Dependency factory for permission-based authorization.

    Creates a dependency that validates the current user has the specified
    permission for the organisation.

    Args:
        permission: The permission required to access the endpoint

    Returns:
        Async dependency function that validates permission and returns the
        member context
    """

    async def check_permission(
        context: MemberContext = Depends(get_member_context),
    ) -> MemberContext:
        ensure_permission(context, permission)
        return context

    return check_permission


def require_any_permission(
    *permissions: Permission,
) -> Callable[..., Awaitable[MemberContext]]:
    """Like ``require_permission`` but passes if any one of ``permissions`` is held."""
    keys = [p.value for p in permissions]

    async def check_any_permission(
        context: MemberContext = Depends(get_member_context),
    ) -> MemberContext:
        if not can_any(context.state, keys):
            raise NotAuthorizedError(
                f"Insufficient permissions: {' or '.join(keys)} required"
            )
        return context

    return check_any_permission
