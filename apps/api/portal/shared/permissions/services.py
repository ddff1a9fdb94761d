from typing import FrozenSet, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


class RoleSummary(BaseModel):
    """Role details carried alongside a permission state (informational only)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    slug: str


class PermissionState(BaseModel):
    """
    Permissions held by a member within one organisation.

    ``permissions`` is already the union of role and extra permissions.
    """

    model_config = ConfigDict(frozen=True)

    member_id: Optional[str] = None
    is_owner: bool = False
    role: Optional[RoleSummary] = None
    permissions: FrozenSet[str] = Field(default_factory=frozenset)


EMPTY_PERMISSION_STATE = PermissionState()


def can(state: PermissionState, permission: str) -> bool:
    """
    Check if a member holds a permission.

    Owners hold every permission, including keys not in the catalog.

    Args:
        state: The member's permission state
        permission: Permission key, e.g. ``"ticket:view"``

    Returns:
        True if the member is an owner or holds the permission
    """
    if state.is_owner:
        return True
    return permission in state.permissions


def cannot(state: PermissionState, permission: str) -> bool:
    return not can(state, permission)


def can_any(state: PermissionState, permissions: Optional[Iterable[str]]) -> bool:
    """True if the member is an owner or holds at least one of ``permissions``."""
    if state.is_owner:
        return True
    return any(p in state.permissions for p in permissions or ())


def can_all(state: PermissionState, permissions: Optional[Iterable[str]]) -> bool:
    """
    True if the member is an owner or holds every one of ``permissions``.

    An empty list is vacuously satisfied.
    """
    if state.is_owner:
        return True
    return all(p in state.permissions for p in permissions or ())


def effective_permissions(
    role_permissions: Optional[Iterable[str]],
    extra_permissions: Optional[Iterable[str]],
) -> FrozenSet[str]:
    """Union of a role's permissions and a member's extra permissions."""
    return frozenset(role_permissions or ()) | frozenset(extra_permissions or ())


def build_permission_state(
    member_id: Optional[str],
    is_owner: bool,
    role: Optional[RoleSummary],
    role_permissions: Optional[Iterable[str]] = None,
    extra_permissions: Optional[Iterable[str]] = None,
) -> PermissionState:
    """Build a PermissionState from a member's permission source."""
    return PermissionState(
        member_id=member_id,
        is_owner=bool(is_owner),
        role=role,
        permissions=effective_permissions(role_permissions, extra_permissions),
    )
