# apps/api/portal/domains/organizations/routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from portal.core.database import Database, get_db
from portal.domains.auth.dependencies import get_token_payload
from portal.domains.auth.types import JwtPayload
from portal.domains.organizations.models import (
    AssignRoleRequest,
    CreateOrganizationResponse,
    MyPermissionsResponse,
    OrganizationCreate,
    OrganizationListResponse,
    OrganizationMemberListResponse,
    OrganizationMemberResponse,
    PermissionCatalogResponse,
    RoleCreate,
    RoleListResponse,
    RoleResponse,
    RoleUpdate,
    UpdateMemberPermissionsRequest,
)
from portal.domains.organizations.service import OrganizationService
from portal.shared.pagination import QueryParameters, get_query_parameters
from portal.shared.permissions import (
    PERMISSION_CATEGORIES,
    MemberContext,
    Permission,
    ensure_permission,
    get_member_context,
    require_any_permission,
    require_permission,
)

router = APIRouter(prefix="/organisations", tags=["Organisations"])


@router.post(
    "/",
    response_model=CreateOrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createOrganization",
)
async def create_organization(
    organization_data: OrganizationCreate,
    payload: JwtPayload = Depends(get_token_payload),
    db: Database = Depends(get_db),
) -> CreateOrganizationResponse:
    """
    Create a new organisation and add the current user as owner.

    The default Admin, Agent and Viewer roles are created with it.
    """
    service = OrganizationService(db)
    return await service.create_organization(
        organization_data,
        user_id=payload.sub or "",
        display_name=payload.name,
        email=payload.email,
    )


@router.get(
    "/",
    response_model=OrganizationListResponse,
    operation_id="getMyOrganizations",
)
async def get_my_organizations(
    params: QueryParameters = Depends(get_query_parameters),
    payload: JwtPayload = Depends(get_token_payload),
    db: Database = Depends(get_db),
) -> OrganizationListResponse:
    """Get the organisations the current user belongs to."""
    service = OrganizationService(db)
    return await service.get_user_organizations(payload.sub or "", params)


@router.get(
    "/permission-catalog",
    response_model=PermissionCatalogResponse,
    operation_id="getPermissionCatalog",
)
async def get_permission_catalog(
    payload: JwtPayload = Depends(get_token_payload),
) -> PermissionCatalogResponse:
    """
    Get every permission key grouped by subject, with display labels.

    Used by role editors to render the permission matrix.
    """
    return PERMISSION_CATEGORIES


@router.get(
    "/{org_id}/my-permissions",
    response_model=MyPermissionsResponse,
    operation_id="getMyPermissions",
)
async def get_my_permissions(
    org_id: str,
    context: MemberContext = Depends(get_member_context),
    db: Database = Depends(get_db),
) -> MyPermissionsResponse:
    """
    Get the current user's permissions in an organisation.

    Clients load this into their permission store to decide what to show.
    The API re-checks every permission on each request.
    """
    service = OrganizationService(db)
    return service.get_my_permissions(context)


@router.get(
    "/{org_id}/members",
    response_model=OrganizationMemberListResponse,
    operation_id="getOrganizationMembers",
)
async def get_organization_members(
    org_id: str,
    params: QueryParameters = Depends(get_query_parameters),
    role_id: Optional[str] = Query(
        None, alias="roleId", description="Filter by role ID"
    ),
    context: MemberContext = Depends(require_permission(Permission.VIEW_MEMBERS)),
    db: Database = Depends(get_db),
) -> OrganizationMemberListResponse:
    """
    Get the members of an organisation.

    Search matches the member's display name or email. Access is restricted
    to users with the VIEW_MEMBERS permission.
    """
    service = OrganizationService(db)
    return await service.get_organization_members(org_id, params, role_id=role_id)


@router.get(
    "/{org_id}/members/{member_id}",
    response_model=OrganizationMemberResponse,
    operation_id="getOrganizationMember",
)
async def get_organization_member(
    org_id: str,
    member_id: str,
    context: MemberContext = Depends(require_permission(Permission.VIEW_MEMBERS)),
    db: Database = Depends(get_db),
) -> OrganizationMemberResponse:
    service = OrganizationService(db)
    return await service.get_member(org_id, member_id)


@router.patch(
    "/{org_id}/members/{member_id}/permissions",
    response_model=OrganizationMemberResponse,
    operation_id="updateMemberPermissions",
)
async def update_member_permissions(
    org_id: str,
    member_id: str,
    updates: UpdateMemberPermissionsRequest,
    context: MemberContext = Depends(
        require_any_permission(Permission.ASSIGN_ROLES, Permission.EDIT_MEMBERS)
    ),
    db: Database = Depends(get_db),
) -> OrganizationMemberResponse:
    """
    Change a member's role and/or extra permissions.

    Changing ``roleId`` requires ``role:assign``; changing
    ``extraPermissions`` requires ``member:edit``.

    Business rules:
    - The owner's permissions cannot be changed
    - Extra permissions must be known permission keys
    - The role must belong to this organisation

    Args:
        org_id: Organisation ID
        member_id: Member ID (not the user ID)
        updates: New role and/or extra permissions

    Returns:
        Updated member details
    """
    if updates.roleId is not None:
        ensure_permission(context, Permission.ASSIGN_ROLES)
    if updates.extraPermissions is not None:
        ensure_permission(context, Permission.EDIT_MEMBERS)

    service = OrganizationService(db)
    return await service.update_member_permissions(org_id, member_id, updates)


@router.put(
    "/{org_id}/members/{member_id}/role",
    response_model=OrganizationMemberResponse,
    operation_id="assignMemberRole",
)
async def assign_member_role(
    org_id: str,
    member_id: str,
    request: AssignRoleRequest,
    context: MemberContext = Depends(require_permission(Permission.ASSIGN_ROLES)),
    db: Database = Depends(get_db),
) -> OrganizationMemberResponse:
    """
    Give a member another role.

    The owner's role cannot be changed, and members other than the owner
    cannot change their own role.
    """
    service = OrganizationService(db)
    return await service.assign_member_role(org_id, member_id, request.roleId, context)


@router.delete(
    "/{org_id}/members/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="removeOrganizationMember",
)
async def remove_organization_member(
    org_id: str,
    member_id: str,
    context: MemberContext = Depends(require_permission(Permission.REMOVE_MEMBERS)),
    db: Database = Depends(get_db),
) -> Response:
    """Remove a member. The owner and the caller cannot be removed."""
    service = OrganizationService(db)
    await service.remove_member(org_id, member_id, context)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{org_id}/roles",
    response_model=RoleListResponse,
    operation_id="getOrganizationRoles",
)
async def get_organization_roles(
    org_id: str,
    params: QueryParameters = Depends(get_query_parameters),
    context: MemberContext = Depends(require_permission(Permission.VIEW_ROLES)),
    db: Database = Depends(get_db),
) -> RoleListResponse:
    """Get the roles defined in an organisation."""
    service = OrganizationService(db)
    return await service.get_organization_roles(org_id, params)


@router.post(
    "/{org_id}/roles",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createRole",
)
async def create_role(
    org_id: str,
    role_data: RoleCreate,
    context: MemberContext = Depends(require_permission(Permission.CREATE_ROLES)),
    db: Database = Depends(get_db),
) -> RoleResponse:
    """
    Create a custom role.

    The slug is derived from the name and must be unique in the organisation.
    """
    service = OrganizationService(db)
    return await service.create_role(org_id, role_data)


@router.get(
    "/{org_id}/roles/{role_id}",
    response_model=RoleResponse,
    operation_id="getRole",
)
async def get_role(
    org_id: str,
    role_id: str,
    context: MemberContext = Depends(require_permission(Permission.VIEW_ROLES)),
    db: Database = Depends(get_db),
) -> RoleResponse:
    service = OrganizationService(db)
    return await service.get_role(org_id, role_id)


@router.patch(
    "/{org_id}/roles/{role_id}",
    response_model=RoleResponse,
    operation_id="updateRole",
)
async def update_role(
    org_id: str,
    role_id: str,
    updates: RoleUpdate,
    context: MemberContext = Depends(require_permission(Permission.EDIT_ROLES)),
    db: Database = Depends(get_db),
) -> RoleResponse:
    """
    Update a role's name, description or permissions.

    System roles keep their slug when renamed.
    """
    service = OrganizationService(db)
    return await service.update_role(org_id, role_id, updates)


@router.delete(
    "/{org_id}/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="deleteRole",
)
async def delete_role(
    org_id: str,
    role_id: str,
    context: MemberContext = Depends(require_permission(Permission.DELETE_ROLES)),
    db: Database = Depends(get_db),
) -> Response:
    """Delete a custom role. System roles and roles still held cannot be deleted."""
    service = OrganizationService(db)
    await service.delete_role(org_id, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
