# apps/api/portal/domains/organizations/service.py
import logging
import re
from typing import Any, Dict, List, Optional

from portal.core.database import Database, is_object_id
from portal.domains.organizations.models import (
    CreateOrganizationResponse,
    MyPermissionsResponse,
    OrganizationCreate,
    OrganizationListResponse,
    OrganizationMemberListResponse,
    OrganizationMemberResponse,
    OrganizationResponse,
    RoleCreate,
    RoleListResponse,
    RoleResponse,
    RoleUpdate,
    UpdateMemberPermissionsRequest,
)
from portal.shared.exceptions import (
    InvalidDataError,
    QueryValidationError,
    ResourceNotFoundError,
)
from portal.shared.pagination import (
    ListQueryConfig,
    QueryParameters,
    paginate,
    with_filters,
)
from portal.shared.permissions import (
    ALL_PERMISSIONS,
    DEFAULT_ROLES,
    MemberContext,
    is_valid_permission,
)

logger = logging.getLogger(__name__)

ORGANIZATION_LIST = ListQueryConfig(
    search_fields=("name", "email"),
    sortable_fields=frozenset({"name", "createdAt", "updatedAt"}),
    filterable_fields=frozenset(),
)

MEMBER_LIST = ListQueryConfig(
    search_fields=("displayName", "email"),
    sortable_fields=frozenset({"displayName", "email", "createdAt"}),
    filterable_fields=frozenset({"roleId"}),
)

ROLE_LIST = ListQueryConfig(
    search_fields=("name", "slug"),
    sortable_fields=frozenset({"name", "createdAt", "updatedAt"}),
    filterable_fields=frozenset(),
)


class OrganizationService:
    def __init__(self, db: Database):
        self.db = db

    async def create_organization(
        self,
        organization_data: OrganizationCreate,
        user_id: str,
        display_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> CreateOrganizationResponse:
        """
        Create a new organisation, seed its default roles and add the current
        user as owner.

        All writes run in one transaction so a failure leaves no partial
        organisation behind.
        """
        async with self.db.tx() as transaction:
            organisation = await transaction.organisation.create(
                data={
                    **organization_data.model_dump(),
                    "isActive": True,
                }
            )

            for role in DEFAULT_ROLES:
                await transaction.role.create(
                    data={
                        "orgId": organisation.id,
                        "name": role["name"],
                        "slug": role["slug"],
                        "description": role["description"],
                        "permissions": list(role["permissions"]),
                        "isDefault": True,
                        "isSystem": True,
                    }
                )

            membership = await transaction.member.create(
                data={
                    "orgId": organisation.id,
                    "userId": user_id,
                    "isOwner": True,
                    "extraPermissions": [],
                    "displayName": display_name,
                    "email": email,
                }
            )
        logger.info(f"Created organisation {organisation.id} owned by user {user_id}")

        return CreateOrganizationResponse(
            organization=OrganizationResponse.from_prisma(organisation),
            memberId=membership.id,
        )

    async def get_user_organizations(
        self, user_id: str, params: QueryParameters
    ) -> OrganizationListResponse:
        """
        Get the organisations the user is a member of.

        Search matches the organisation name or email.
        """
        memberships = await self.db.member.find_many(where={"userId": user_id})
        org_ids = [m.orgId for m in memberships]

        result = await paginate(
            self.db.organisation,
            params,
            ORGANIZATION_LIST,
            scope={"id": {"in": org_ids}},
        )
        return OrganizationListResponse(
            data=[OrganizationResponse.from_prisma(o) for o in result.items],
            pagination=result.pagination,
        )

    def get_my_permissions(self, context: MemberContext) -> MyPermissionsResponse:
        """
        Describe the caller's permissions in the organisation.

        Owners are reported with the full permission catalog. For everyone else
        ``permissions`` is the union of the role's and the extra permissions.
        """
        return MyPermissionsResponse.from_state(
            context.state,
            extra_permissions=list(context.membership.extraPermissions or []),
            all_permissions=ALL_PERMISSIONS,
        )

    async def get_organization_members(
        self,
        organization_id: str,
        params: QueryParameters,
        role_id: Optional[str] = None,
    ) -> OrganizationMemberListResponse:
        """
        Get one page of members of an organisation.

        Args:
            organization_id: The organisation ID to get members for
            params: Page, limit, search and sort parameters
            role_id: Only return members holding this role

        Returns:
            Members with pagination metadata

        Raises:
            QueryValidationError: If role_id is not a valid ID
        """
        if role_id and not is_object_id(role_id):
            raise QueryValidationError("roleId must be a valid ID")
        params = with_filters(params, roleId=role_id)
        result = await paginate(
            self.db.member, params, MEMBER_LIST, scope={"orgId": organization_id}
        )
        return OrganizationMemberListResponse(
            data=[OrganizationMemberResponse.from_prisma(m) for m in result.items],
            pagination=result.pagination,
        )

    async def get_organization_roles(
        self, organization_id: str, params: QueryParameters
    ) -> RoleListResponse:
        result = await paginate(
            self.db.role, params, ROLE_LIST, scope={"orgId": organization_id}
        )
        return RoleListResponse(
            data=[RoleResponse.from_prisma(r) for r in result.items],
            pagination=result.pagination,
        )

    async def get_member(
        self, organization_id: str, member_id: str
    ) -> OrganizationMemberResponse:
        member = await self._get_member_record(organization_id, member_id)
        return OrganizationMemberResponse.from_prisma(member)

    async def update_member_permissions(
        self,
        organization_id: str,
        member_id: str,
        updates: UpdateMemberPermissionsRequest,
    ) -> OrganizationMemberResponse:
        """
        Change a member's role and/or extra permissions.

        Business rules:
        - The owner's permissions cannot be changed
        - Extra permissions must all be known permission keys
        - The role must belong to the same organisation

        Raises:
            ResourceNotFoundError: If the member or role is not in the organisation
            InvalidDataError: If a business rule is violated
        """
        member = await self._get_member_record(organization_id, member_id)
        if member.isOwner:
            raise InvalidDataError(
                "Cannot change the permissions of the organisation owner"
            )

        data: dict = {}

        if updates.extraPermissions is not None:
            _validate_permissions(updates.extraPermissions)
            data["extraPermissions"] = _dedupe(updates.extraPermissions)

        if updates.roleId is not None:
            role = await self._get_role_record(organization_id, updates.roleId)
            data["roleId"] = role.id

        updated_member = await self.db.member.update(where={"id": member.id}, data=data)
        logger.info(
            f"Updated permissions of member {member.id} "
            f"in organisation {organization_id}"
        )
        return OrganizationMemberResponse.from_prisma(updated_member)

    async def assign_member_role(
        self,
        organization_id: str,
        member_id: str,
        role_id: str,
        context: MemberContext,
    ) -> OrganizationMemberResponse:
        """
        Give a member another role of the organisation.

        Business rules:
        - The owner's role cannot be changed
        - Only the owner may change their own role

        Raises:
            ResourceNotFoundError: If the member or role is not in the organisation
            InvalidDataError: If a business rule is violated
        """
        member = await self._get_member_record(organization_id, member_id)
        if member.isOwner:
            raise InvalidDataError("Cannot change the owner's role")
        if member.id == context.membership.id and not context.state.is_owner:
            raise InvalidDataError("You cannot change your own role")

        role = await self._get_role_record(organization_id, role_id)
        updated_member = await self.db.member.update(
            where={"id": member.id}, data={"roleId": role.id}
        )
        logger.info(
            f"Assigned role {role.slug} to member {member.id} "
            f"in organisation {organization_id}"
        )
        return OrganizationMemberResponse.from_prisma(updated_member)

    async def remove_member(
        self, organization_id: str, member_id: str, context: MemberContext
    ) -> None:
        """
        Remove a member from the organisation.

        Raises:
            ResourceNotFoundError: If the member is not in the organisation
            InvalidDataError: If the member is the owner or the caller
        """
        member = await self._get_member_record(organization_id, member_id)
        if member.isOwner:
            raise InvalidDataError("Cannot remove the organisation owner")
        if member.id == context.membership.id:
            raise InvalidDataError("You cannot remove yourself from the organisation")

        await self.db.member.delete(where={"id": member.id})
        logger.info(f"Removed member {member.id} from organisation {organization_id}")

    async def get_role(self, organization_id: str, role_id: str) -> RoleResponse:
        role = await self._get_role_record(organization_id, role_id)
        return RoleResponse.from_prisma(role)

    async def create_role(self, organization_id: str, data: RoleCreate) -> RoleResponse:
        """
        Create a custom role.

        The slug is derived from the name and must be unique in the
        organisation. Custom roles are never default or system roles.

        Raises:
            InvalidDataError: If a permission is unknown or the name is taken
        """
        _validate_permissions(data.permissions)
        slug = _slugify(data.name)
        await self._ensure_unique_slug(organization_id, slug)

        role = await self.db.role.create(
            data={
                "orgId": organization_id,
                "name": data.name,
                "slug": slug,
                "description": data.description,
                "permissions": _dedupe(data.permissions),
                "isDefault": False,
                "isSystem": False,
            }
        )
        logger.info(f"Created role {role.slug} in organisation {organization_id}")
        return RoleResponse.from_prisma(role)

    async def update_role(
        self, organization_id: str, role_id: str, updates: RoleUpdate
    ) -> RoleResponse:
        """
        Update a role; only the provided fields change.

        Renaming a custom role regenerates its slug. System roles keep their
        slug so default role lookups stay stable.

        Raises:
            ResourceNotFoundError: If the role is not in the organisation
            InvalidDataError: If a permission is unknown or the name is taken
        """
        role = await self._get_role_record(organization_id, role_id)
        changes = updates.model_dump(exclude_unset=True)

        if "permissions" in changes:
            _validate_permissions(changes["permissions"])
            changes["permissions"] = _dedupe(changes["permissions"])

        if "name" in changes and not role.isSystem:
            slug = _slugify(changes["name"])
            await self._ensure_unique_slug(organization_id, slug, exclude_id=role.id)
            changes["slug"] = slug

        updated_role = await self.db.role.update(where={"id": role.id}, data=changes)
        return RoleResponse.from_prisma(updated_role)

    async def delete_role(self, organization_id: str, role_id: str) -> None:
        """
        Delete a custom role that no member holds.

        Raises:
            ResourceNotFoundError: If the role is not in the organisation
            InvalidDataError: If the role is a system role or still assigned
        """
        role = await self._get_role_record(organization_id, role_id)
        if role.isSystem:
            raise InvalidDataError("Cannot delete system roles")

        holders = await self.db.member.count(where={"roleId": role.id})
        if holders:
            raise InvalidDataError(
                f"Cannot delete role. {holders} member(s) are using this role. "
                "Please reassign them first."
            )

        await self.db.role.delete(where={"id": role.id})
        logger.info(f"Deleted role {role.slug} from organisation {organization_id}")

    async def _get_member_record(self, organization_id: str, member_id: str) -> Any:
        if not is_object_id(member_id):
            raise ResourceNotFoundError("Member not found")
        member = await self.db.member.find_first(
            where={"id": member_id, "orgId": organization_id}
        )
        if not member:
            raise ResourceNotFoundError("Member not found")
        return member

    async def _get_role_record(self, organization_id: str, role_id: str) -> Any:
        if not is_object_id(role_id):
            raise ResourceNotFoundError("Role not found")
        role = await self.db.role.find_first(
            where={"id": role_id, "orgId": organization_id}
        )
        if not role:
            raise ResourceNotFoundError("Role not found")
        return role

    async def _ensure_unique_slug(
        self, organization_id: str, slug: str, exclude_id: Optional[str] = None
    ) -> None:
        where: Dict[str, Any] = {"orgId": organization_id, "slug": slug}
        if exclude_id:
            where["id"] = {"not": exclude_id}
        if await self.db.role.find_first(where=where):
            raise InvalidDataError("A role with this name already exists")


def _validate_permissions(permissions: List[str]) -> None:
    unknown = [p for p in permissions if not is_valid_permission(p)]
    if unknown:
        raise InvalidDataError(f"Unknown permissions: {', '.join(unknown)}")


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    if not slug:
        raise InvalidDataError("Role name must contain a letter or digit")
    return slug


def _dedupe(permissions: List[str]) -> List[str]:
    return list(dict.fromkeys(permissions))
