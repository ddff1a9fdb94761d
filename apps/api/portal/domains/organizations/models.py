# apps/api/portal/domains/organizations/models.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from portal.shared.pagination import ListResponse
from portal.shared.permissions import PermissionState


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Organisation name cannot be blank")
        return v


class OrganizationResponse(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    isActive: bool = True
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_prisma(cls, organisation: Any) -> "OrganizationResponse":
        return cls(
            id=organisation.id,
            name=organisation.name,
            email=organisation.email,
            phone=organisation.phone,
            address=organisation.address,
            isActive=organisation.isActive,
            createdAt=organisation.createdAt,
            updatedAt=organisation.updatedAt,
        )


class CreateOrganizationResponse(BaseModel):
    organization: OrganizationResponse
    memberId: str


class RoleSummaryResponse(BaseModel):
    id: str
    name: str
    slug: str


class MyPermissionsResponse(BaseModel):
    """The caller's permission source within an organisation"""

    memberId: Optional[str]
    isOwner: bool
    role: Optional[RoleSummaryResponse]
    permissions: List[str]
    extraPermissions: List[str]

    @classmethod
    def from_state(
        cls,
        state: PermissionState,
        extra_permissions: List[str],
        all_permissions: List[str],
    ) -> "MyPermissionsResponse":
        return cls(
            memberId=state.member_id,
            isOwner=state.is_owner,
            role=(
                RoleSummaryResponse(**state.role.model_dump()) if state.role else None
            ),
            permissions=(
                list(all_permissions) if state.is_owner else sorted(state.permissions)
            ),
            extraPermissions=list(extra_permissions),
        )


class RoleResponse(BaseModel):
    id: str
    orgId: str
    name: str
    slug: str
    description: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)
    isDefault: bool = False
    isSystem: bool = False
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_prisma(cls, role: Any) -> "RoleResponse":
        return cls(
            id=role.id,
            orgId=role.orgId,
            name=role.name,
            slug=role.slug,
            description=role.description,
            permissions=list(role.permissions or []),
            isDefault=role.isDefault,
            isSystem=role.isSystem,
            createdAt=role.createdAt,
            updatedAt=role.updatedAt,
        )


class RoleCreate(BaseModel):
    """Request model for creating a custom role"""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=200)
    permissions: List[str] = Field(..., min_length=1)


class RoleUpdate(BaseModel):
    """Request model for updating a role; only provided fields change"""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=200)
    permissions: Optional[List[str]] = None

    @model_validator(mode="after")
    def validate_has_update(self) -> "RoleUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for name in ("name", "permissions"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be set to null")
        return self


class AssignRoleRequest(BaseModel):
    roleId: str = Field(..., min_length=1)


class OrganizationMemberResponse(BaseModel):
    id: str
    orgId: str
    userId: str
    displayName: Optional[str] = None
    email: Optional[str] = None
    isOwner: bool = False
    roleId: Optional[str] = None
    extraPermissions: List[str] = Field(default_factory=list)
    createdAt: Optional[datetime] = None

    @classmethod
    def from_prisma(cls, member: Any) -> "OrganizationMemberResponse":
        return cls(
            id=member.id,
            orgId=member.orgId,
            userId=member.userId,
            displayName=member.displayName,
            email=member.email,
            isOwner=member.isOwner,
            roleId=member.roleId,
            extraPermissions=list(member.extraPermissions or []),
            createdAt=member.createdAt,
        )


class UpdateMemberPermissionsRequest(BaseModel):
    roleId: Optional[str] = None
    extraPermissions: Optional[List[str]] = None

    @model_validator(mode="after")
    def validate_has_update(self) -> "UpdateMemberPermissionsRequest":
        if self.roleId is None and self.extraPermissions is None:
            raise ValueError("At least one field must be provided for update")
        return self


OrganizationListResponse = ListResponse[OrganizationResponse]
OrganizationMemberListResponse = ListResponse[OrganizationMemberResponse]
RoleListResponse = ListResponse[RoleResponse]

PermissionCatalogResponse = Dict[str, Dict[str, Any]]
