from enum import Enum
from typing import Dict, List, TypedDict


class Permission(str, Enum):
    """
    Defines all permissions available in the system.

    Values follow the pattern ``subject:action`` and are what gets stored on
    roles and members. Member names follow ACTION_RESOURCE.
    """

    # Ticket permissions
    VIEW_TICKETS = "ticket:view"
    CREATE_TICKETS = "ticket:create"
    EDIT_TICKETS = "ticket:edit"
    DELETE_TICKETS = "ticket:delete"
    ASSIGN_TICKETS = "ticket:assign"
    CLOSE_TICKETS = "ticket:close"

    # Chat permissions
    VIEW_CHATS = "chat:view"
    REPLY_CHATS = "chat:reply"
    ASSIGN_CHATS = "chat:assign"
    CLOSE_CHATS = "chat:close"
    DELETE_CHATS = "chat:delete"

    # Contact permissions
    VIEW_CONTACTS = "contact:view"
    CREATE_CONTACTS = "contact:create"
    EDIT_CONTACTS = "contact:edit"
    DELETE_CONTACTS = "contact:delete"
    EXPORT_CONTACTS = "contact:export"

    # Member permissions
    VIEW_MEMBERS = "member:view"
    ADD_MEMBERS = "member:add"
    EDIT_MEMBERS = "member:edit"
    REMOVE_MEMBERS = "member:remove"

    # Role permissions
    VIEW_ROLES = "role:view"
    CREATE_ROLES = "role:create"
    EDIT_ROLES = "role:edit"
    DELETE_ROLES = "role:delete"
    ASSIGN_ROLES = "role:assign"

    # Organisation permissions
    VIEW_ORGANISATION = "organisation:view"
    EDIT_ORGANISATION = "organisation:edit"
    DELETE_ORGANISATION = "organisation:delete"
    MANAGE_BILLING = "organisation:billing"

    # Integration permissions
    VIEW_INTEGRATIONS = "integration:view"
    CREATE_INTEGRATIONS = "integration:create"
    EDIT_INTEGRATIONS = "integration:edit"
    DELETE_INTEGRATIONS = "integration:delete"

    # Report permissions
    VIEW_REPORTS = "report:view"
    EXPORT_REPORTS = "report:export"

    # Widget permissions
    VIEW_WIDGET = "widget:view"
    EDIT_WIDGET = "widget:edit"


ALL_PERMISSIONS: List[str] = [p.value for p in Permission]


class PermissionCategory(TypedDict):
    label: str
    permissions: List[str]


# Labels shown when grouping permissions in role editors
CATEGORY_LABELS: Dict[str, str] = {
    "ticket": "Tickets",
    "chat": "Chat / Conversations",
    "contact": "Contacts",
    "member": "Team Members",
    "role": "Roles & Permissions",
    "organisation": "Organisation Settings",
    "integration": "Integrations",
    "report": "Reports & Analytics",
    "widget": "Widget Settings",
}


def _categorize() -> Dict[str, PermissionCategory]:
    categories: Dict[str, PermissionCategory] = {}
    for key in ALL_PERMISSIONS:
        subject = key.split(":", 1)[0]
        if subject not in categories:
            categories[subject] = {
                "label": CATEGORY_LABELS.get(subject, subject.title()),
                "permissions": [],
            }
        categories[subject]["permissions"].append(key)
    return categories


PERMISSION_CATEGORIES: Dict[str, PermissionCategory] = _categorize()


class DefaultRole(TypedDict):
    name: str
    slug: str
    description: str
    permissions: List[str]


# Roles seeded into every new organisation. Owners are flagged on the member
# itself and need no role.
DEFAULT_ROLES: List[DefaultRole] = [
    {
        "name": "Admin",
        "slug": "admin",
        "description": "Full access except billing and deleting the organisation",
        "permissions": [
            p.value
            for p in Permission
            if p not in {Permission.MANAGE_BILLING, Permission.DELETE_ORGANISATION}
        ],
    },
    {
        "name": "Agent",
        "slug": "agent",
        "description": "Handles tickets, chats and contacts",
        "permissions": [
            Permission.VIEW_TICKETS.value,
            Permission.CREATE_TICKETS.value,
            Permission.EDIT_TICKETS.value,
            Permission.ASSIGN_TICKETS.value,
            Permission.CLOSE_TICKETS.value,
            Permission.VIEW_CHATS.value,
            Permission.REPLY_CHATS.value,
            Permission.ASSIGN_CHATS.value,
            Permission.CLOSE_CHATS.value,
            Permission.VIEW_CONTACTS.value,
            Permission.CREATE_CONTACTS.value,
            Permission.EDIT_CONTACTS.value,
            Permission.VIEW_MEMBERS.value,
        ],
    },
    {
        "name": "Viewer",
        "slug": "viewer",
        "description": "Read-only access",
        "permissions": [p.value for p in Permission if p.value.endswith(":view")],
    },
]


def is_valid_permission(permission: str) -> bool:
    """Check if a permission string is part of the catalog."""
    return permission in ALL_PERMISSIONS
