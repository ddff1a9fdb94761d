from typing import Any

from portal.core.database import Database, is_object_id
from portal.shared.exceptions import NotOrganisationMemberError


async def validate_organization_access(
    user_id: str, organization_id: str, db: Database
) -> Any:
    """
    Validate that a user has access to an organisation

    Args:
        user_id: Authenticated user's ID
        organization_id: Organisation ID to check access for
        db: Prisma database connection

    Returns:
        Member record with its role included

    Raises:
        NotOrganisationMemberError: If the user is not a member of the organisation
    """
    if not is_object_id(organization_id):
        raise NotOrganisationMemberError()

    membership = await db.member.find_first(
        where={"userId": user_id, "orgId": organization_id},
        include={"role": True},
    )

    if not membership:
        raise NotOrganisationMemberError()

    return membership
