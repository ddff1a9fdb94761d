#!/usr/bin/env python3
import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

import jwt

# Add the project root to Python path so we can import from portal
project_root = Path(__file__).parent.parent
sys.path.append(str(project_root))

from prisma import Prisma
from portal.core.settings import settings
from portal.shared.permissions import DEFAULT_ROLES, Permission

ORG_NAME = "Test Organisation"
OWNER_USER_ID = "seed-owner"
AGENT_USER_ID = "seed-agent"


async def seed_roles(prisma: Prisma, org_id: str) -> dict[str, str]:
    """Create the default roles if missing; returns slug -> role id"""
    role_ids: dict[str, str] = {}
    for role in DEFAULT_ROLES:
        existing = await prisma.role.find_first(
            where={"orgId": org_id, "slug": role["slug"]}
        )
        if existing:
            print(f"ℹ️ Role already exists: {role['name']}")
            role_ids[role["slug"]] = existing.id
            continue
        created = await prisma.role.create(
            data={
                "orgId": org_id,
                "name": role["name"],
                "slug": role["slug"],
                "description": role["description"],
                "permissions": list(role["permissions"]),
                "isDefault": True,
                "isSystem": True,
            }
        )
        role_ids[role["slug"]] = created.id
        print(f"✅ Created role: {created.name}")
    return role_ids


async def seed_member(prisma: Prisma, org_id: str, user_id: str, **data) -> None:
    existing = await prisma.member.find_first(
        where={"orgId": org_id, "userId": user_id}
    )
    if existing:
        print(f"ℹ️ Member already exists: {user_id}")
        return
    await prisma.member.create(data={"orgId": org_id, "userId": user_id, **data})
    print(f"✅ Created member: {user_id}")


async def main():
    print("🌱 Starting database seed...")

    prisma = Prisma()
    await prisma.connect()

    try:
        organisation = await prisma.organisation.find_first(where={"name": ORG_NAME})
        if not organisation:
            organisation = await prisma.organisation.create(
                data={"name": ORG_NAME, "email": "hello@example.com", "isActive": True}
            )
            print(f"✅ Created organisation: {organisation.id}")
        else:
            print(f"ℹ️ Organisation already exists: {organisation.id}")
        org_id = organisation.id

        role_ids = await seed_roles(prisma, org_id)

        await seed_member(
            prisma,
            org_id,
            OWNER_USER_ID,
            isOwner=True,
            extraPermissions=[],
            displayName="Owner User",
            email="owner@example.com",
        )
        await seed_member(
            prisma,
            org_id,
            AGENT_USER_ID,
            isOwner=False,
            roleId=role_ids["agent"],
            extraPermissions=[Permission.EXPORT_REPORTS.value],
            displayName="Agent User",
            email="agent@example.com",
        )

        if await prisma.ticket.count(where={"orgId": org_id}) == 0:
            tickets = [
                ("Cannot log in", "open", "high"),
                ("Invoice is missing", "in-progress", "medium"),
                ("Feature request: dark mode", "open", "low"),
                ("Site is down", "resolved", "urgent"),
            ]
            for title, status, priority in tickets:
                await prisma.ticket.create(
                    data={
                        "orgId": org_id,
                        "title": title,
                        "description": f"{title} (seeded)",
                        "status": status,
                        "priority": priority,
                        "tags": [],
                    }
                )
            print(f"✅ Created {len(tickets)} tickets")

        if await prisma.hiringsource.count(where={"organisationId": org_id}) == 0:
            for source in ("LinkedIn", "Referral", "Job Board"):
                await prisma.hiringsource.create(
                    data={"organisationId": org_id, "source": source}
                )
            print("✅ Created hiring sources")

        # Generate tokens for local testing when running with a shared secret
        if settings.JWT_SECRET:
            for user_id in (OWNER_USER_ID, AGENT_USER_ID):
                token = jwt.encode(
                    {"sub": user_id, "iat": datetime.now(timezone.utc)},
                    settings.JWT_SECRET,
                    algorithm="HS256",
                )
                print(f"   {user_id}: Authorization: Bearer {token}")
        else:
            print("ℹ️ Skipping token generation - JWT_SECRET not configured")

        print(f"   Organisation ID: {org_id}")
        print("🌱 Seed completed successfully!")

    except Exception as e:
        print(f"❌ Seed failed: {e}")
        raise
    finally:
        await prisma.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
