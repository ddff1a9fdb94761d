"""
Tests for organisation routes in portal/domains/organizations/routes.py
"""

import pytest

from portal.shared.permissions import ALL_PERMISSIONS, PERMISSION_CATEGORIES
from tests.fixtures.organization_fixtures import (
    ADMIN_USER_ID,
    AGENT_USER_ID,
    OUTSIDER_USER_ID,
    OWNER_USER_ID,
    VIEWER_USER_ID,
)

BASE_URL = "/api/v1/organisations"


def _grant(store, member, *permissions):
    document = store.member._document(member.id)
    document["extraPermissions"] = [*document["extraPermissions"], *permissions]


class TestCreateOrganizationRoute:
    def test_creator_becomes_owner(self, client, store, auth_headers):
        response = client.post(
            f"{BASE_URL}/", json={"name": "Initech"}, headers=auth_headers
        )

        assert response.status_code == 201
        body = response.json()
        assert body["organization"]["name"] == "Initech"

        owner = store.member.documents[-1]
        assert owner["id"] == body["memberId"]
        assert owner["userId"] == "test-user-id-123"
        assert owner["email"] == "test@example.com"
        assert owner["displayName"] == "Test User"

    def test_new_owner_can_read_permissions(self, client, auth_headers):
        created = client.post(
            f"{BASE_URL}/", json={"name": "Initech"}, headers=auth_headers
        ).json()
        org_id = created["organization"]["id"]

        response = client.get(
            f"{BASE_URL}/{org_id}/my-permissions", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["isOwner"] is True
        assert response.json()["permissions"] == ALL_PERMISSIONS

    def test_blank_name_returns_422(self, client, auth_headers):
        response = client.post(
            f"{BASE_URL}/", json={"name": "  "}, headers=auth_headers
        )

        assert response.status_code == 422


class TestListOrganizationsRoute:
    def test_lists_caller_memberships(
        self, client, seeded_org, other_org, auth_headers_for
    ):
        response = client.get(
            f"{BASE_URL}/",
            params={"sortBy": "name", "sortOrder": "asc"},
            headers=auth_headers_for(VIEWER_USER_ID),
        )

        assert response.status_code == 200
        assert [o["name"] for o in response.json()["data"]] == [
            "Acme Corp",
            "Globex Inc",
        ]

    def test_outsider_sees_nothing(self, client, seeded_org, auth_headers_for):
        response = client.get(
            f"{BASE_URL}/", headers=auth_headers_for(OUTSIDER_USER_ID)
        )

        assert response.json()["data"] == []
        assert response.json()["pagination"]["total"] == 0


class TestPermissionCatalogRoute:
    def test_returns_grouped_permissions(self, client, auth_headers):
        response = client.get(f"{BASE_URL}/permission-catalog", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body == PERMISSION_CATEGORIES
        assert body["ticket"]["label"] == "Tickets"

    def test_requires_token(self, client):
        response = client.get(f"{BASE_URL}/permission-catalog")

        assert response.status_code == 401


class TestMyPermissionsRoute:
    def test_agent_permissions(self, client, seeded_org, auth_headers_for):
        response = client.get(
            f"{BASE_URL}/{seeded_org.id}/my-permissions",
            headers=auth_headers_for(AGENT_USER_ID),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["memberId"] == seeded_org.members["agent"].id
        assert body["role"]["slug"] == "agent"
        assert "report:export" in body["permissions"]
        assert body["extraPermissions"] == ["report:export"]

    def test_outsider_is_forbidden(self, client, seeded_org, auth_headers_for):
        response = client.get(
            f"{BASE_URL}/{seeded_org.id}/my-permissions",
            headers=auth_headers_for(OUTSIDER_USER_ID),
        )

        assert response.status_code == 403


class TestMembersRoute:
    @pytest.mark.parametrize(
        "user_id,expected_status",
        [
            (OWNER_USER_ID, 200),
            (ADMIN_USER_ID, 200),
            (AGENT_USER_ID, 200),
            (VIEWER_USER_ID, 200),
            (OUTSIDER_USER_ID, 403),
        ],
    )
    def test_member_view_access(
        self, client, seeded_org, auth_headers_for, user_id, expected_status
    ):
        response = client.get(
            f"{BASE_URL}/{seeded_org.id}/members", headers=auth_headers_for(user_id)
        )

        assert response.status_code == expected_status

    def test_filter_by_role(self, client, seeded_org, auth_headers_for):
        response = client.get(
            f"{BASE_URL}/{seeded_org.id}/members",
            params={"roleId": seeded_org.roles["viewer"].id},
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert [m["userId"] for m in response.json()["data"]] == [VIEWER_USER_ID]


class TestUpdateMemberPermissionsRoute:
    def _url(self, org, member_key):
        return f"{BASE_URL}/{org.id}/members/{org.members[member_key].id}/permissions"

    def test_admin_can_assign_role(self, client, seeded_org, auth_headers_for):
        response = client.patch(
            self._url(seeded_org, "viewer"),
            json={"roleId": seeded_org.roles["agent"].id},
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 200
        assert response.json()["roleId"] == seeded_org.roles["agent"].id

    def test_new_permissions_apply_on_next_request(
        self, client, seeded_org, auth_headers_for
    ):
        tickets_url = f"/api/v1/tickets/{seeded_org.id}"
        viewer_headers = auth_headers_for(VIEWER_USER_ID)
        ticket = {"title": "Printer", "description": "Jammed"}

        before = client.post(tickets_url, json=ticket, headers=viewer_headers)
        client.patch(
            self._url(seeded_org, "viewer"),
            json={"extraPermissions": ["ticket:create"]},
            headers=auth_headers_for(ADMIN_USER_ID),
        )
        after = client.post(tickets_url, json=ticket, headers=viewer_headers)

        assert before.status_code == 403
        assert after.status_code == 201

    def test_agent_cannot_change_permissions(
        self, client, seeded_org, auth_headers_for
    ):
        response = client.patch(
            self._url(seeded_org, "viewer"),
            json={"extraPermissions": ["ticket:delete"]},
            headers=auth_headers_for(AGENT_USER_ID),
        )

        assert response.status_code == 403
        assert response.json()["error"] == (
            "Insufficient permissions: role:assign or member:edit required"
        )

    def test_member_editor_can_change_extra_permissions_only(
        self, client, store, seeded_org, auth_headers_for
    ):
        _grant(store, seeded_org.members["viewer"], "member:edit")
        headers = auth_headers_for(VIEWER_USER_ID)

        extra = client.patch(
            self._url(seeded_org, "agent"),
            json={"extraPermissions": ["ticket:delete"]},
            headers=headers,
        )
        role = client.patch(
            self._url(seeded_org, "agent"),
            json={"roleId": seeded_org.roles["admin"].id},
            headers=headers,
        )

        assert extra.status_code == 200
        assert extra.json()["extraPermissions"] == ["ticket:delete"]
        assert role.status_code == 403
        assert role.json()["error"] == (
            "Insufficient permissions: role:assign required"
        )

    def test_role_assigner_cannot_change_extra_permissions(
        self, client, store, seeded_org, auth_headers_for
    ):
        _grant(store, seeded_org.members["viewer"], "role:assign")

        response = client.patch(
            self._url(seeded_org, "agent"),
            json={
                "roleId": seeded_org.roles["viewer"].id,
                "extraPermissions": [],
            },
            headers=auth_headers_for(VIEWER_USER_ID),
        )

        assert response.status_code == 403
        assert response.json()["error"] == (
            "Insufficient permissions: member:edit required"
        )
        agent = store.member._document(seeded_org.members["agent"].id)
        assert agent["roleId"] == seeded_org.roles["agent"].id

    def test_owner_is_protected(self, client, seeded_org, auth_headers_for):
        response = client.patch(
            self._url(seeded_org, "owner"),
            json={"extraPermissions": []},
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 400


class TestRolesRoute:
    def test_lists_default_roles(self, client, seeded_org, auth_headers_for):
        response = client.get(
            f"{BASE_URL}/{seeded_org.id}/roles",
            params={"sortBy": "name", "sortOrder": "asc"},
            headers=auth_headers_for(VIEWER_USER_ID),
        )

        assert response.status_code == 200
        assert [r["slug"] for r in response.json()["data"]] == [
            "admin",
            "agent",
            "viewer",
        ]

    def test_get_role(self, client, seeded_org, auth_headers_for):
        role = seeded_org.roles["agent"]

        response = client.get(
            f"{BASE_URL}/{seeded_org.id}/roles/{role.id}",
            headers=auth_headers_for(VIEWER_USER_ID),
        )

        assert response.status_code == 200
        assert response.json()["slug"] == "agent"
        assert response.json()["isSystem"] is True

    @pytest.mark.parametrize("role_id", ["not-a-role", "f" * 24])
    def test_unknown_role_is_not_found(
        self, client, seeded_org, auth_headers_for, role_id
    ):
        response = client.get(
            f"{BASE_URL}/{seeded_org.id}/roles/{role_id}",
            headers=auth_headers_for(VIEWER_USER_ID),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Role not found"

    def test_admin_can_create_role(self, client, store, seeded_org, auth_headers_for):
        response = client.post(
            f"{BASE_URL}/{seeded_org.id}/roles",
            json={
                "name": "Tier 2 Support",
                "description": "Escalations",
                "permissions": ["ticket:view", "ticket:assign"],
            },
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["slug"] == "tier-2-support"
        assert body["orgId"] == seeded_org.id
        assert body["isSystem"] is False
        assert body["isDefault"] is False
        assert store.role.documents[-1]["permissions"] == [
            "ticket:view",
            "ticket:assign",
        ]

    def test_agent_cannot_create_role(self, client, seeded_org, auth_headers_for):
        response = client.post(
            f"{BASE_URL}/{seeded_org.id}/roles",
            json={"name": "Supervisor", "permissions": ["ticket:view"]},
            headers=auth_headers_for(AGENT_USER_ID),
        )

        assert response.status_code == 403
        assert response.json()["error"] == (
            "Insufficient permissions: role:create required"
        )

    def test_role_requires_permissions(self, client, seeded_org, auth_headers_for):
        response = client.post(
            f"{BASE_URL}/{seeded_org.id}/roles",
            json={"name": "Empty", "permissions": []},
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 422

    def test_duplicate_role_name_is_rejected(
        self, client, seeded_org, auth_headers_for
    ):
        response = client.post(
            f"{BASE_URL}/{seeded_org.id}/roles",
            json={"name": "AGENT", "permissions": ["ticket:view"]},
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "A role with this name already exists"

    def test_admin_can_update_role(self, client, seeded_org, auth_headers_for):
        role = seeded_org.roles["viewer"]

        response = client.patch(
            f"{BASE_URL}/{seeded_org.id}/roles/{role.id}",
            json={"name": "Read only", "permissions": ["ticket:view"]},
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Read only"
        assert response.json()["slug"] == "viewer"
        assert response.json()["permissions"] == ["ticket:view"]

    def test_null_role_name_is_rejected(self, client, seeded_org, auth_headers_for):
        response = client.patch(
            f"{BASE_URL}/{seeded_org.id}/roles/{seeded_org.roles['viewer'].id}",
            json={"name": None},
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 422

    def test_system_role_cannot_be_deleted(
        self, client, seeded_org, auth_headers_for
    ):
        response = client.delete(
            f"{BASE_URL}/{seeded_org.id}/roles/{seeded_org.roles['viewer'].id}",
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot delete system roles"

    def test_admin_can_delete_unused_custom_role(
        self, client, store, seeded_org, auth_headers_for
    ):
        role = store.role.insert(
            orgId=seeded_org.id, name="Temp", slug="temp", permissions=["ticket:view"]
        )
        role_url = f"{BASE_URL}/{seeded_org.id}/roles/{role.id}"

        response = client.delete(role_url, headers=auth_headers_for(ADMIN_USER_ID))

        assert response.status_code == 204
        follow_up = client.get(role_url, headers=auth_headers_for(ADMIN_USER_ID))
        assert follow_up.status_code == 404

    def test_agent_cannot_delete_role(
        self, client, store, seeded_org, auth_headers_for
    ):
        role = store.role.insert(orgId=seeded_org.id, name="Temp", slug="temp")

        response = client.delete(
            f"{BASE_URL}/{seeded_org.id}/roles/{role.id}",
            headers=auth_headers_for(AGENT_USER_ID),
        )

        assert response.status_code == 403


class TestMemberRoutes:
    def _url(self, org, member_key, *parts):
        return "/".join(
            [f"{BASE_URL}/{org.id}/members/{org.members[member_key].id}", *parts]
        )

    def test_get_member(self, client, seeded_org, auth_headers_for):
        response = client.get(
            self._url(seeded_org, "agent"), headers=auth_headers_for(VIEWER_USER_ID)
        )

        assert response.status_code == 200
        assert response.json()["userId"] == AGENT_USER_ID
        assert response.json()["extraPermissions"] == ["report:export"]

    def test_member_of_another_organisation_is_not_found(
        self, client, seeded_org, other_org, auth_headers_for
    ):
        response = client.get(
            f"{BASE_URL}/{seeded_org.id}/members/{other_org.members['agent'].id}",
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Member not found"

    def test_malformed_member_id_is_not_found(
        self, client, seeded_org, auth_headers_for
    ):
        response = client.get(
            f"{BASE_URL}/{seeded_org.id}/members/42",
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 404

    def test_admin_can_assign_role(self, client, seeded_org, auth_headers_for):
        response = client.put(
            self._url(seeded_org, "viewer", "role"),
            json={"roleId": seeded_org.roles["agent"].id},
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 200
        assert response.json()["roleId"] == seeded_org.roles["agent"].id

    def test_owner_role_cannot_be_changed(self, client, seeded_org, auth_headers_for):
        response = client.put(
            self._url(seeded_org, "owner", "role"),
            json={"roleId": seeded_org.roles["viewer"].id},
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot change the owner's role"

    def test_admin_cannot_change_own_role(self, client, seeded_org, auth_headers_for):
        response = client.put(
            self._url(seeded_org, "admin", "role"),
            json={"roleId": seeded_org.roles["viewer"].id},
            headers=auth_headers_for(ADMIN_USER_ID),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "You cannot change your own role"

    def test_agent_cannot_assign_role(self, client, seeded_org, auth_headers_for):
        response = client.put(
            self._url(seeded_org, "viewer", "role"),
            json={"roleId": seeded_org.roles["agent"].id},
            headers=auth_headers_for(AGENT_USER_ID),
        )

        assert response.status_code == 403
        assert response.json()["error"] == (
            "Insufficient permissions: role:assign required"
        )

    def test_admin_can_remove_member(self, client, store, seeded_org, auth_headers_for):
        response = client.delete(
            self._url(seeded_org, "viewer"), headers=auth_headers_for(ADMIN_USER_ID)
        )

        assert response.status_code == 204
        assert seeded_org.members["viewer"].id not in {
            m["id"] for m in store.member.documents
        }
        follow_up = client.get(
            f"/api/v1/tickets/{seeded_org.id}",
            headers=auth_headers_for(VIEWER_USER_ID),
        )
        assert follow_up.status_code == 403

    @pytest.mark.parametrize(
        "member_key,error",
        [
            ("owner", "Cannot remove the organisation owner"),
            ("admin", "You cannot remove yourself from the organisation"),
        ],
    )
    def test_protected_members_cannot_be_removed(
        self, client, seeded_org, auth_headers_for, member_key, error
    ):
        response = client.delete(
            self._url(seeded_org, member_key), headers=auth_headers_for(ADMIN_USER_ID)
        )

        assert response.status_code == 400
        assert response.json()["error"] == error

    def test_agent_cannot_remove_member(self, client, seeded_org, auth_headers_for):
        response = client.delete(
            self._url(seeded_org, "viewer"), headers=auth_headers_for(AGENT_USER_ID)
        )

        assert response.status_code == 403
        assert response.json()["error"] == (
            "Insufficient permissions: member:remove required"
        )
