import json
import pytest
from fintrack.models.role import TenantRole, MembershipStatus
from fintrack.models.tenant import TenantStatus
from fintrack.repositories.audit_log_repository import AuditLogRepository
from fintrack.repositories.tenant_membership_repository import TenantMembershipRepository
from fintrack.repositories.tenant_repository import TenantRepository
from fintrack.services.tenant_provisioner import TenantProvisioner
from tests.conftest import headers_for


@pytest.fixture
def user_a(db_session):
    from fintrack.models.user import User

    user = User(auth_user_id="user-a", tenant_ids=[])
    db_session.add(user)
    db_session.commit()
    return user


def add_membership(db_session, tenant, user, role, status=MembershipStatus.ACTIVE):
    from fintrack.models.tenant_membership import TenantMembership

    membership = TenantMembership(tenant_id=tenant.id, user_id=user.id, role=role, status=status)
    db_session.add(membership)
    db_session.commit()
    return membership


class TestListUserTenants:
    """Tests for GET /api/tenants (list all user's tenants)"""

    def test_list_user_tenants_single_tenant(self, client, auth_headers, shared_tenant):
        """User can list all tenants they belong to (single tenant case)"""
        response = client.get("/api/tenants", headers=auth_headers)

        assert response.status_code == 200
        tenants = response.json()
        assert len(tenants) == 1
        assert tenants[0]["id"] == shared_tenant.id
        assert tenants[0]["name"] == "Owner's Space"
        assert tenants[0]["role"] == TenantRole.OWNER
        assert tenants[0]["status"] == "active"
        assert "created_at" in tenants[0]
        assert "updated_at" in tenants[0]

    def test_list_user_tenants_multiple_tenants(self, client, db_session, auth_headers, test_user, shared_tenant):
        """User can see every tenant they own or were invited to"""
        from fintrack.models.user import User

        other_owner = User(auth_user_id="other-owner", tenant_ids=[])
        db_session.add(other_owner)
        db_session.commit()
        other_tenant_id = TenantProvisioner(db_session).provision(
            other_owner, "other@example.com", "Other", "empresa"
        )
        add_membership(
            db_session,
            TenantRepository(db_session).get_by_id(other_tenant_id),
            test_user,
            TenantRole.MEMBER,
        )

        response = client.get("/api/tenants", headers=auth_headers)

        assert response.status_code == 200
        roles = {t["id"]: t["role"] for t in response.json()}
        assert roles == {shared_tenant.id: TenantRole.OWNER, other_tenant_id: TenantRole.MEMBER}

    def test_list_user_tenants_empty_list(self, client, db_session):
        """User with no tenant memberships gets empty list"""
        response = client.get("/api/tenants", headers=headers_for("user-no-tenants"))

        assert response.status_code == 200
        assert response.json() == []

    def test_list_user_tenants_requires_auth(self, client):
        """Endpoint requires authentication"""
        response = client.get("/api/tenants")
        assert response.status_code == 401


class TestGetCurrentTenant:
    """Tests for GET /api/tenants/me"""

    def test_get_current_tenant_success(self, client, auth_headers, shared_tenant):
        """Without a tenant claim the user's first tenant is used"""
        response = client.get("/api/tenants/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == shared_tenant.id
        assert data["base_currency"] == "ARS"
        assert data["type"] == "family"

    def test_tenant_selected_by_header(self, client, db_session, test_user, shared_tenant):
        second_id = TenantProvisioner(db_session).provision(
            test_user, "owner@example.com", "Second", "personal"
        )
        headers = {**headers_for("test-user-123"), "X-Tenant-ID": str(second_id)}

        response = client.get("/api/tenants/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["id"] == second_id

    def test_non_member_tenant_forbidden(self, client, db_session, shared_tenant):
        response = client.get(
            "/api/tenants/me", headers=headers_for("stranger", tenant_id=shared_tenant.id)
        )
        assert response.status_code == 403

    def test_no_tenant_returns_404(self, client):
        response = client.get("/api/tenants/me", headers=headers_for("user-no-tenants"))
        assert response.status_code == 404

    def test_partially_provisioned_tenant_forbidden(self, client, db_session, owner_headers, shared_tenant):
        shared_tenant.status = TenantStatus.PARTIALLY_PROVISIONED
        db_session.commit()

        response = client.get("/api/tenants/me", headers=owner_headers)
        assert response.status_code == 403

    def test_get_current_tenant_requires_auth(self, client):
        """Endpoint requires authentication"""
        response = client.get("/api/tenants/me")
        assert response.status_code == 401


class TestUpdateTenant:
    """Tests for PATCH /api/tenants/me"""

    def test_update_tenant_name_as_owner(self, client, db_session, owner_headers, shared_tenant):
        """Owner can update tenant name"""
        response = client.patch(
            "/api/tenants/me",
            headers=owner_headers,
            json={"name": "Updated Tenant Name"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Updated Tenant Name"
        assert data["id"] == shared_tenant.id

        events = AuditLogRepository(db_session).get_for_entity(shared_tenant.id, "tenants", str(shared_tenant.id))
        assert [e.action for e in events] == ["update"]
        assert json.loads(events[0].before)["name"] == "Owner's Space"

    def test_update_tenant_name_as_member_forbidden(self, client, member_headers, shared_tenant):
        """Member cannot update tenant name"""
        response = client.patch(
            "/api/tenants/me",
            headers=member_headers,
            json={"name": "Hacked Name"},
        )

        assert response.status_code == 403
        assert "owner" in response.json()["detail"].lower()

    def test_update_tenant_name_as_admin_forbidden(self, client, admin_headers, shared_tenant):
        response = client.patch(
            "/api/tenants/me",
            headers=admin_headers,
            json={"name": "Hacked Name"},
        )

        assert response.status_code == 403


class TestListMembers:
    """Tests for GET /api/tenants/me/members"""

    def test_list_members_as_owner(self, client, owner_headers, shared_tenant):
        """Owner can list all members"""
        response = client.get("/api/tenants/me/members", headers=owner_headers)

        assert response.status_code == 200
        members = response.json()
        assert len(members) == 1
        assert members[0]["auth_user_id"] == "test-user-123"
        assert members[0]["role"] == TenantRole.OWNER
        assert members[0]["email"] == "owner@example.com"

    def test_list_members_as_member(self, client, member_headers, shared_tenant):
        """Member can list all members"""
        response = client.get("/api/tenants/me/members", headers=member_headers)

        assert response.status_code == 200
        assert len(response.json()) == 2


class TestInviteMember:
    """Tests for POST /api/tenants/me/members"""

    def test_invite_member_as_owner(self, client, db_session, owner_headers, shared_tenant):
        """Owner can invite new members"""
        response = client.post(
            "/api/tenants/me/members",
            headers=owner_headers,
            json={"auth_user_id": "new-user-456", "email": "new@example.com", "role": "member"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["auth_user_id"] == "new-user-456"
        assert data["role"] == TenantRole.MEMBER
        assert data["status"] == MembershipStatus.INVITED
        assert data["email"] == "new@example.com"

        events = AuditLogRepository(db_session).get_for_entity(shared_tenant.id, "memberships", str(data["id"]))
        assert [e.action for e in events] == ["invite"]

    def test_invited_member_activated_on_first_access(self, client, db_session, owner_headers, shared_tenant):
        response = client.post(
            "/api/tenants/me/members",
            headers=owner_headers,
            json={"auth_user_id": "new-user-456"},
        )
        user_id = response.json()["user_id"]

        response = client.get("/api/tenants/me", headers=headers_for("new-user-456", shared_tenant.id))

        assert response.status_code == 200
        membership = TenantMembershipRepository(db_session).get_membership(user_id, shared_tenant.id)
        assert membership.status == MembershipStatus.ACTIVE

    def test_invite_member_as_admin(self, client, admin_headers, shared_tenant):
        """Admin can invite new members"""
        response = client.post(
            "/api/tenants/me/members",
            headers=admin_headers,
            json={"auth_user_id": "new-user-789", "role": "admin"},
        )

        assert response.status_code == 201
        assert response.json()["role"] == TenantRole.ADMIN

    def test_invite_member_as_member_forbidden(self, client, member_headers, shared_tenant):
        """Member cannot invite new members"""
        response = client.post(
            "/api/tenants/me/members",
            headers=member_headers,
            json={"auth_user_id": "new-user-999"},
        )

        assert response.status_code == 403
        assert "admin" in response.json()["detail"].lower()

    def test_invite_duplicate_member_fails(self, client, owner_headers, shared_tenant):
        """Cannot invite a user who is already a member"""
        client.post(
            "/api/tenants/me/members",
            headers=owner_headers,
            json={"auth_user_id": "duplicate-user"},
        )

        response = client.post(
            "/api/tenants/me/members",
            headers=owner_headers,
            json={"auth_user_id": "duplicate-user"},
        )

        assert response.status_code == 400
        assert "already a member" in response.json()["detail"].lower()

    def test_owner_role_cannot_be_granted(self, client, owner_headers, shared_tenant):
        response = client.post(
            "/api/tenants/me/members",
            headers=owner_headers,
            json={"auth_user_id": "new-owner", "role": "owner"},
        )

        assert response.status_code == 403
        assert "owner" in response.json()["detail"].lower()

    def test_seat_limit_enforced(self, client, owner_headers, shared_tenant):
        """'familiar' allows 4 users; the owner holds one seat"""
        for index in range(3):
            response = client.post(
                "/api/tenants/me/members",
                headers=owner_headers,
                json={"auth_user_id": f"family-{index}"},
            )
            assert response.status_code == 201

        response = client.post(
            "/api/tenants/me/members",
            headers=owner_headers,
            json={"auth_user_id": "family-extra"},
        )

        assert response.status_code == 400
        assert "at most 4" in response.json()["detail"]

    def test_revoked_member_frees_seat(self, client, db_session, owner_headers, shared_tenant):
        user_ids = []
        for index in range(3):
            response = client.post(
                "/api/tenants/me/members",
                headers=owner_headers,
                json={"auth_user_id": f"family-{index}"},
            )
            user_ids.append(response.json()["user_id"])

        client.delete(f"/api/tenants/me/members/{user_ids[0]}", headers=owner_headers)

        response = client.post(
            "/api/tenants/me/members",
            headers=owner_headers,
            json={"auth_user_id": "family-extra"},
        )
        assert response.status_code == 201


class TestUpdateMemberRole:
    """Tests for PATCH /api/tenants/me/members/{user_id}/role"""

    def test_owner_can_change_member_role(self, client, owner_headers, db_session, shared_tenant, user_a):
        """Owner can change member's role"""
        add_membership(db_session, shared_tenant, user_a, TenantRole.MEMBER)

        response = client.patch(
            f"/api/tenants/me/members/{user_a.id}/role",
            headers=owner_headers,
            json={"role": "admin"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == TenantRole.ADMIN
        assert data["user_id"] == user_a.id

    def test_cannot_promote_to_owner(self, client, owner_headers, db_session, shared_tenant, user_a):
        add_membership(db_session, shared_tenant, user_a, TenantRole.ADMIN)

        response = client.patch(
            f"/api/tenants/me/members/{user_a.id}/role",
            headers=owner_headers,
            json={"role": "owner"},
        )

        assert response.status_code == 403

    def test_admin_cannot_change_role(self, client, admin_headers, db_session, shared_tenant, user_a):
        add_membership(db_session, shared_tenant, user_a, TenantRole.MEMBER)

        response = client.patch(
            f"/api/tenants/me/members/{user_a.id}/role",
            headers=admin_headers,
            json={"role": "admin"},
        )

        assert response.status_code == 403

    def test_owner_cannot_change_own_role(self, client, owner_headers, shared_tenant, test_user):
        """Owner cannot change their own role"""
        response = client.patch(
            f"/api/tenants/me/members/{test_user.id}/role",
            headers=owner_headers,
            json={"role": "member"},
        )

        assert response.status_code == 403
        assert "own role" in response.json()["detail"].lower()


class TestRemoveMember:
    """Tests for DELETE /api/tenants/me/members/{user_id}"""

    def test_owner_can_revoke_member(self, client, owner_headers, db_session, shared_tenant, user_a):
        """Revoked members stay listed with status revoked and lose access"""
        add_membership(db_session, shared_tenant, user_a, TenantRole.MEMBER)

        response = client.delete(f"/api/tenants/me/members/{user_a.id}", headers=owner_headers)

        assert response.status_code == 200
        data = response.json()
        assert "removed successfully" in data["message"].lower()
        assert data["removed_user_id"] == user_a.id

        members = client.get("/api/tenants/me/members", headers=owner_headers).json()
        revoked = [m for m in members if m["user_id"] == user_a.id]
        assert revoked[0]["status"] == MembershipStatus.REVOKED

        response = client.get("/api/tenants/me", headers=headers_for("user-a", shared_tenant.id))
        assert response.status_code == 403

        membership = TenantMembershipRepository(db_session).get_membership(user_a.id, shared_tenant.id)
        events = AuditLogRepository(db_session).get_for_entity(shared_tenant.id, "memberships", str(membership.id))
        assert [e.action for e in events] == ["revoke"]

    def test_admin_can_remove_member(self, client, admin_headers, db_session, shared_tenant, user_a):
        """Admin can remove members"""
        add_membership(db_session, shared_tenant, user_a, TenantRole.MEMBER)

        response = client.delete(f"/api/tenants/me/members/{user_a.id}", headers=admin_headers)

        assert response.status_code == 200

    def test_member_cannot_remove_member(self, client, member_headers, db_session, shared_tenant, user_a):
        """Member cannot remove other members"""
        add_membership(db_session, shared_tenant, user_a, TenantRole.MEMBER)

        response = client.delete(f"/api/tenants/me/members/{user_a.id}", headers=member_headers)

        assert response.status_code == 403

    def test_cannot_remove_owner(self, client, admin_headers, shared_tenant, test_user):
        """Cannot remove owner from tenant"""
        response = client.delete(f"/api/tenants/me/members/{test_user.id}", headers=admin_headers)

        assert response.status_code == 403
        assert "owner" in response.json()["detail"].lower()

    def test_cannot_remove_self(self, client, owner_headers, shared_tenant, test_user):
        """User cannot remove themselves"""
        response = client.delete(f"/api/tenants/me/members/{test_user.id}", headers=owner_headers)

        assert response.status_code == 403
        assert "yourself" in response.json()["detail"].lower()

    def test_remove_unknown_member(self, client, owner_headers, shared_tenant):
        response = client.delete("/api/tenants/me/members/99999", headers=owner_headers)
        assert response.status_code == 404
