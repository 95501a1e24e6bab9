from datetime import timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient

from garage_iam.api.utils.jwt import create_access_token
from garage_iam.domain.entities import Membership, MembershipRole, User


async def _invite(client, tenant, headers, email="bob@garage.com", role="MECHANIC"):
    response = await client.post(
        f"/tenants/{tenant.id}/invites",
        json={"email": email, "role": role},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_invite_normalizes_email(client: AsyncClient, garage):
    tenant, _, headers = garage

    data = await _invite(client, tenant, headers, email="  Bob@Garage.COM")

    assert data["email"] == "bob@garage.com"
    assert data["status"] == "PENDING"
    assert "/invite/" in data["invite_link"]


@pytest.mark.asyncio
async def test_duplicate_pending_invite_rejected(client: AsyncClient, garage):
    tenant, _, headers = garage
    await _invite(client, tenant, headers)

    response = await client.post(
        f"/tenants/{tenant.id}/invites",
        json={"email": "bob@garage.com", "role": "VIEWER"},
        headers=headers,
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVITE_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_invalid_role_rejected(client: AsyncClient, garage):
    tenant, _, headers = garage

    response = await client.post(
        f"/tenants/{tenant.id}/invites",
        json={"email": "bob@garage.com", "role": "ADMIN"},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_ROLE"


@pytest.mark.asyncio
async def test_invite_email_failure_still_creates(client: AsyncClient, garage, notifier):
    tenant, _, headers = garage
    notifier.fail = True

    data = await _invite(client, tenant, headers)

    assert data["email_sent"] is False


@pytest.mark.asyncio
async def test_mechanic_cannot_manage_invites(client: AsyncClient, db_session, garage):
    tenant, _, _ = garage
    mechanic = User(name="Mo", email="mo@garage.com", password_hash="x" * 60)
    db_session.add(mechanic)
    await db_session.flush()
    db_session.add(
        Membership(tenant_id=tenant.id, user_id=mechanic.id, role=MembershipRole.mechanic)
    )
    await db_session.commit()
    token = create_access_token(
        user_id=str(mechanic.id),
        tenant_id=str(tenant.id),
        role="MECHANIC",
        expires_delta=timedelta(minutes=15),
    )

    response = await client.get(
        f"/tenants/{tenant.id}/invites", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "INSUFFICIENT_ROLE"


@pytest.mark.asyncio
async def test_missing_jwt_rejected(client: AsyncClient, garage):
    tenant, _, _ = garage

    response = await client.get(f"/tenants/{tenant.id}/invites")

    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_list_and_filter(client: AsyncClient, garage):
    tenant, _, headers = garage
    await _invite(client, tenant, headers, email="a@garage.com")
    await _invite(client, tenant, headers, email="b@garage.com")

    response = await client.get(f"/tenants/{tenant.id}/invites", headers=headers)
    assert response.status_code == 200
    invites = response.json()["invites"]
    assert {i["email"] for i in invites} == {"a@garage.com", "b@garage.com"}
    assert all("token_hash" not in i for i in invites)

    response = await client.get(
        f"/tenants/{tenant.id}/invites", params={"status": "ACCEPTED"}, headers=headers
    )
    assert response.json()["invites"] == []


@pytest.mark.asyncio
async def test_resend_invalidates_old_link(client: AsyncClient, garage, notifier):
    tenant, _, headers = garage
    created = await _invite(client, tenant, headers)
    old_token = created["invite_link"].rsplit("/", 1)[-1]

    response = await client.post(
        f"/tenants/{tenant.id}/invites/{created['invite_id']}/resend", headers=headers
    )

    assert response.status_code == 200
    new_token = response.json()["invite_link"].rsplit("/", 1)[-1]
    assert new_token != old_token
    assert notifier.invite_emails[-1].raw_token == new_token

    assert (await client.get(f"/invites/{old_token}/preview")).status_code == 404
    assert (await client.get(f"/invites/{new_token}/preview")).status_code == 200


@pytest.mark.asyncio
async def test_revoke_removes_invite(client: AsyncClient, garage):
    tenant, _, headers = garage
    created = await _invite(client, tenant, headers)
    token = created["invite_link"].rsplit("/", 1)[-1]

    response = await client.delete(
        f"/tenants/{tenant.id}/invites/{created['invite_id']}", headers=headers
    )

    assert response.status_code == 200
    assert response.json()["status"] == "revoked"
    assert (await client.get(f"/invites/{token}/preview")).status_code == 404

    response = await client.delete(
        f"/tenants/{tenant.id}/invites/{created['invite_id']}", headers=headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_invalid_invite_id(client: AsyncClient, garage):
    tenant, _, headers = garage

    response = await client.delete(
        f"/tenants/{tenant.id}/invites/not-a-uuid", headers=headers
    )
    assert response.status_code == 400

    response = await client.delete(
        f"/tenants/{tenant.id}/invites/{uuid4()}", headers=headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_invite_detail(client: AsyncClient, garage):
    tenant, owner, headers = garage
    created = await _invite(client, tenant, headers)

    response = await client.get(
        f"/tenants/{tenant.id}/invites/{created['invite_id']}", headers=headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == created["invite_id"]
    assert data["email"] == "bob@garage.com"
    assert data["status"] == "PENDING"
    assert data["used_at"] is None
    assert data["created_by"] == {"name": owner.name, "email": owner.email}
    assert "token_hash" not in data

    response = await client.get(
        f"/tenants/{tenant.id}/invites/{uuid4()}", headers=headers
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "INVITE_NOT_FOUND"
