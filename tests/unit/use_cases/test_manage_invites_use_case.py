from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from garage_iam.app.services.notification_service import NotificationDeliveryError
from garage_iam.app.use_cases.invites import (
    GetInviteUseCase,
    ListInvitesUseCase,
    ResendInviteUseCase,
    RevokeInviteUseCase,
)
from garage_iam.domain import token_codec
from garage_iam.domain.entities import (
    InviteStatus,
    Membership,
    MembershipRole,
    Tenant,
    User,
)


@pytest.fixture
def notifier():
    notifier = MagicMock()
    notifier.send_invite_email = AsyncMock()
    notifier.send_otp_email = AsyncMock()
    return notifier


@pytest.fixture
def owner(mock_uow):
    tenant = Tenant(id=uuid4(), name="Joe's Garage")
    user = User(id=uuid4(), name="Joe", email="joe@garage.com", password_hash="x")
    mock_uow.memberships.get_by_user_and_tenant.return_value = Membership(
        user_id=user.id, tenant_id=tenant.id, role=MembershipRole.owner
    )
    mock_uow.tenants.get_by_id.return_value = tenant
    mock_uow.users.get_by_id.return_value = user
    return user, tenant


# ============================================================================
# Resend Invite Tests
# ============================================================================


@pytest.mark.asyncio
async def test_resend_rotates_token_and_resets_state(
    mock_uow, notifier, clock, now, owner, make_invite
):
    user, tenant = owner
    invite = make_invite(
        tenant_id=tenant.id,
        otp_attempts=5,
        otp_send_count=5,
        locked_until=now + timedelta(minutes=40),
        expires_at=now - timedelta(days=1),
    )
    old_hash = invite.token_hash
    mock_uow.invites.get_by_id.return_value = invite

    result = await ResendInviteUseCase(mock_uow, notifier, clock).execute(
        user.id, tenant.id, invite.id
    )

    assert result.is_ok()
    assert result.value.status == "resent"
    assert result.value.email_sent is True
    new_token = result.value.invite_link.rsplit("/", 1)[-1]
    assert invite.token_hash == token_codec.hash_secret(new_token)
    assert invite.token_hash != old_hash
    assert invite.otp_attempts == 0
    assert invite.otp_send_count == 0
    assert invite.locked_until is None
    assert invite.expires_at == now + timedelta(days=7)
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_resend_email_failure_is_not_fatal(
    mock_uow, notifier, clock, owner, make_invite
):
    user, tenant = owner
    invite = make_invite(tenant_id=tenant.id)
    mock_uow.invites.get_by_id.return_value = invite
    notifier.send_invite_email.side_effect = NotificationDeliveryError("down")

    result = await ResendInviteUseCase(mock_uow, notifier, clock).execute(
        user.id, tenant.id, invite.id
    )

    assert result.is_ok()
    assert result.value.email_sent is False


@pytest.mark.asyncio
async def test_resend_accepted_invite_rejected(
    mock_uow, notifier, clock, now, owner, make_invite
):
    user, tenant = owner
    invite = make_invite(tenant_id=tenant.id, status=InviteStatus.accepted, used_at=now)
    mock_uow.invites.get_by_id.return_value = invite

    result = await ResendInviteUseCase(mock_uow, notifier, clock).execute(
        user.id, tenant.id, invite.id
    )

    assert result.error.code == "INVITATION_ALREADY_ACCEPTED"


@pytest.mark.asyncio
async def test_resend_other_tenants_invite_not_found(
    mock_uow, notifier, clock, owner, make_invite
):
    user, tenant = owner
    mock_uow.invites.get_by_id.return_value = make_invite()

    result = await ResendInviteUseCase(mock_uow, notifier, clock).execute(
        user.id, tenant.id, uuid4()
    )

    assert result.error.code == "INVITE_NOT_FOUND"


# ============================================================================
# Revoke Invite Tests
# ============================================================================


@pytest.mark.asyncio
async def test_revoke_deletes_invite(mock_uow, owner, make_invite):
    user, tenant = owner
    invite = make_invite(tenant_id=tenant.id)
    mock_uow.invites.get_by_id.return_value = invite

    result = await RevokeInviteUseCase(mock_uow).execute(user.id, tenant.id, invite.id)

    assert result.is_ok()
    assert result.value.status == "revoked"
    mock_uow.invites.delete.assert_called_once_with(invite)
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_revoke_requires_manager(mock_uow, owner, make_invite):
    user, tenant = owner
    mock_uow.memberships.get_by_user_and_tenant.return_value = Membership(
        user_id=user.id, tenant_id=tenant.id, role=MembershipRole.storekeeper
    )

    result = await RevokeInviteUseCase(mock_uow).execute(user.id, tenant.id, uuid4())

    assert result.error.code == "INSUFFICIENT_ROLE"
    mock_uow.invites.delete.assert_not_called()


# ============================================================================
# List Invites Tests
# ============================================================================


@pytest.mark.asyncio
async def test_list_reports_effective_status_and_counters(
    mock_uow, clock, now, owner, make_invite
):
    user, tenant = owner
    pending = make_invite(tenant_id=tenant.id, otp_send_count=2, otp_attempts=1)
    expired = make_invite(tenant_id=tenant.id, expires_at=now - timedelta(hours=1))
    locked = make_invite(tenant_id=tenant.id, locked_until=now + timedelta(minutes=5))
    mock_uow.invites.list_by_tenant.return_value = [pending, expired, locked]

    result = await ListInvitesUseCase(mock_uow, clock).execute(user.id, tenant.id)

    rows = {row.id: row for row in result.value.invites}
    assert rows[str(pending.id)].status == "PENDING"
    assert rows[str(pending.id)].otp_send_count == 2
    assert rows[str(pending.id)].otp_attempts == 1
    assert rows[str(expired.id)].status == "EXPIRED"
    assert rows[str(expired.id)].is_expired is True
    assert rows[str(locked.id)].is_locked is True

    dumped = result.value.model_dump_json()
    assert pending.token_hash not in dumped


@pytest.mark.asyncio
async def test_list_status_filter(mock_uow, clock, now, owner, make_invite):
    user, tenant = owner
    pending = make_invite(tenant_id=tenant.id)
    expired = make_invite(tenant_id=tenant.id, expires_at=now)
    mock_uow.invites.list_by_tenant.return_value = [pending, expired]

    result = await ListInvitesUseCase(mock_uow, clock).execute(
        user.id, tenant.id, "expired"
    )

    assert [row.id for row in result.value.invites] == [str(expired.id)]


@pytest.mark.asyncio
async def test_list_invalid_status(mock_uow, clock, owner):
    user, tenant = owner

    result = await ListInvitesUseCase(mock_uow, clock).execute(
        user.id, tenant.id, "LOCKED"
    )

    assert result.error.code == "INVALID_STATUS"


# ============================================================================
# Get Invite Tests
# ============================================================================


@pytest.mark.asyncio
async def test_get_invite_detail(mock_uow, clock, now, owner, make_invite):
    user, tenant = owner
    invite = make_invite(
        tenant_id=tenant.id,
        created_by_user_id=user.id,
        otp_attempts=5,
        otp_send_count=2,
        otp_last_sent_at=now - timedelta(minutes=3),
        locked_until=now + timedelta(minutes=30),
    )
    mock_uow.invites.get_by_id.return_value = invite

    result = await GetInviteUseCase(mock_uow, clock).execute(user.id, tenant.id, invite.id)

    detail = result.value
    assert detail.id == str(invite.id)
    assert detail.status == "PENDING"
    assert detail.is_locked is True
    assert detail.locked_until == (now + timedelta(minutes=30)).isoformat()
    assert detail.otp_last_sent_at == (now - timedelta(minutes=3)).isoformat()
    assert detail.used_at is None
    assert detail.created_by.name == "Joe"
    assert detail.created_by.email == "joe@garage.com"
    assert invite.token_hash not in detail.model_dump_json()


@pytest.mark.asyncio
async def test_get_other_tenants_invite_not_found(mock_uow, clock, owner, make_invite):
    user, tenant = owner
    mock_uow.invites.get_by_id.return_value = make_invite(tenant_id=uuid4())

    result = await GetInviteUseCase(mock_uow, clock).execute(user.id, tenant.id, uuid4())

    assert result.error.code == "INVITE_NOT_FOUND"
