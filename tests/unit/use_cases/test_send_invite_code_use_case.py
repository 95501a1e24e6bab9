from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from garage_iam.app.repositories.errors import ConcurrentUpdateError
from garage_iam.app.services.notification_service import NotificationDeliveryError
from garage_iam.app.use_cases.invites import SendInviteCodeUseCase
from garage_iam.domain import token_codec
from garage_iam.domain.entities import Tenant


@pytest.fixture
def notifier():
    notifier = MagicMock()
    notifier.send_invite_email = AsyncMock()
    notifier.send_otp_email = AsyncMock()
    return notifier


@pytest.fixture
def setup(mock_uow, make_invite):
    def _setup(**invite_fields):
        invite = make_invite(**invite_fields)
        mock_uow.invites.get_by_token_hash.return_value = invite
        mock_uow.tenants.get_by_id.return_value = Tenant(
            id=invite.tenant_id, name="Joe's Garage"
        )
        return invite

    return _setup


@pytest.mark.asyncio
async def test_send_code_commits_then_emails(
    mock_uow, notifier, clock, now, setup, raw_token
):
    invite = setup()

    result = await SendInviteCodeUseCase(mock_uow, notifier, clock).execute(raw_token)

    assert result.is_ok()
    assert result.value.remaining_sends == 4
    assert result.value.expires_at == (now + timedelta(minutes=10)).isoformat()
    mock_uow.invites.update.assert_called_once_with(invite)
    mock_uow.commit.assert_called_once()

    email = notifier.send_otp_email.call_args.args[0]
    assert email.to == "bob@garage.com"
    assert invite.otp_hash == token_codec.hash_secret(email.code)


@pytest.mark.asyncio
async def test_delivery_failure_fails_operation_after_commit(
    mock_uow, notifier, clock, setup, raw_token
):
    setup()
    notifier.send_otp_email.side_effect = NotificationDeliveryError("down", 503)

    with pytest.raises(NotificationDeliveryError):
        await SendInviteCodeUseCase(mock_uow, notifier, clock).execute(raw_token)

    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_rate_limited(mock_uow, notifier, clock, now, setup, raw_token):
    setup(otp_send_count=5, otp_last_sent_at=now - timedelta(minutes=10))

    result = await SendInviteCodeUseCase(mock_uow, notifier, clock).execute(raw_token)

    assert result.error.code == "OTP_SEND_LIMIT_EXCEEDED"
    assert result.error.details["retry_after_seconds"] == 3000
    mock_uow.commit.assert_not_called()
    notifier.send_otp_email.assert_not_called()


@pytest.mark.asyncio
async def test_locked(mock_uow, notifier, clock, now, setup, raw_token):
    setup(locked_until=now + timedelta(minutes=30))

    result = await SendInviteCodeUseCase(mock_uow, notifier, clock).execute(raw_token)

    assert result.error.code == "INVITE_LOCKED"
    assert result.error.details["retry_after_seconds"] == 1800
    notifier.send_otp_email.assert_not_called()


@pytest.mark.asyncio
async def test_elapsed_lock_is_released_and_code_sent(
    mock_uow, notifier, clock, now, setup, raw_token
):
    invite = setup(locked_until=now - timedelta(minutes=1), otp_attempts=5)

    result = await SendInviteCodeUseCase(mock_uow, notifier, clock).execute(raw_token)

    assert result.is_ok()
    assert invite.locked_until is None
    assert invite.otp_attempts == 0


@pytest.mark.asyncio
async def test_concurrent_update(mock_uow, notifier, clock, setup, raw_token):
    setup()
    mock_uow.invites.update.side_effect = ConcurrentUpdateError("stale")

    result = await SendInviteCodeUseCase(mock_uow, notifier, clock).execute(raw_token)

    assert result.error.code == "CONCURRENT_UPDATE"
    mock_uow.commit.assert_not_called()
    notifier.send_otp_email.assert_not_called()
