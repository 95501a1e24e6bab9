from unittest.mock import AsyncMock, MagicMock

import pytest

from garage_iam.app.services.notification_dispatcher import NotificationDispatcher
from garage_iam.app.services.notification_service import NotificationDeliveryError
from garage_iam.domain.notifications import InviteEmail, OtpEmail


@pytest.fixture
def notifier():
    notifier = MagicMock()
    notifier.send_invite_email = AsyncMock()
    notifier.send_otp_email = AsyncMock()
    return notifier


def _invite_email():
    return InviteEmail(
        to="bob@garage.com",
        garage_name="Joe's Garage",
        role="MECHANIC",
        raw_token="t" * 64,
        inviter_name="Joe",
    )


def _otp_email():
    return OtpEmail(to="bob@garage.com", code="123456", garage_name="Joe's Garage")


@pytest.mark.asyncio
async def test_dispatch_routes_each_intent(notifier):
    dispatcher = NotificationDispatcher(notifier)

    delivered = await dispatcher.dispatch([_invite_email(), _otp_email()])

    assert delivered is True
    notifier.send_invite_email.assert_awaited_once()
    notifier.send_otp_email.assert_awaited_once()


@pytest.mark.asyncio
async def test_failed_optional_intent_is_reported_not_raised(notifier):
    notifier.send_invite_email.side_effect = NotificationDeliveryError("down", 503)
    dispatcher = NotificationDispatcher(notifier)

    delivered = await dispatcher.dispatch([_invite_email()])

    assert delivered is False


@pytest.mark.asyncio
async def test_failed_required_intent_raises(notifier):
    notifier.send_otp_email.side_effect = NotificationDeliveryError("down", 503)
    dispatcher = NotificationDispatcher(notifier)

    with pytest.raises(NotificationDeliveryError):
        await dispatcher.dispatch([_otp_email()])
