from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from garage_iam.domain import token_codec
from garage_iam.domain.entities import Invite, InviteStatus, MembershipRole

NOW = datetime(2025, 3, 1, 12, 0, 0)
RAW_TOKEN = "a" * 64


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def raw_token():
    return RAW_TOKEN


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.invites = MagicMock()
    uow.invites.get_by_id = AsyncMock(return_value=None)
    uow.invites.get_by_token_hash = AsyncMock(return_value=None)
    uow.invites.get_active_pending = AsyncMock(return_value=None)
    uow.invites.list_by_tenant = AsyncMock(return_value=[])
    uow.invites.create = AsyncMock(side_effect=lambda invite: invite)
    uow.invites.update = AsyncMock(side_effect=lambda invite: invite)
    uow.invites.delete = AsyncMock()

    uow.tenants = MagicMock()
    uow.tenants.get_by_id = AsyncMock(return_value=None)

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)

    uow.memberships = MagicMock()
    uow.memberships.get_by_user_and_tenant = AsyncMock(return_value=None)
    uow.memberships.create = AsyncMock(side_effect=lambda membership: membership)
    return uow


@pytest.fixture
def make_invite():
    """Pending invite for RAW_TOKEN, expiring in 7 days unless overridden"""

    def _make(**overrides):
        fields = dict(
            id=uuid4(),
            tenant_id=uuid4(),
            created_by_user_id=uuid4(),
            email="bob@garage.com",
            role=MembershipRole.mechanic,
            token_hash=token_codec.hash_secret(RAW_TOKEN),
            status=InviteStatus.pending,
            expires_at=NOW + timedelta(days=7),
            created_at=NOW - timedelta(days=1),
            updated_at=NOW - timedelta(days=1),
        )
        fields.update(overrides)
        return Invite(**fields)

    return _make
