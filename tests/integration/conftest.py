from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from garage_iam.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from garage_iam.api.app import create_app
from garage_iam.api.utils.jwt import create_access_token
from garage_iam.app.services.notification_service import (
    INotificationService,
    NotificationDeliveryError,
)
from garage_iam.config import ApplicationConfig
from garage_iam.depends import get_notification_service, get_unit_of_work
from garage_iam.domain.entities import (
    Membership,
    MembershipRole,
    MembershipStatus,
    Tenant,
    User,
)


class RecordingEmailService(INotificationService):
    """Keeps sent messages in memory; can be switched to fail"""

    def __init__(self):
        self.invite_emails = []
        self.otp_emails = []
        self.fail = False

    async def send_invite_email(self, message):
        if self.fail:
            raise NotificationDeliveryError("provider down", status_code=503)
        self.invite_emails.append(message)

    async def send_otp_email(self, message):
        if self.fail:
            raise NotificationDeliveryError("provider down", status_code=503)
        self.otp_emails.append(message)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingEmailService()


@pytest_asyncio.fixture
async def client(session_factory, notifier):
    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_notification_service] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def garage(db_session):
    """A garage with an OWNER; returns (tenant, owner, auth headers)"""
    tenant = Tenant(name="Joe's Garage")
    owner = User(name="Joe", email="joe@garage.com", password_hash="x" * 60)
    db_session.add(tenant)
    db_session.add(owner)
    await db_session.flush()
    db_session.add(
        Membership(
            tenant_id=tenant.id,
            user_id=owner.id,
            role=MembershipRole.owner,
            status=MembershipStatus.active,
        )
    )
    await db_session.commit()

    token = create_access_token(
        user_id=str(owner.id),
        tenant_id=str(tenant.id),
        role=MembershipRole.owner.value,
        expires_delta=timedelta(minutes=15),
    )
    return tenant, owner, {"Authorization": f"Bearer {token}"}
