from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from garage_iam.config import ApplicationConfig
from garage_iam.adapter.services.logging_email_service import LoggingEmailService
from garage_iam.adapter.services.resend_email_service import ResendEmailService
from garage_iam.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from garage_iam.api.utils.jwt import verify_jwt
from garage_iam.app.services.notification_service import INotificationService

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer()


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_notification_service() -> INotificationService:
    """Resend when an API key is configured, otherwise log-only delivery"""
    if not ApplicationConfig.RESEND_API_KEY:
        return LoggingEmailService()

    return ResendEmailService(
        api_key=ApplicationConfig.RESEND_API_KEY,
        sender=ApplicationConfig.EMAIL_FROM,
        api_url=ApplicationConfig.RESEND_API_URL,
        max_retries=ApplicationConfig.EMAIL_MAX_RETRIES,
        timeout=ApplicationConfig.EMAIL_TIMEOUT_SECONDS,
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Dependency to extract and verify JWT token from Authorization header.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        Decoded JWT payload containing user_id, tenant_id, role

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    token = credentials.credentials
    payload = verify_jwt(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return payload
