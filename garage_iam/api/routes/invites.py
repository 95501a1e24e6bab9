from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from garage_iam.api.error import ClientError, ServerError
from garage_iam.api.utils.rate_limit import limit_invite_accept
from garage_iam.app.services.notification_service import INotificationService
from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.app.use_cases.invites import (
    AcceptInviteCommand,
    AcceptInviteResponse,
    AcceptInviteUseCase,
    InvitePreviewResponse,
    PreviewInviteUseCase,
    SendCodeResponse,
    SendInviteCodeUseCase,
    VerifyCodeResponse,
    VerifyInviteCodeUseCase,
)
from garage_iam.depends import get_notification_service, get_unit_of_work
from garage_iam.libs.result import Error

router = APIRouter(prefix="/invites", tags=["Invites"])

# Status codes shared by every public invite endpoint
INVITE_ERROR_STATUS = {
    "INVALID_TOKEN_FORMAT": status.HTTP_400_BAD_REQUEST,
    "INVALID_TOKEN": status.HTTP_404_NOT_FOUND,
    "TENANT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVITE_EXPIRED": status.HTTP_410_GONE,
    "INVITE_USED": status.HTTP_410_GONE,
    "INVITE_LOCKED": status.HTTP_423_LOCKED,
    "OTP_SEND_LIMIT_EXCEEDED": status.HTTP_429_TOO_MANY_REQUESTS,
    "INVALID_CODE_FORMAT": status.HTTP_400_BAD_REQUEST,
    "NO_OTP_SENT": status.HTTP_400_BAD_REQUEST,
    "OTP_EXPIRED": status.HTTP_400_BAD_REQUEST,
    "INVALID_OTP": status.HTTP_400_BAD_REQUEST,
    "VERIFICATION_REQUIRED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_VERIFICATION": status.HTTP_401_UNAUTHORIZED,
    "VERIFICATION_EXPIRED": status.HTTP_401_UNAUTHORIZED,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "DUPLICATE_MEMBERSHIP": status.HTTP_409_CONFLICT,
    "CONCURRENT_UPDATE": status.HTTP_409_CONFLICT,
}


def raise_invite_error(error: Error):
    """Map a use case error to its HTTP response; unknown codes are server errors"""
    status_code = INVITE_ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)

    headers = None
    retry_after = error.details.get("retry_after_seconds")
    if retry_after is not None:
        headers = {"Retry-After": str(retry_after)}

    raise ClientError(error, status_code=status_code, headers=headers)


class VerifyCodeRequest(BaseModel):
    """Verify code HTTP request payload"""

    code: Optional[str] = Field(None, description="6-digit verification code")


class AcceptInviteRequest(BaseModel):
    """
    Accept invite HTTP request payload

    Email and role come from the invite; any such field sent here is ignored.
    """

    verification_token: Optional[str] = Field(
        None, description="Token returned by verify-code"
    )
    name: Optional[str] = Field(None, description="Display name for a new account")
    password: Optional[str] = Field(
        None, description="Password for a new account (min 8 characters)"
    )


@router.get(
    "/{token}/preview",
    status_code=status.HTTP_200_OK,
    response_model=InvitePreviewResponse,
)
async def preview_invite(
    token: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Preview Invite

    Garage name, role, masked email and code/lock flags for the invite page.

    Raises:
        - 400 Bad Request: INVALID_TOKEN_FORMAT
        - 404 Not Found: INVALID_TOKEN
        - 410 Gone: INVITE_EXPIRED, INVITE_USED
    """
    use_case = PreviewInviteUseCase(uow)
    result = await use_case.execute(token)

    if result.is_err():
        raise_invite_error(result.error)

    return result.value


@router.post(
    "/{token}/send-code",
    status_code=status.HTTP_200_OK,
    response_model=SendCodeResponse,
)
async def send_invite_code(
    token: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationService = Depends(get_notification_service),
):
    """
    Send Verification Code

    Emails a 6-digit code valid for 10 minutes (max 5 per hour).

    Raises:
        - 400/404/410: token errors
        - 423 Locked: INVITE_LOCKED (Retry-After header)
        - 429 Too Many Requests: OTP_SEND_LIMIT_EXCEEDED (Retry-After header)
        - 502 Bad Gateway: the code email could not be delivered
    """
    use_case = SendInviteCodeUseCase(uow, notifier)
    result = await use_case.execute(token)

    if result.is_err():
        raise_invite_error(result.error)

    return result.value


@router.post(
    "/{token}/verify-code",
    status_code=status.HTTP_200_OK,
    response_model=VerifyCodeResponse,
)
async def verify_invite_code(
    token: str,
    request: VerifyCodeRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Verify Code

    Returns a verification token valid for 10 minutes.

    Raises:
        - 400 Bad Request: INVALID_CODE_FORMAT, NO_OTP_SENT, OTP_EXPIRED,
                           INVALID_OTP (with remaining_attempts)
        - 423 Locked: INVITE_LOCKED after the 5th wrong code
    """
    use_case = VerifyInviteCodeUseCase(uow)
    result = await use_case.execute(token, request.code)

    if result.is_err():
        raise_invite_error(result.error)

    return result.value


@router.post(
    "/{token}/accept",
    status_code=status.HTTP_200_OK,
    response_model=AcceptInviteResponse,
    dependencies=[Depends(limit_invite_accept)],
)
async def accept_invite(
    token: str,
    request: AcceptInviteRequest,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Accept Invite

    Creates the membership (and the account for a new user).

    Returns 201 when a new account was created, 200 otherwise.

    Raises:
        - 400 Bad Request: VALIDATION_ERROR
        - 401 Unauthorized: VERIFICATION_REQUIRED, INVALID_VERIFICATION,
                            VERIFICATION_EXPIRED
        - 409 Conflict: DUPLICATE_MEMBERSHIP, CONCURRENT_UPDATE
        - 429 Too Many Requests: RATE_LIMIT_EXCEEDED (5 per 15 minutes per IP)
    """
    command = AcceptInviteCommand(
        verification_token=request.verification_token,
        name=request.name,
        password=request.password,
    )

    use_case = AcceptInviteUseCase(uow)
    result = await use_case.execute(token, command)

    if result.is_err():
        raise_invite_error(result.error)

    if result.value.is_new_user:
        response.status_code = status.HTTP_201_CREATED

    return result.value
