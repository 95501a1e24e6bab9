from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field

from garage_iam.api.error import ClientError, ServerError
from garage_iam.app.services.notification_service import INotificationService
from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.app.use_cases.invites import (
    CreateInviteCommand,
    CreateInviteUseCase,
    GetInviteUseCase,
    InviteCreatedResponse,
    InviteDetailResponse,
    ListInvitesResponse,
    ListInvitesUseCase,
    ResendInviteResponse,
    ResendInviteUseCase,
    RevokeInviteResponse,
    RevokeInviteUseCase,
)
from garage_iam.depends import (
    get_current_user,
    get_notification_service,
    get_unit_of_work,
)
from garage_iam.libs.result import Error

router = APIRouter(prefix="/tenants/{tenant_id}/invites", tags=["Tenant Invites"])


def _parse_uuid(value: str, code: str, label: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ClientError(
            Error(code, f"Invalid {label} format"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )


def _raise_admin_error(error: Error):
    if error.code in ("NOT_A_MEMBER", "INSUFFICIENT_ROLE"):
        raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
    elif error.code in ("TENANT_NOT_FOUND", "INVITE_NOT_FOUND"):
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    elif error.code in (
        "INVITE_ALREADY_EXISTS",
        "ALREADY_MEMBER",
        "INVITATION_ALREADY_ACCEPTED",
        "CONCURRENT_UPDATE",
    ):
        raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
    elif error.code in ("INVALID_ROLE", "INVALID_EMAIL", "INVALID_STATUS"):
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    raise ServerError(error)


class CreateInviteRequest(BaseModel):
    """
    Create invite HTTP request payload

    Validates incoming request for inviting someone to a garage.
    """

    email: EmailStr = Field(..., description="Email address to invite")
    role: str = Field(
        ..., description="Role to assign (OWNER/MANAGER/MECHANIC/STOREKEEPER/VIEWER)"
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=InviteCreatedResponse,
)
async def create_invite(
    tenant_id: str,
    request: CreateInviteRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationService = Depends(get_notification_service),
):
    """
    Create Invite

    Invites an email address to join the garage with a role.
    Requires owner or manager permissions. The response carries the invite
    link so it can be shared manually if the email was not delivered.

    Raises:
        - 400 Bad Request: Invalid tenant_id, INVALID_ROLE, INVALID_EMAIL
        - 401 Unauthorized: Invalid or expired JWT
        - 403 Forbidden: NOT_A_MEMBER, INSUFFICIENT_ROLE
        - 404 Not Found: TENANT_NOT_FOUND
        - 409 Conflict: INVITE_ALREADY_EXISTS, ALREADY_MEMBER
    """
    tenant_uuid = _parse_uuid(tenant_id, "INVALID_TENANT_ID", "tenant ID")

    command = CreateInviteCommand(
        tenant_id=tenant_uuid,
        inviter_id=UUID(current_user["user_id"]),
        email=request.email,
        role=request.role,
    )

    use_case = CreateInviteUseCase(uow, notifier)
    result = await use_case.execute(command)

    if result.is_err():
        _raise_admin_error(result.error)

    return result.value


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=ListInvitesResponse,
)
async def list_invites(
    tenant_id: str,
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List Invites

    All invites of the garage with effective status, expiry, lock and code
    counters. Optional `status` query filter (PENDING, ACCEPTED, EXPIRED).

    Raises:
        - 400 Bad Request: Invalid tenant_id, INVALID_STATUS
        - 403 Forbidden: NOT_A_MEMBER, INSUFFICIENT_ROLE
    """
    tenant_uuid = _parse_uuid(tenant_id, "INVALID_TENANT_ID", "tenant ID")

    use_case = ListInvitesUseCase(uow)
    result = await use_case.execute(
        UUID(current_user["user_id"]), tenant_uuid, status_filter
    )

    if result.is_err():
        _raise_admin_error(result.error)

    return result.value


@router.get(
    "/{invite_id}",
    status_code=status.HTTP_200_OK,
    response_model=InviteDetailResponse,
)
async def get_invite(
    tenant_id: str,
    invite_id: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Invite

    One invite with effective status, lock and code counters, usage
    timestamps and the inviter's name and email.

    Raises:
        - 400 Bad Request: Invalid tenant_id or invite_id format
        - 403 Forbidden: NOT_A_MEMBER, INSUFFICIENT_ROLE
        - 404 Not Found: INVITE_NOT_FOUND
    """
    tenant_uuid = _parse_uuid(tenant_id, "INVALID_TENANT_ID", "tenant ID")
    invite_uuid = _parse_uuid(invite_id, "INVALID_INVITE_ID", "invite ID")

    use_case = GetInviteUseCase(uow)
    result = await use_case.execute(
        UUID(current_user["user_id"]), tenant_uuid, invite_uuid
    )

    if result.is_err():
        _raise_admin_error(result.error)

    return result.value


@router.post(
    "/{invite_id}/resend",
    status_code=status.HTTP_200_OK,
    response_model=ResendInviteResponse,
)
async def resend_invite(
    tenant_id: str,
    invite_id: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationService = Depends(get_notification_service),
):
    """
    Resend Invite

    Issues a new link (the old one stops working) valid for 7 days and
    resets code and lockout state.

    Raises:
        - 400 Bad Request: Invalid tenant_id or invite_id format
        - 403 Forbidden: NOT_A_MEMBER, INSUFFICIENT_ROLE
        - 404 Not Found: INVITE_NOT_FOUND
        - 409 Conflict: INVITATION_ALREADY_ACCEPTED, CONCURRENT_UPDATE
    """
    tenant_uuid = _parse_uuid(tenant_id, "INVALID_TENANT_ID", "tenant ID")
    invite_uuid = _parse_uuid(invite_id, "INVALID_INVITE_ID", "invite ID")

    use_case = ResendInviteUseCase(uow, notifier)
    result = await use_case.execute(
        UUID(current_user["user_id"]), tenant_uuid, invite_uuid
    )

    if result.is_err():
        _raise_admin_error(result.error)

    return result.value


@router.delete(
    "/{invite_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeInviteResponse,
)
async def revoke_invite(
    tenant_id: str,
    invite_id: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Revoke Invite

    Deletes a pending invite; its link stops resolving.

    Raises:
        - 400 Bad Request: Invalid tenant_id or invite_id format
        - 403 Forbidden: NOT_A_MEMBER, INSUFFICIENT_ROLE
        - 404 Not Found: INVITE_NOT_FOUND
        - 409 Conflict: INVITATION_ALREADY_ACCEPTED
    """
    tenant_uuid = _parse_uuid(tenant_id, "INVALID_TENANT_ID", "tenant ID")
    invite_uuid = _parse_uuid(invite_id, "INVALID_INVITE_ID", "invite ID")

    use_case = RevokeInviteUseCase(uow)
    result = await use_case.execute(
        UUID(current_user["user_id"]), tenant_uuid, invite_uuid
    )

    if result.is_err():
        _raise_admin_error(result.error)

    return result.value
