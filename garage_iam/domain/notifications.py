"""
Notification intents

State transitions describe the emails they need instead of sending them.
Intents are dispatched after the transaction commits. `required` marks
intents whose delivery failure must fail the visible operation.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class InviteEmail(BaseModel):
    """Invitation link email (carries the raw invite token)"""

    kind: Literal["invite"] = "invite"
    to: str
    garage_name: str
    role: str
    raw_token: str
    inviter_name: str
    required: bool = False


class OtpEmail(BaseModel):
    """Verification code email"""

    kind: Literal["otp"] = "otp"
    to: str
    code: str
    garage_name: str
    required: bool = True


NotificationIntent = Annotated[Union[InviteEmail, OtpEmail], Field(discriminator="kind")]
