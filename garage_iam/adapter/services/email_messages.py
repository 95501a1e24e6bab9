"""Plain-text rendering of the invite flow emails."""

from typing import List

from pydantic import BaseModel

from garage_iam.app.use_cases.invites.invite_access import build_invite_link
from garage_iam.domain.notifications import InviteEmail, OtpEmail


class EmailMessage(BaseModel):
    to: List[str]
    subject: str
    text: str


def render_invite_email(message: InviteEmail) -> EmailMessage:
    link = build_invite_link(message.raw_token)
    opener = (
        f"{message.inviter_name} has invited you"
        if message.inviter_name
        else "You have been invited"
    )
    text = (
        f"You've been invited to join {message.garage_name}\n\n"
        f"{opener} to join {message.garage_name} as a {message.role}.\n\n"
        f"Accept your invitation here: {link}\n\n"
        "This invitation will expire in 7 days.\n\n"
        "If you didn't expect this email, you can safely ignore it."
    )
    return EmailMessage(
        to=[message.to],
        subject=f"You've been invited to join {message.garage_name}",
        text=text,
    )


def render_otp_email(message: OtpEmail) -> EmailMessage:
    text = (
        f"Your verification code is: {message.code}\n\n"
        "Use this code to verify your email and complete your registration "
        f"for {message.garage_name}.\n\n"
        "This code expires in 10 minutes.\n\n"
        "If you didn't request this code, please ignore this email."
    )
    return EmailMessage(
        to=[message.to], subject="Your verification code", text=text
    )
