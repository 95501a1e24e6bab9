"""Email address helpers shared by invite creation and previews."""

from typing import Optional


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_plausible_email(email: str) -> bool:
    """Cheap shape check; full validation happens at the API boundary"""
    local, sep, domain = email.partition("@")
    return bool(sep) and bool(local) and "." in domain and "@" not in domain


def mask_email(email: str) -> str:
    """
    Mask the local part of an address for unauthenticated previews.

    Local parts of up to 2 characters keep their first character, longer
    ones keep the first two: "bo@x.com" -> "b***@x.com",
    "bob@x.com" -> "bo***@x.com".
    """
    local, _, domain = email.partition("@")
    if len(local) <= 2:
        return f"{local[:1]}***@{domain}"
    return f"{local[:2]}***@{domain}"
