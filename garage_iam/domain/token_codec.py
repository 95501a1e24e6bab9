"""
Token Codec

Random bearer secrets (invite token, verification token, OTP code) and
their SHA-256 lookup digests. A raw secret is never recoverable from its
digest; presented values are checked by hashing and comparing digests.
"""

import hashlib
import hmac
import secrets
from typing import Optional, Tuple

SECRET_BYTES = 32  # hex encoded -> 64 characters
MIN_TOKEN_LENGTH = 32
OTP_LENGTH = 6
_OTP_LOWEST = 10 ** (OTP_LENGTH - 1)  # 100000
_OTP_SPAN = 9 * _OTP_LOWEST  # 900000 values: 100000..999999


def hash_secret(raw: str) -> str:
    """SHA-256 hex digest of a raw secret"""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def generate_secret() -> Tuple[str, str]:
    """
    Generate a high-entropy bearer secret.

    Returns:
        (raw, digest) - only the digest may be persisted
    """
    raw = secrets.token_hex(SECRET_BYTES)
    return raw, hash_secret(raw)


def generate_otp_code() -> Tuple[str, str]:
    """
    Generate a 6-digit numeric code.

    Values are uniform over 100000..999999, so codes never start with 0.

    Returns:
        (code, digest)
    """
    code = str(_OTP_LOWEST + secrets.randbelow(_OTP_SPAN))
    return code, hash_secret(code)


def secret_matches(raw: Optional[str], stored_hash: Optional[str]) -> bool:
    """Constant-time comparison of hash(raw) against a stored digest"""
    if not raw or not stored_hash:
        return False
    return hmac.compare_digest(hash_secret(raw), stored_hash)


def is_well_formed_token(raw: Optional[str]) -> bool:
    return bool(raw) and len(raw) >= MIN_TOKEN_LENGTH


def is_well_formed_code(code: Optional[str]) -> bool:
    # str.isdigit() accepts non-ASCII digits, so check the characters explicitly
    return (
        code is not None
        and len(code) == OTP_LENGTH
        and all(c in "0123456789" for c in code)
    )
