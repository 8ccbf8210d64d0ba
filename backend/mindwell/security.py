"""
MindWell Backend — Credentials & Bearer Tokens
==============================================

What:  Password hashing and signed access tokens.
How:   werkzeug's salted PBKDF2/scrypt hashes for stored credentials;
       python-jose HS256 JWTs whose `sub` claim is the user id.
Who:   AuthService (register/login) and the `get_current_user` gate.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from mindwell.config import settings
from mindwell.exceptions import UnauthorizedError

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(
    user_id: int,
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> str:
    issued = now or datetime.now(timezone.utc)
    expire = issued + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    claims = {"sub": str(user_id), "iat": issued, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> int:
    """
    Return the user id carried by `token`.

    Raises:
        UnauthorizedError: bad signature, expired, or no usable `sub` claim.
    """
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        raise UnauthorizedError(context={"reason": type(e).__name__})

    subject = claims.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise UnauthorizedError(context={"reason": "invalid subject"})
