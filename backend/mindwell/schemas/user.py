"""
MindWell Backend — Account Schemas
==================================

What:  Public user representation and the login/registration response.

Security:
    UserResponse deliberately has no `password` field; the stored credential
    hash never leaves the server.
"""

from typing import Optional

from mindwell.schemas.common import CamelModel


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    is_premium: bool
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None


class AuthResponse(CamelModel):
    """Returned by POST /api/register (201) and POST /api/login (200)."""
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
