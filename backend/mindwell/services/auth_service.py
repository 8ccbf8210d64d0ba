"""
MindWell Backend — Account Service
==================================

What:  Registration and login.
How:   Passwords are hashed with werkzeug before they reach the store; login
       compares against the stored hash and issues a signed bearer token.
Who:   POST /api/register, POST /api/login.
"""

import logging
from typing import Tuple

from mindwell.exceptions import UnauthorizedError
from mindwell.repositories.base import EntityStore
from mindwell.repositories.records import NewUser, User
from mindwell.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:

    def __init__(self, store: EntityStore):
        self.store = store

    async def register(self, username: str, password: str, email: str) -> Tuple[User, str]:
        """
        Raises:
            DuplicateUsernameError: the username is taken, ignoring case.
        """
        user = await self.store.create_user(
            NewUser(username=username, password=hash_password(password), email=email)
        )
        return user, create_access_token(user.id)

    async def login(self, username: str, password: str) -> Tuple[User, str]:
        user = await self.store.get_user_by_username(username)
        # Same error for unknown user and wrong password
        if user is None or not verify_password(user.password, password):
            logger.info("Failed login for username %r", username)
            raise UnauthorizedError(message="Invalid username or password")
        return user, create_access_token(user.id)
