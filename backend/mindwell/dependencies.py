"""
MindWell Backend — Request Dependencies (Access Gate & Ownership Guard)
=======================================================================

What:  FastAPI dependencies shared by the route modules.
How:   Application-wide collaborators (store, clock, payment processor) live
       on `app.state`, set by `create_app()`; these functions hand them to
       route handlers through `Depends`.

Access control:
    get_current_user
        Resolves the bearer token to a User. Missing, malformed or expired
        tokens and tokens for unknown users all raise UnauthorizedError (401)
        before the handler runs, so no user-scoped data is read.

    load_owned
        The one ownership check for per-entity reads and writes:
            load → absent          → NotFoundError (404)
                 → other owner     → ForbiddenError (403)
                 → owned           → the entity
        It performs a single read and never mutates, so a rejected request
        leaves the store untouched.
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, TypeVar

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mindwell.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from mindwell.repositories.base import EntityStore
from mindwell.repositories.records import JournalEntry, User
from mindwell.security import decode_access_token
from mindwell.services.payment_base import PaymentProcessor

logger = logging.getLogger(__name__)

T = TypeVar("T")

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def get_clock(request: Request) -> Callable[[], datetime]:
    return request.app.state.clock


def get_payment_processor(request: Request) -> PaymentProcessor:
    return request.app.state.payment_processor


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: EntityStore = Depends(get_store),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError()

    user_id = decode_access_token(credentials.credentials)
    user = await store.get_user(user_id)
    if user is None:
        raise UnauthorizedError(context={"reason": "unknown user", "user_id": user_id})
    return user


async def load_owned(
    loader: Callable[[int], Awaitable[Optional[T]]],
    entity_id: int,
    identity: User,
    resource: str,
) -> T:
    entity = await loader(entity_id)
    if entity is None:
        raise NotFoundError(resource=resource, resource_id=str(entity_id))
    if entity.user_id != identity.id:
        logger.warning(
            "User %d denied access to %s %d owned by user %d",
            identity.id, resource, entity_id, entity.user_id,
        )
        raise ForbiddenError()
    return entity


async def get_owned_journal_entry(
    entry_id: int,
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> JournalEntry:
    return await load_owned(store.get_journal_entry, entry_id, user, "journal entry")
