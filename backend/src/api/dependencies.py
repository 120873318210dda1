"""Request-scoped dependencies: the caller's bearer token and the API client.

Routes that read or write saved records depend on ``require_user``; the
token is resolved against the session table and every query is then scoped
to that user.
"""
from __future__ import annotations

import logging
from typing import Iterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..domain import User
from ..errors import AuthenticationError
from ..integrations.hadesweb import HadeswebClient
from ..services import auth_service

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_bearer_token(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError(auth_service.NOT_AUTHENTICATED)
    return credentials.credentials


def require_user(request: Request, token: str = Depends(get_bearer_token)) -> User:
    try:
        return auth_service.resolve_user(token)
    except AuthenticationError:
        logger.warning("Rejected bearer token for %s", request.url.path)
        raise


def get_hadesweb_client() -> Iterator[HadeswebClient]:
    # requests.Session is not thread-safe; each request gets its own.
    client = HadeswebClient()
    try:
        yield client
    finally:
        client.close()
