"""Dependency injection for API routes.

The running ThreadWardenService lives on app.state; routes reach it through
ServiceDep so tests can hand create_app() a prebuilt service.
"""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from threadwarden.observability.logging import get_logger
from threadwarden.service import ThreadWardenService

logger = get_logger(__name__)

security_scheme = HTTPBearer(auto_error=False)


def get_service(request: Request) -> ThreadWardenService:
    service: ThreadWardenService | None = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not started",
        )
    return service


ServiceDep = Annotated[ThreadWardenService, Depends(get_service)]


async def require_ingest_token(
    request: Request,
    service: ServiceDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
) -> None:
    """Check the bearer token when api.ingest_token is configured.

    Raises:
        HTTPException: 401 if the token is missing or wrong
    """
    expected = service.settings.api.ingest_token
    if expected is None:
        return

    if credentials is None:
        logger.warning("auth_missing_token", path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not secrets.compare_digest(
        credentials.credentials.encode(), expected.get_secret_value().encode()
    ):
        logger.warning("auth_invalid_token", path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )
