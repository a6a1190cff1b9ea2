"""HTTP Basic gate for every dashboard route except static assets."""
from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from clawdash import config

security = HTTPBasic(auto_error=False)


def check_credentials(username: str, password: str) -> bool:
    user_ok = secrets.compare_digest(username.encode("utf-8"), config.DASHBOARD_USERNAME.encode("utf-8"))
    pass_ok = secrets.compare_digest(password.encode("utf-8"), config.DASHBOARD_PASSWORD.encode("utf-8"))
    return user_ok and pass_ok


def _challenge(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": f'Basic realm="{config.AUTH_REALM}"'},
    )


def require_basic_auth(credentials: Optional[HTTPBasicCredentials] = Depends(security)) -> str:
    """FastAPI dependency; returns the authenticated username."""
    if credentials is None:
        raise _challenge("Authentication required")
    if not check_credentials(credentials.username, credentials.password):
        raise _challenge("Invalid credentials")
    return credentials.username
