"""
Authentication and authorization dependencies for FastAPI endpoints.
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from leave_service.services.authorization import AuthorizationGuard, Principal, RolePolicy
from leave_service.services.identity import build_identity_provider

# auto_error=False: a missing or non-Bearer header becomes our own 401, not Starlette's 403
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_authorization_guard() -> AuthorizationGuard:
    """
    Built once per process: the role policy is resolved from configuration
    at startup and never re-read.
    """
    return AuthorizationGuard(build_identity_provider(), RolePolicy.from_settings())


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    guard: AuthorizationGuard = Depends(get_authorization_guard),
) -> Principal:
    """
    Verifies the bearer credential and resolves the caller's role.
    """
    return guard.authenticate(credentials.credentials if credentials else None)


def require_admin(current: Principal = Depends(get_current_principal)) -> Principal:
    """Shorthand for admin-only endpoints."""
    return AuthorizationGuard.require_admin(current)
