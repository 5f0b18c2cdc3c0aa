"""
Identity Resolver

Turns a bearer credential into a verified Identity. Tokens are simplejwt
access tokens carrying the user id; the role, status and assigned tenants
are always read from the user store, never from the token.
"""

from __future__ import annotations

import logging

import structlog
from rest_framework_simplejwt.exceptions import TokenError  # type: ignore
from rest_framework_simplejwt.tokens import AccessToken  # type: ignore

from apps.users.domain.entities import Identity, User, UserStatus
from shared.domain.exceptions import Forbidden, Unauthenticated

logger = logging.getLogger(__name__)
audit_logger = structlog.get_logger("apps.access.audit")

USER_ID_CLAIM = 'user_id'


def issue_access_token(user: User) -> str:
    token = AccessToken()
    token[USER_ID_CLAIM] = user.id
    return str(token)


class IdentityResolver:
    def __init__(self, user_repo):
        self.user_repo = user_repo

    def resolve(self, authorization: str | None) -> Identity | None:
        """
        Resolve an Authorization header

        Returns None for anonymous requests (no header).

        Raises:
            Unauthenticated: malformed header, invalid or expired token,
                unknown user
            Forbidden: the account is not active
        """
        if not authorization:
            return None

        scheme, _, raw = authorization.partition(' ')
        raw = raw.strip()
        if scheme.lower() != 'bearer' or not raw:
            raise Unauthenticated("Invalid authorization header")

        try:
            token = AccessToken(raw)
        except TokenError as e:
            logger.info(f"Rejected access token: {e}")
            raise Unauthenticated("Invalid or expired token")

        user_id = token.get(USER_ID_CLAIM)
        user = self.user_repo.get(str(user_id)) if user_id else None
        if user is None:
            raise Unauthenticated("User not found")

        if user.status != UserStatus.ACTIVE:
            audit_logger.warning("inactive_account", user_id=user.id, status=user.status.value)
            raise Forbidden("Account is not active")

        return user.to_identity()
