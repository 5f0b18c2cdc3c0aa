"""DRF authentication backed by the identity resolver."""

from __future__ import annotations

from rest_framework.authentication import BaseAuthentication  # type: ignore


class BearerIdentityAuthentication(BaseAuthentication):
    """
    Sets request.user to the caller's Identity

    Anonymous requests leave request.user as None (UNAUTHENTICATED_USER).
    """

    keyword = 'Bearer'

    def authenticate(self, request):  # type: ignore
        from config.container import get_container

        identity = get_container().identity_resolver.resolve(
            request.META.get('HTTP_AUTHORIZATION')
        )
        if identity is None:
            return None
        return identity, None

    def authenticate_header(self, request) -> str:  # type: ignore
        return self.keyword
