"""API views for user accounts."""

from __future__ import annotations

from rest_framework import status  # type: ignore

from shared.infrastructure.api import paginated, success
from shared.infrastructure.views import ContextAPIView

from .application.services import InviteUserCommand, UpdateProfileCommand
from .serializers import (
    InviteUserSerializer,
    ProfileUpdateSerializer,
    UserListQuerySerializer,
    UserSerializer,
)


class MeView(ContextAPIView):
    tenant_mode = None

    def get(self, request):  # type: ignore
        user = self.container.accounts.me(self.request_context(request))
        return success(UserSerializer(user).data)

    def patch(self, request):  # type: ignore
        data = self.validated(ProfileUpdateSerializer, request.data)
        user = self.container.accounts.update_profile(
            self.request_context(request), UpdateProfileCommand(**data),
        )
        return success(UserSerializer(user).data)


class UserCollectionView(ContextAPIView):
    """GET lists users within the admin scope; POST invites an admin user."""

    tenant_mode = None

    def get(self, request):  # type: ignore
        params = self.validated(UserListQuerySerializer, request.query_params)
        page = self.container.accounts.list_users(
            self.request_context(request),
            role=params.get("role"),
            status=params.get("status"),
            page=self.page_request(request),
        )
        return paginated(page, UserSerializer(page.items, many=True).data)

    def post(self, request):  # type: ignore
        data = self.validated(InviteUserSerializer, request.data)
        user = self.container.accounts.invite(self.request_context(request), InviteUserCommand(**data))
        return success(UserSerializer(user).data, message="Invitation sent", status_code=status.HTTP_201_CREATED)


class UserDeactivateView(ContextAPIView):
    tenant_mode = None

    def post(self, request, user_id: str):  # type: ignore
        user = self.container.accounts.deactivate(self.request_context(request), user_id)
        return success(UserSerializer(user).data, message="User deactivated")
