"""Views for authentication flows (register, login, password reset, invitations)."""

from __future__ import annotations

from rest_framework import status  # type: ignore

from shared.infrastructure.api import success
from shared.infrastructure.views import ContextAPIView

from .application.services import RegisterCommand, Session
from .auth_serializers import (
    AcceptInvitationSerializer,
    LoginSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    RegisterSerializer,
)
from .serializers import UserSerializer


def _session_payload(session: Session) -> dict:
    return {
        "user": UserSerializer(session.user).data,
        "tokens": {"access": session.access_token},
    }


class AuthView(ContextAPIView):
    authentication_classes = []
    tenant_mode = None


class RegisterView(AuthView):
    def post(self, request):  # type: ignore
        data = self.validated(RegisterSerializer, request.data)
        session = self.container.accounts.register(RegisterCommand(
            email=data["email"],
            password=data["password"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            phone=data["phone"],
        ))
        return success(_session_payload(session), status_code=status.HTTP_201_CREATED)


class LoginView(AuthView):
    def post(self, request):  # type: ignore
        data = self.validated(LoginSerializer, request.data)
        session = self.container.accounts.login(data["email"], data["password"])
        return success(_session_payload(session))


class PasswordResetRequestView(AuthView):
    def post(self, request):  # type: ignore
        data = self.validated(PasswordResetRequestSerializer, request.data)
        self.container.accounts.request_password_reset(data["email"])
        return success(
            None,
            message="If an account exists for this e-mail, a reset link has been sent.",
            status_code=status.HTTP_202_ACCEPTED,
        )


class PasswordResetConfirmView(AuthView):
    def post(self, request):  # type: ignore
        data = self.validated(PasswordResetConfirmSerializer, request.data)
        self.container.accounts.reset_password(data["token"], data["password"])
        return success(None, message="Password updated.")


class AcceptInvitationView(AuthView):
    def post(self, request):  # type: ignore
        data = self.validated(AcceptInvitationSerializer, request.data)
        session = self.container.accounts.accept_invitation(data["token"], data["password"])
        return success(_session_payload(session))
