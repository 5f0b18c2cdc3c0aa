"""
Account Services

Identity flows around the User aggregate:
- register / login (customers)
- invite an admin user, accept the invitation
- update own profile
- deactivate a user (never deleted)
- request and confirm a password reset

One-time tokens are generated with secrets and only their SHA-256 hash is
stored. E-mails are best-effort; a failed send never fails the flow.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, List
import hashlib
import logging
import secrets

from django.contrib.auth.hashers import check_password, make_password  # type: ignore

from apps.access.context import RequestContext
from apps.access.engine import admin_scope, ensure_can_manage_users, require_identity
from apps.users.domain.entities import Role, User, UserPatch, UserStatus
from apps.users.identity import issue_access_token
from shared.application.repository import Page, PageRequest
from shared.application.uow import InMemoryUnitOfWork
from shared.domain.base import utcnow
from shared.domain.exceptions import (
    AlreadyExists,
    DuplicateReference,
    Forbidden,
    InvalidState,
    NotFound,
    Unauthenticated,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

INVITATION_TTL = timedelta(days=7)
RESET_TTL = timedelta(hours=1)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


@dataclass
class InviteUserCommand:
    email: str
    role: Role
    tenant_ids: List[str]
    first_name: str = ''
    last_name: str = ''


@dataclass
class RegisterCommand:
    email: str
    password: str
    first_name: str = ''
    last_name: str = ''
    phone: str = ''


@dataclass
class UpdateProfileCommand:
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class Session:
    user: User
    access_token: str


class AccountService:
    def __init__(
        self,
        user_repo,
        tenant_repo,
        notifier,
        uow_factory: Callable = InMemoryUnitOfWork,
        frontend_url: str = 'http://localhost:3000',
    ):
        self.user_repo = user_repo
        self.tenant_repo = tenant_repo
        self.notifier = notifier
        self.uow_factory = uow_factory
        self.frontend_url = frontend_url.rstrip('/')

    def _by_email(self, email: str) -> User | None:
        return self.user_repo.first({'email': email.strip().lower()})

    def _insert(self, user: User) -> User:
        try:
            with self.uow_factory():
                self.user_repo.add(user)
        except DuplicateReference:
            raise AlreadyExists("User with this email already exists")
        return user

    def _save(self, user: User, patch: UserPatch) -> User:
        with self.uow_factory():
            user.version = self.user_repo.update(user.id, user.version, patch)
        return user

    # ----- customers -----

    def register(self, command: RegisterCommand) -> Session:
        if self._by_email(command.email) is not None:
            raise AlreadyExists("User with this email already exists")

        user = self._insert(User(
            email=command.email.strip().lower(),
            role=Role.CUSTOMER,
            status=UserStatus.ACTIVE,
            first_name=command.first_name,
            last_name=command.last_name,
            phone=command.phone,
            password_hash=make_password(command.password),
        ))
        logger.info(f"Customer {user.id} registered")
        return Session(user=user, access_token=issue_access_token(user))

    def login(self, email: str, password: str) -> Session:
        user = self._by_email(email)
        if user is None or not user.password_hash or not check_password(password, user.password_hash):
            raise Unauthenticated("Invalid email or password")
        if user.status != UserStatus.ACTIVE:
            raise Forbidden("Account is not active")
        return Session(user=user, access_token=issue_access_token(user))

    # ----- profile -----

    def me(self, context: RequestContext) -> User:
        identity = require_identity(context.identity, 'users.me')
        user = self.user_repo.get(identity.id)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_profile(self, context: RequestContext, command: UpdateProfileCommand) -> User:
        user = self.me(context)
        patch = UserPatch(
            first_name=command.first_name,
            last_name=command.last_name,
            phone=command.phone,
        )
        if not patch:
            return user
        for name, value in patch.changes().items():
            setattr(user, name, value)
        return self._save(user, patch)

    # ----- admin users -----

    def list_users(
        self,
        context: RequestContext,
        role: Role | None = None,
        status: UserStatus | None = None,
        page: PageRequest | None = None,
    ) -> Page[User]:
        page = page or PageRequest()
        scope = admin_scope(context.identity, None, 'users.list')
        if scope.is_empty:
            return Page.empty(page)

        filters = scope.filters(tenant_field='assigned_tenants', many=True)
        if role is not None:
            filters['role'] = role
        if status is not None:
            filters['status'] = status
        return self.user_repo.find(filters, page)

    def invite(self, context: RequestContext, command: InviteUserCommand) -> User:
        """
        Invite an admin user

        The invitee starts PENDING and becomes ACTIVE by accepting the
        invitation with the token sent by e-mail.
        """
        inviter = ensure_can_manage_users(context.identity, command.role, command.tenant_ids, 'users.invite')
        unknown = [t for t in command.tenant_ids if self.tenant_repo.get(t) is None]
        if unknown:
            raise ValidationFailed("Unknown tenant", {'tenant_ids': unknown})
        if self._by_email(command.email) is not None:
            raise AlreadyExists("User with this email already exists")

        token = secrets.token_urlsafe(32)
        user = self._insert(User(
            email=command.email.strip().lower(),
            role=command.role,
            status=UserStatus.PENDING,
            first_name=command.first_name,
            last_name=command.last_name,
            assigned_tenants=sorted(set(command.tenant_ids)),
            invitation_token_hash=hash_token(token),
            invitation_expires_at=utcnow() + INVITATION_TTL,
            invited_by=inviter.id,
        ))
        logger.info(f"User {user.id} invited as {command.role.value} by {inviter.id}")

        inviter_user = self.user_repo.get(inviter.id)
        self.notifier.send_invitation(
            user.email,
            inviter_user.full_name if inviter_user else inviter.email,
            command.role.value,
            f"{self.frontend_url}/accept-invitation?token={token}",
        )
        return user

    def accept_invitation(self, token: str, password: str) -> Session:
        user = self.user_repo.first({'invitation_token_hash': hash_token(token)})
        if user is None or user.status != UserStatus.PENDING:
            raise NotFound("Invitation not found")
        if user.invitation_expires_at is None or user.invitation_expires_at < utcnow():
            raise InvalidState("Invitation has expired")

        patch = UserPatch(
            status=UserStatus.ACTIVE,
            password_hash=make_password(password),
            invitation_token_hash='',
        )
        user.status = UserStatus.ACTIVE
        user.password_hash = patch.password_hash
        user.invitation_token_hash = ''
        self._save(user, patch)
        logger.info(f"User {user.id} accepted invitation")
        return Session(user=user, access_token=issue_access_token(user))

    def deactivate(self, context: RequestContext, user_id: str) -> User:
        user = self.user_repo.get(user_id)
        if user is None:
            raise NotFound("User not found")
        identity = ensure_can_manage_users(
            context.identity, user.role, user.assigned_tenants, 'users.deactivate',
        )
        if identity.id == user.id:
            raise InvalidState("Cannot deactivate your own account")
        if user.status == UserStatus.INACTIVE:
            return user

        user.status = UserStatus.INACTIVE
        self._save(user, UserPatch(status=UserStatus.INACTIVE))
        logger.info(f"User {user.id} deactivated by {identity.id}")
        return user

    # ----- password reset -----

    def request_password_reset(self, email: str) -> None:
        """Unknown addresses are not disclosed: the call always succeeds"""
        user = self._by_email(email)
        if user is None or user.status != UserStatus.ACTIVE:
            logger.info("Password reset requested for unknown or inactive account")
            return

        token = secrets.token_urlsafe(32)
        expires_at = utcnow() + RESET_TTL
        user.reset_token_hash = hash_token(token)
        user.reset_expires_at = expires_at
        self._save(user, UserPatch(reset_token_hash=user.reset_token_hash, reset_expires_at=expires_at))

        self.notifier.send_password_reset(
            user.email,
            user.full_name,
            f"{self.frontend_url}/reset-password?token={token}",
        )

    def reset_password(self, token: str, password: str) -> None:
        user = self.user_repo.first({'reset_token_hash': hash_token(token)})
        if user is None or user.reset_expires_at is None or user.reset_expires_at < utcnow():
            raise ValidationFailed("Invalid or expired reset token")

        user.password_hash = make_password(password)
        user.reset_token_hash = ''
        self._save(user, UserPatch(password_hash=user.password_hash, reset_token_hash=''))
        logger.info(f"Password reset for user {user.id}")
