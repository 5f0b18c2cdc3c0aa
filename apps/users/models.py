"""User storage model.

Accounts are platform users, not Django auth users: authentication is
bearer-token only and passwords are hashed with django.contrib.auth.hashers.
Admin roles reach the tenants listed in assigned_tenants.
"""

from __future__ import annotations

from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore

from apps.users.domain.entities import Role, UserStatus


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?\d{7,15}$",
    message="Invalid phone number. Use the international format without spaces.",
)


class User(models.Model):
    """Platform account; never deleted, deactivation flips the status."""

    ROLE_CHOICES = [(r.value, r.name.replace('_', ' ').title()) for r in Role]
    STATUS_CHOICES = [(s.value, s.name.title()) for s in UserStatus]

    id = models.CharField(primary_key=True, max_length=32)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=Role.CUSTOMER.value, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=UserStatus.ACTIVE.value)
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=20, blank=True, validators=[PHONE_VALIDATOR])
    password_hash = models.CharField(max_length=255, blank=True)

    assigned_tenants = models.ManyToManyField(
        "tenants.Tenant",
        related_name="admins",
        blank=True,
    )

    invitation_token_hash = models.CharField(max_length=64, blank=True, db_index=True)
    invitation_expires_at = models.DateTimeField(null=True, blank=True)
    reset_token_hash = models.CharField(max_length=64, blank=True, db_index=True)
    reset_expires_at = models.DateTimeField(null=True, blank=True)
    invited_by = models.CharField(max_length=32, null=True, blank=True)

    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"
