"""Serializers for user accounts."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.domain.entities import Role, UserStatus
from shared.infrastructure.serializers import EnumField

from .models import PHONE_VALIDATOR


class UserSerializer(serializers.Serializer):
    """Public representation of an account; hashes never leave the server."""

    id = serializers.CharField()
    email = serializers.EmailField()
    role = EnumField(Role)
    status = EnumField(UserStatus)
    first_name = serializers.CharField()
    last_name = serializers.CharField()
    full_name = serializers.CharField()
    phone = serializers.CharField()
    assigned_tenants = serializers.ListField(child=serializers.CharField())
    created_at = serializers.DateTimeField()


class ProfileUpdateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, validators=[PHONE_VALIDATOR])


class InviteUserSerializer(serializers.Serializer):
    email = serializers.EmailField()
    role = EnumField(Role)
    tenant_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    first_name = serializers.CharField(required=False, allow_blank=True, default='')
    last_name = serializers.CharField(required=False, allow_blank=True, default='')


class UserListQuerySerializer(serializers.Serializer):
    role = EnumField(Role, required=False)
    status = EnumField(UserStatus, required=False)
