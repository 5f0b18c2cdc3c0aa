"""Serializers for tenants."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.tenants.domain.entities import TenantStatus
from shared.infrastructure.serializers import EnumField, MoneyField


class PublicTenantSerializer(serializers.Serializer):
    id = serializers.CharField()
    slug = serializers.CharField()
    name = serializers.CharField()
    domain = serializers.CharField()
    custom_domain = serializers.CharField()
    status = EnumField(TenantStatus)
    settings = serializers.DictField()


class TenantSerializer(PublicTenantSerializer):
    reference_prefix = serializers.CharField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


def tenant_detail(detail) -> dict:
    return {
        **TenantSerializer(detail.tenant).data,
        'stats': {
            'total_attractions': detail.total_attractions,
            'total_bookings': detail.total_bookings,
            'total_revenue': MoneyField().to_representation(detail.total_revenue),
        },
    }


class TenantListQuerySerializer(serializers.Serializer):
    status = EnumField(TenantStatus, required=False)
    search = serializers.CharField(required=False, allow_blank=True, default='')


class TenantStatsQuerySerializer(serializers.Serializer):
    period = serializers.CharField(required=False, default='30d')


class TenantUpdateSerializer(serializers.Serializer):
    slug = serializers.SlugField(max_length=100, required=False)
    name = serializers.CharField(max_length=255, required=False)
    domain = serializers.CharField(max_length=255, required=False, allow_blank=True)
    custom_domain = serializers.CharField(max_length=255, required=False, allow_blank=True)
    status = EnumField(TenantStatus, required=False)
    reference_prefix = serializers.CharField(max_length=10, required=False, allow_blank=True)
    settings = serializers.DictField(required=False)


class TenantCreateSerializer(TenantUpdateSerializer):
    slug = serializers.SlugField(max_length=100)
    name = serializers.CharField(max_length=255)
    domain = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    custom_domain = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    reference_prefix = serializers.CharField(max_length=10, required=False, allow_blank=True, default='')
    settings = serializers.DictField(required=False, default=dict)
