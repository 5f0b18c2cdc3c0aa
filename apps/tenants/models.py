"""Tenant storage model."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore

from apps.tenants.domain.entities import TenantStatus


class Tenant(models.Model):
    """Brand/storefront; presentation settings are kept as opaque JSON."""

    STATUS_CHOICES = [(s.value, s.name.replace('_', ' ').title()) for s in TenantStatus]

    id = models.CharField(primary_key=True, max_length=32)
    slug = models.SlugField(max_length=100, unique=True)
    name = models.CharField(max_length=255, blank=True)
    domain = models.CharField(max_length=255, blank=True, db_index=True)
    custom_domain = models.CharField(max_length=255, blank=True, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=TenantStatus.ACTIVE.value, db_index=True)
    reference_prefix = models.CharField(max_length=10, blank=True)
    settings = models.JSONField(default=dict, blank=True)

    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name or self.slug
