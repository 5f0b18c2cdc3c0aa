"""Catalog storage models."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore

from apps.attractions.domain.entities import AttractionStatus, AvailabilityType


STATUS_CHOICES = [(s.value, s.name.title()) for s in AttractionStatus]
AVAILABILITY_CHOICES = [(a.value, a.name.replace("_", " ").title()) for a in AvailabilityType]


class Destination(models.Model):
    id = models.CharField(primary_key=True, max_length=32)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    city = models.CharField(max_length=100, blank=True, db_index=True)
    country = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=AttractionStatus.ACTIVE.value)
    tenants = models.ManyToManyField("tenants.Tenant", related_name="destinations", blank=True)

    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Attraction(models.Model):
    """
    Bookable catalog item.

    pricing_options is an ordered JSON list of {id, name, price, description};
    prices are stored as strings to keep them exact.
    """

    id = models.CharField(primary_key=True, max_length=32)
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    currency = models.CharField(max_length=3, default="USD")
    pricing_options = models.JSONField(default=list)
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=AttractionStatus.DRAFT.value, db_index=True
    )
    destination = models.ForeignKey(
        Destination,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="attractions",
    )
    city = models.CharField(max_length=100, blank=True, db_index=True)
    meeting_point = models.CharField(max_length=500, blank=True)
    category = models.SlugField(max_length=100, blank=True, db_index=True)
    availability_type = models.CharField(
        max_length=20, choices=AVAILABILITY_CHOICES, default=AvailabilityType.TIME_SLOTS.value
    )
    tenants = models.ManyToManyField("tenants.Tenant", related_name="attractions", blank=True)

    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.title


class Category(models.Model):
    id = models.CharField(primary_key=True, max_length=32)
    slug = models.SlugField(max_length=100, unique=True)
    name = models.CharField(max_length=255)
    icon = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    parent_id = models.CharField(max_length=32, null=True, blank=True)
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)

    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["sort_order", "name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name
