"""Review storage model."""

from __future__ import annotations

from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore

from apps.reviews.domain.entities import ReviewStatus


class Review(models.Model):
    """A guest's rating and text for an attraction; shown once approved."""

    STATUS_CHOICES = [(s.value, s.name.title()) for s in ReviewStatus]

    id = models.CharField(primary_key=True, max_length=32)
    attraction = models.ForeignKey("attractions.Attraction", on_delete=models.CASCADE, related_name="reviews")
    tenants = models.ManyToManyField("tenants.Tenant", related_name="reviews", blank=True)
    user_id = models.CharField(max_length=32, null=True, blank=True, db_index=True)
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    title = models.CharField(max_length=255)
    content = models.TextField()
    author = models.CharField(max_length=255)
    country = models.CharField(max_length=100, blank=True)
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=ReviewStatus.PENDING.value, db_index=True
    )
    verified = models.BooleanField(default=False)

    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["attraction", "status", "-created_at"]),
            models.Index(fields=["rating"]),
        ]

    def __str__(self) -> str:
        return f"Review by {self.author} for attraction {self.attraction_id} (Rating: {self.rating})"
