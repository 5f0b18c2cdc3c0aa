"""Serializers for reviews.

Rating bounds are checked here and again by the aggregate. The author's
account, when there is one, comes from the request, never the body.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.reviews.domain.entities import ReviewStatus
from shared.infrastructure.serializers import EnumField


class ReviewSerializer(serializers.Serializer):
    id = serializers.CharField()
    attraction_id = serializers.CharField()
    rating = serializers.IntegerField()
    title = serializers.CharField()
    content = serializers.CharField()
    author = serializers.CharField()
    country = serializers.CharField()
    verified = serializers.BooleanField()
    created_at = serializers.DateTimeField()


class AdminReviewSerializer(ReviewSerializer):
    status = EnumField(ReviewStatus)
    tenant_ids = serializers.ListField(child=serializers.CharField())
    user_id = serializers.CharField(allow_null=True)


class ReviewCreateSerializer(serializers.Serializer):
    attraction_id = serializers.CharField()
    rating = serializers.IntegerField(min_value=1, max_value=5)
    title = serializers.CharField(max_length=255)
    content = serializers.CharField()
    author = serializers.CharField(max_length=255)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')


class RecentReviewsQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, default=6)


class ModerationQuerySerializer(serializers.Serializer):
    status = EnumField(ReviewStatus, required=False)
