"""Serializers for the catalog."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.attractions.domain.entities import AttractionStatus, AvailabilityType, PricingOption
from shared.infrastructure.serializers import EnumField, MoneyField


class PricingOptionSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    price = MoneyField()
    description = serializers.CharField()


class AttractionSerializer(serializers.Serializer):
    id = serializers.CharField()
    title = serializers.CharField()
    slug = serializers.CharField()
    currency = serializers.CharField()
    city = serializers.CharField()
    meeting_point = serializers.CharField()
    destination_id = serializers.CharField(allow_null=True)
    category = serializers.CharField()
    availability_type = EnumField(AvailabilityType)
    status = EnumField(AttractionStatus)
    pricing_options = PricingOptionSerializer(many=True)


class AdminAttractionSerializer(AttractionSerializer):
    tenant_ids = serializers.ListField(child=serializers.CharField())
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class DestinationSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    slug = serializers.CharField()
    city = serializers.CharField()
    country = serializers.CharField()
    status = EnumField(AttractionStatus)


class AdminDestinationSerializer(DestinationSerializer):
    tenant_ids = serializers.ListField(child=serializers.CharField())


class CategorySerializer(serializers.Serializer):
    id = serializers.CharField()
    slug = serializers.CharField()
    name = serializers.CharField()
    icon = serializers.CharField()
    description = serializers.CharField()
    parent_id = serializers.CharField(allow_null=True)
    sort_order = serializers.IntegerField()
    is_active = serializers.BooleanField()


def category_with_count(counted) -> dict:
    return {**CategorySerializer(counted.category).data, 'count': counted.count}


class TimeSlotSerializer(serializers.Serializer):
    time = serializers.CharField()
    available = serializers.BooleanField()
    spots_left = serializers.IntegerField()


class DayAvailabilitySerializer(serializers.Serializer):
    date = serializers.DateField()
    available = serializers.BooleanField()
    time_slots = TimeSlotSerializer(many=True)


# ----- query strings -----

class AttractionListQuerySerializer(serializers.Serializer):
    city = serializers.CharField(required=False, allow_blank=True, default='')
    search = serializers.CharField(required=False, allow_blank=True, default='')
    category = serializers.SlugField(required=False, allow_blank=True, default='')


class AdminAttractionQuerySerializer(serializers.Serializer):
    status = EnumField(AttractionStatus, required=False)


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    month = serializers.RegexField(r'^\d{4}-\d{2}$', required=False, allow_blank=True, default='')


# ----- writes -----

class PricingOptionInputSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    price = MoneyField(min_value=0)
    description = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        return PricingOption(**super().to_internal_value(data))


class AttractionUpdateSerializer(serializers.Serializer):
    """Every field optional; only the fields sent are changed."""

    title = serializers.CharField(max_length=255, required=False)
    slug = serializers.SlugField(max_length=255, required=False)
    currency = serializers.CharField(min_length=3, max_length=3, required=False)
    tenant_ids = serializers.ListField(child=serializers.CharField(), required=False)
    pricing_options = PricingOptionInputSerializer(many=True, required=False)
    status = EnumField(AttractionStatus, required=False)
    destination_id = serializers.CharField(required=False)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    meeting_point = serializers.CharField(max_length=500, required=False, allow_blank=True)
    category = serializers.SlugField(max_length=100, required=False, allow_blank=True)
    availability_type = EnumField(AvailabilityType, required=False)


class AttractionCreateSerializer(AttractionUpdateSerializer):
    title = serializers.CharField(max_length=255)
    tenant_ids = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    pricing_options = PricingOptionInputSerializer(many=True, allow_empty=False)
    slug = serializers.SlugField(max_length=255, required=False, allow_blank=True, default='')


class DestinationUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    slug = serializers.SlugField(max_length=255, required=False)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)
    tenant_ids = serializers.ListField(child=serializers.CharField(), required=False)
    status = EnumField(AttractionStatus, required=False)


class DestinationCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    slug = serializers.SlugField(max_length=255, required=False, allow_blank=True, default='')
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    country = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    tenant_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class CategoryUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    slug = serializers.SlugField(max_length=100, required=False)
    icon = serializers.CharField(max_length=100, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    parent_id = serializers.CharField(required=False)
    sort_order = serializers.IntegerField(required=False)
    is_active = serializers.BooleanField(required=False)


class CategoryCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    slug = serializers.SlugField(max_length=100, required=False, allow_blank=True, default='')
    icon = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_blank=True, default='')
    parent_id = serializers.CharField(required=False, allow_null=True, default=None)
    sort_order = serializers.IntegerField(required=False, default=0)
