"""Django stores for the catalog."""

from __future__ import annotations

from decimal import Decimal

from apps.attractions.domain.entities import (
    Attraction,
    AttractionStatus,
    AvailabilityType,
    Category,
    Destination,
    PricingOption,
)
from apps.attractions.models import Attraction as AttractionModel
from apps.attractions.models import Category as CategoryModel
from apps.attractions.models import Destination as DestinationModel
from shared.infrastructure.django_repository import DjangoRepository

TENANT_LOOKUPS = {
    'tenant_ids__contains': 'tenants__id',
    'tenant_ids__overlap': 'tenants__id__in',
}


def options_to_json(options) -> list:
    return [
        {
            'id': option.id,
            'name': option.name,
            'price': str(option.price),
            'description': option.description,
        }
        for option in options
    ]


class DjangoAttractionRepository(DjangoRepository[Attraction]):
    model = AttractionModel
    field_map = TENANT_LOOKUPS
    relation_fields = {'tenant_ids': 'tenants'}
    distinct = True

    def base_queryset(self):
        return AttractionModel.objects.prefetch_related('tenants')

    def to_domain(self, row: AttractionModel) -> Attraction:
        return Attraction(
            id=row.id,
            title=row.title,
            slug=row.slug,
            currency=row.currency,
            tenant_ids=sorted(t.id for t in row.tenants.all()),
            pricing_options=[
                PricingOption(
                    id=option['id'],
                    name=option['name'],
                    price=Decimal(str(option['price'])),
                    description=option.get('description', ''),
                )
                for option in row.pricing_options or []
            ],
            status=AttractionStatus(row.status),
            destination_id=row.destination_id,
            city=row.city,
            meeting_point=row.meeting_point,
            category=row.category,
            availability_type=AvailabilityType(row.availability_type),
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_fields(self, entity: Attraction) -> dict:
        return {
            'id': entity.id,
            'title': entity.title,
            'slug': entity.slug or entity.id,
            'currency': entity.currency,
            'pricing_options': options_to_json(entity.pricing_options),
            'status': entity.status.value,
            'destination_id': entity.destination_id,
            'city': entity.city,
            'meeting_point': entity.meeting_point,
            'category': entity.category,
            'availability_type': entity.availability_type.value,
            'version': entity.version,
            'created_at': entity.created_at,
            'updated_at': entity.updated_at,
        }

    def patch_fields(self, changes: dict) -> dict:
        fields = super().patch_fields(changes)
        if 'pricing_options' in changes:
            fields['pricing_options'] = options_to_json(changes['pricing_options'])
        return fields


class DjangoDestinationRepository(DjangoRepository[Destination]):
    model = DestinationModel
    field_map = TENANT_LOOKUPS
    relation_fields = {'tenant_ids': 'tenants'}
    distinct = True

    def base_queryset(self):
        return DestinationModel.objects.prefetch_related('tenants')

    def to_domain(self, row: DestinationModel) -> Destination:
        return Destination(
            id=row.id,
            name=row.name,
            slug=row.slug,
            city=row.city,
            country=row.country,
            tenant_ids=sorted(t.id for t in row.tenants.all()),
            status=AttractionStatus(row.status),
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_fields(self, entity: Destination) -> dict:
        return {
            'id': entity.id,
            'name': entity.name,
            'slug': entity.slug or entity.id,
            'city': entity.city,
            'country': entity.country,
            'status': entity.status.value,
            'version': entity.version,
            'created_at': entity.created_at,
            'updated_at': entity.updated_at,
        }


class DjangoCategoryRepository(DjangoRepository[Category]):
    model = CategoryModel

    def to_domain(self, row: CategoryModel) -> Category:
        return Category(
            id=row.id,
            slug=row.slug,
            name=row.name,
            icon=row.icon,
            description=row.description,
            parent_id=row.parent_id,
            sort_order=row.sort_order,
            is_active=row.is_active,
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_fields(self, entity: Category) -> dict:
        return {
            'id': entity.id,
            'slug': entity.slug,
            'name': entity.name,
            'icon': entity.icon,
            'description': entity.description,
            'parent_id': entity.parent_id,
            'sort_order': entity.sort_order,
            'is_active': entity.is_active,
            'version': entity.version,
            'created_at': entity.created_at,
            'updated_at': entity.updated_at,
        }
