"""Django store for reviews."""

from __future__ import annotations

from apps.reviews.domain.entities import Review, ReviewStatus
from apps.reviews.models import Review as ReviewModel
from shared.infrastructure.django_repository import DjangoRepository


class DjangoReviewRepository(DjangoRepository[Review]):
    model = ReviewModel
    field_map = {
        'tenant_ids__contains': 'tenants__id',
        'tenant_ids__overlap': 'tenants__id__in',
    }
    relation_fields = {'tenant_ids': 'tenants'}
    distinct = True

    def base_queryset(self):
        return ReviewModel.objects.prefetch_related('tenants')

    def to_domain(self, row: ReviewModel) -> Review:
        return Review(
            id=row.id,
            attraction_id=row.attraction_id,
            tenant_ids=sorted(t.id for t in row.tenants.all()),
            user_id=row.user_id,
            rating=row.rating,
            title=row.title,
            content=row.content,
            author=row.author,
            country=row.country,
            status=ReviewStatus(row.status),
            verified=row.verified,
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_fields(self, entity: Review) -> dict:
        return {
            'id': entity.id,
            'attraction_id': entity.attraction_id,
            'user_id': entity.user_id,
            'rating': entity.rating,
            'title': entity.title,
            'content': entity.content,
            'author': entity.author,
            'country': entity.country,
            'status': entity.status.value,
            'verified': entity.verified,
            'version': entity.version,
            'created_at': entity.created_at,
            'updated_at': entity.updated_at,
        }
