"""
Catalog Services

Admin writes to the catalog:
- attractions: create, update, archive (catalog roles, tenant-scoped)
- destinations: create, update, archive (super admin)
- categories: create, update, deactivate (super admin)

Nothing in the catalog is ever deleted; archiving and deactivation are
status changes. Every write is a conditional update on the version.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, List
import logging

from django.utils.text import slugify  # type: ignore

from apps.access.context import RequestContext
from apps.access.engine import (
    CATALOG_EDITOR_ROLES,
    CATALOG_MANAGER_ROLES,
    ensure_role,
    ensure_shared_resource_access,
    ensure_super_admin,
    ensure_tenant_access,
)
from apps.attractions.domain.entities import (
    Attraction,
    AttractionPatch,
    AttractionStatus,
    AvailabilityType,
    Category,
    CategoryPatch,
    Destination,
    DestinationPatch,
    PricingOption,
)
from shared.application.uow import InMemoryUnitOfWork
from shared.domain.exceptions import AlreadyExists, DuplicateReference, NotFound, ValidationFailed

logger = logging.getLogger(__name__)


@dataclass
class CreateAttractionCommand:
    title: str
    tenant_ids: List[str]
    pricing_options: List[PricingOption] = field(default_factory=list)
    slug: str = ''
    currency: str = 'USD'
    status: AttractionStatus = AttractionStatus.DRAFT
    destination_id: str | None = None
    city: str = ''
    meeting_point: str = ''
    category: str = ''
    availability_type: AvailabilityType = AvailabilityType.TIME_SLOTS


@dataclass
class CreateDestinationCommand:
    name: str
    slug: str = ''
    city: str = ''
    country: str = ''
    tenant_ids: List[str] = field(default_factory=list)


@dataclass
class CreateCategoryCommand:
    name: str
    slug: str = ''
    icon: str = ''
    description: str = ''
    parent_id: str | None = None
    sort_order: int = 0


class CatalogService:
    def __init__(
        self,
        attraction_repo,
        destination_repo,
        category_repo,
        tenant_repo,
        uow_factory: Callable = InMemoryUnitOfWork,
    ):
        self.attraction_repo = attraction_repo
        self.destination_repo = destination_repo
        self.category_repo = category_repo
        self.tenant_repo = tenant_repo
        self.uow_factory = uow_factory

    # ----- helpers -----

    def _insert(self, repo, entity, kind: str):
        try:
            with self.uow_factory():
                repo.add(entity)
        except DuplicateReference:
            raise AlreadyExists(f"{kind} with this slug already exists")
        return entity

    def _save(self, repo, entity, patch, kind: str):
        try:
            with self.uow_factory():
                entity.version = repo.update(entity.id, entity.version, patch)
        except DuplicateReference:
            raise AlreadyExists(f"{kind} with this slug already exists")
        return entity

    @staticmethod
    def _slug(value: str, fallback: str) -> str:
        slug = slugify(value or fallback)
        if not slug:
            raise ValidationFailed("A slug could not be derived", {'slug': ['This field is required.']})
        return slug

    @staticmethod
    def _ensure_free_slug(repo, slug: str, kind: str, own_id: str | None = None):
        existing = repo.first({'slug': slug})
        if existing is not None and existing.id != own_id:
            raise AlreadyExists(f"{kind} with slug '{slug}' already exists")

    def _ensure_known_tenants(self, tenant_ids):
        unknown = [t for t in tenant_ids if self.tenant_repo.get(t) is None]
        if unknown:
            raise ValidationFailed("Unknown tenant", {'tenant_ids': unknown})

    # ----- attractions -----

    def create_attraction(self, context: RequestContext, command: CreateAttractionCommand) -> Attraction:
        identity = ensure_role(context.identity, CATALOG_EDITOR_ROLES, 'attractions.create')
        tenant_ids = sorted(set(command.tenant_ids))
        if not tenant_ids:
            raise ValidationFailed("An attraction needs at least one tenant", {'tenant_ids': ['This field is required.']})
        for tenant_id in tenant_ids:
            ensure_tenant_access(
                identity, tenant_id, 'attractions.create',
                'Cannot assign attraction to a tenant you do not manage',
            )
        self._ensure_known_tenants(tenant_ids)

        slug = self._slug(command.slug, command.title)
        self._ensure_free_slug(self.attraction_repo, slug, 'Attraction')
        try:
            attraction = Attraction(
                title=command.title,
                slug=slug,
                currency=command.currency,
                tenant_ids=tenant_ids,
                pricing_options=list(command.pricing_options),
                status=command.status,
                destination_id=command.destination_id,
                city=command.city,
                meeting_point=command.meeting_point,
                category=command.category,
                availability_type=command.availability_type,
            )
        except ValueError as e:
            raise ValidationFailed(str(e))

        self._insert(self.attraction_repo, attraction, 'Attraction')
        logger.info(f"Attraction {attraction.id} created by {identity.id} for tenants {tenant_ids}")
        return attraction

    def _reachable_attraction(self, context: RequestContext, attraction_id: str, roles, operation: str) -> Attraction:
        identity = ensure_role(context.identity, roles, operation)
        attraction = self.attraction_repo.get(attraction_id)
        if attraction is None:
            raise NotFound("Attraction not found")
        ensure_shared_resource_access(identity, attraction.tenant_ids, operation, 'Access denied to this attraction')
        return attraction

    def update_attraction(self, context: RequestContext, attraction_id: str, patch: AttractionPatch) -> Attraction:
        attraction = self._reachable_attraction(context, attraction_id, CATALOG_EDITOR_ROLES, 'attractions.update')

        if patch.tenant_ids is not None:
            tenant_ids = sorted(set(patch.tenant_ids))
            # adding or removing a tenant needs access to that tenant
            for tenant_id in sorted(set(tenant_ids) ^ set(attraction.tenant_ids)):
                ensure_tenant_access(
                    context.identity, tenant_id, 'attractions.update',
                    'Cannot assign attraction to a tenant you do not manage',
                )
            self._ensure_known_tenants(tenant_ids)
            patch = replace(patch, tenant_ids=tenant_ids)
        if patch.slug is not None:
            patch = replace(patch, slug=self._slug(patch.slug, attraction.title))
            self._ensure_free_slug(self.attraction_repo, patch.slug, 'Attraction', attraction.id)
        if patch.currency is not None:
            patch = replace(patch, currency=patch.currency.upper())

        if not patch:
            return attraction
        attraction.revise(patch)
        self._save(self.attraction_repo, attraction, patch, 'Attraction')
        logger.info(f"Attraction {attraction.id} updated: {sorted(patch.changes())}")
        return attraction

    def archive_attraction(self, context: RequestContext, attraction_id: str) -> Attraction:
        attraction = self._reachable_attraction(context, attraction_id, CATALOG_MANAGER_ROLES, 'attractions.archive')
        if attraction.status == AttractionStatus.ARCHIVED:
            return attraction

        patch = AttractionPatch(status=AttractionStatus.ARCHIVED)
        attraction.revise(patch)
        self._save(self.attraction_repo, attraction, patch, 'Attraction')
        logger.info(f"Attraction {attraction.id} archived by {context.user_id}")
        return attraction

    # ----- destinations -----

    def create_destination(self, context: RequestContext, command: CreateDestinationCommand) -> Destination:
        identity = ensure_super_admin(context.identity, 'destinations.create')
        tenant_ids = sorted(set(command.tenant_ids))
        self._ensure_known_tenants(tenant_ids)
        slug = self._slug(command.slug, command.name)
        self._ensure_free_slug(self.destination_repo, slug, 'Destination')

        destination = Destination(
            name=command.name,
            slug=slug,
            city=command.city,
            country=command.country,
            tenant_ids=tenant_ids,
        )
        self._insert(self.destination_repo, destination, 'Destination')
        logger.info(f"Destination {destination.id} created by {identity.id}")
        return destination

    def _destination(self, destination_id: str) -> Destination:
        destination = self.destination_repo.get(destination_id)
        if destination is None:
            raise NotFound("Destination not found")
        return destination

    def update_destination(self, context: RequestContext, destination_id: str, patch: DestinationPatch) -> Destination:
        ensure_super_admin(context.identity, 'destinations.update')
        destination = self._destination(destination_id)
        if patch.tenant_ids is not None:
            patch = replace(patch, tenant_ids=sorted(set(patch.tenant_ids)))
            self._ensure_known_tenants(patch.tenant_ids)
        if patch.slug is not None:
            patch = replace(patch, slug=self._slug(patch.slug, destination.name))
            self._ensure_free_slug(self.destination_repo, patch.slug, 'Destination', destination.id)
        if not patch:
            return destination

        for name, value in patch.changes().items():
            setattr(destination, name, value)
        return self._save(self.destination_repo, destination, patch, 'Destination')

    def archive_destination(self, context: RequestContext, destination_id: str) -> Destination:
        ensure_super_admin(context.identity, 'destinations.archive')
        destination = self._destination(destination_id)
        if destination.status == AttractionStatus.ARCHIVED:
            return destination
        destination.status = AttractionStatus.ARCHIVED
        self._save(self.destination_repo, destination, DestinationPatch(status=AttractionStatus.ARCHIVED), 'Destination')
        logger.info(f"Destination {destination.id} archived by {context.user_id}")
        return destination

    # ----- categories -----

    def create_category(self, context: RequestContext, command: CreateCategoryCommand) -> Category:
        ensure_super_admin(context.identity, 'categories.create')
        slug = self._slug(command.slug, command.name)
        self._ensure_free_slug(self.category_repo, slug, 'Category')

        category = Category(
            slug=slug,
            name=command.name,
            icon=command.icon,
            description=command.description,
            parent_id=command.parent_id,
            sort_order=command.sort_order,
        )
        return self._insert(self.category_repo, category, 'Category')

    def _category(self, category_id: str) -> Category:
        category = self.category_repo.get(category_id)
        if category is None:
            raise NotFound("Category not found")
        return category

    def update_category(self, context: RequestContext, category_id: str, patch: CategoryPatch) -> Category:
        ensure_super_admin(context.identity, 'categories.update')
        category = self._category(category_id)
        if patch.slug is not None and patch.slug != category.slug:
            # attractions refer to the category by slug
            if self.attraction_repo.count({'category': category.slug}):
                raise ValidationFailed("Cannot rename the slug of a category with attractions")
            patch = replace(patch, slug=self._slug(patch.slug, category.name))
            self._ensure_free_slug(self.category_repo, patch.slug, 'Category', category.id)
        if not patch:
            return category

        for name, value in patch.changes().items():
            setattr(category, name, value)
        return self._save(self.category_repo, category, patch, 'Category')

    def deactivate_category(self, context: RequestContext, category_id: str) -> Category:
        ensure_super_admin(context.identity, 'categories.deactivate')
        category = self._category(category_id)
        if self.attraction_repo.count({'category': category.slug}):
            raise ValidationFailed("Cannot delete category with attractions")
        if not category.is_active:
            return category

        category.is_active = False
        self._save(self.category_repo, category, CategoryPatch(is_active=False), 'Category')
        logger.info(f"Category {category.slug} deactivated by {context.user_id}")
        return category
