"""API views for the catalog and homepage statistics."""

from __future__ import annotations

from rest_framework import status  # type: ignore

from shared.infrastructure.api import paginated, success
from shared.infrastructure.views import TENANT_STRICT, ContextAPIView

from .application.services import CreateAttractionCommand, CreateCategoryCommand, CreateDestinationCommand
from .domain.entities import AttractionPatch, CategoryPatch, DestinationPatch
from .serializers import (
    AdminAttractionQuerySerializer,
    AdminAttractionSerializer,
    AdminDestinationSerializer,
    AttractionCreateSerializer,
    AttractionListQuerySerializer,
    AttractionSerializer,
    AttractionUpdateSerializer,
    AvailabilityQuerySerializer,
    CategoryCreateSerializer,
    CategorySerializer,
    CategoryUpdateSerializer,
    DayAvailabilitySerializer,
    DestinationCreateSerializer,
    DestinationSerializer,
    DestinationUpdateSerializer,
    category_with_count,
)


class AttractionListView(ContextAPIView):
    tenant_mode = TENANT_STRICT

    def get(self, request):  # type: ignore
        params = self.validated(AttractionListQuerySerializer, request.query_params)
        page = self.container.catalog.list_attractions(
            self.request_context(request),
            city=params['city'].strip(),
            search=params['search'].strip(),
            category=params['category'],
            page=self.page_request(request, order_by='title'),
        )
        return paginated(page, AttractionSerializer(page.items, many=True).data)


class AttractionDetailView(ContextAPIView):
    tenant_mode = TENANT_STRICT

    def get(self, request, id_or_slug: str):  # type: ignore
        attraction = self.container.catalog.get_attraction(self.request_context(request), id_or_slug)
        return success(AttractionSerializer(attraction).data)


class AttractionAvailabilityView(ContextAPIView):
    tenant_mode = TENANT_STRICT

    def get(self, request, id_or_slug: str):  # type: ignore
        params = self.validated(AvailabilityQuerySerializer, request.query_params)
        days = self.container.catalog.availability(
            self.request_context(request), id_or_slug, start=params.get('date'), month=params['month'],
        )
        return success({'availability': DayAvailabilitySerializer(days, many=True).data})


class AdminAttractionListView(ContextAPIView):
    """GET lists attractions within the admin scope; POST creates one."""

    def get(self, request):  # type: ignore
        params = self.validated(AdminAttractionQuerySerializer, request.query_params)
        page = self.container.catalog.admin_attractions(
            self.request_context(request),
            status=params.get('status'),
            page=self.page_request(request),
        )
        return paginated(page, AdminAttractionSerializer(page.items, many=True).data)

    def post(self, request):  # type: ignore
        data = self.validated(AttractionCreateSerializer, request.data)
        attraction = self.container.catalog_admin.create_attraction(
            self.request_context(request), CreateAttractionCommand(**data),
        )
        return success(
            AdminAttractionSerializer(attraction).data,
            message="Attraction created successfully",
            status_code=status.HTTP_201_CREATED,
        )


class AdminAttractionDetailView(ContextAPIView):
    tenant_mode = None

    def get(self, request, attraction_id: str):  # type: ignore
        attraction = self.container.catalog.admin_get_attraction(self.request_context(request), attraction_id)
        return success(AdminAttractionSerializer(attraction).data)

    def patch(self, request, attraction_id: str):  # type: ignore
        data = self.validated(AttractionUpdateSerializer, request.data)
        attraction = self.container.catalog_admin.update_attraction(
            self.request_context(request), attraction_id, AttractionPatch(**data),
        )
        return success(AdminAttractionSerializer(attraction).data, message="Attraction updated successfully")

    def delete(self, request, attraction_id: str):  # type: ignore
        self.container.catalog_admin.archive_attraction(self.request_context(request), attraction_id)
        return success(None, message="Attraction archived successfully")


class DestinationListView(ContextAPIView):
    tenant_mode = TENANT_STRICT

    def get(self, request):  # type: ignore
        page = self.container.catalog.list_destinations(
            self.request_context(request), self.page_request(request, order_by='name'),
        )
        return paginated(page, DestinationSerializer(page.items, many=True).data)


class AdminDestinationListView(ContextAPIView):
    def get(self, request):  # type: ignore
        page = self.container.catalog.admin_destinations(
            self.request_context(request), self.page_request(request, order_by='name'),
        )
        return paginated(page, AdminDestinationSerializer(page.items, many=True).data)

    def post(self, request):  # type: ignore
        data = self.validated(DestinationCreateSerializer, request.data)
        destination = self.container.catalog_admin.create_destination(
            self.request_context(request), CreateDestinationCommand(**data),
        )
        return success(
            AdminDestinationSerializer(destination).data,
            message="Destination created successfully",
            status_code=status.HTTP_201_CREATED,
        )


class AdminDestinationDetailView(ContextAPIView):
    tenant_mode = None

    def patch(self, request, destination_id: str):  # type: ignore
        data = self.validated(DestinationUpdateSerializer, request.data)
        destination = self.container.catalog_admin.update_destination(
            self.request_context(request), destination_id, DestinationPatch(**data),
        )
        return success(AdminDestinationSerializer(destination).data, message="Destination updated successfully")

    def delete(self, request, destination_id: str):  # type: ignore
        self.container.catalog_admin.archive_destination(self.request_context(request), destination_id)
        return success(None, message="Destination archived successfully")


class CategoryListView(ContextAPIView):
    def get(self, request):  # type: ignore
        counted = self.container.catalog.list_categories(self.request_context(request))
        return success([category_with_count(c) for c in counted])


class CategoryDetailView(ContextAPIView):
    def get(self, request, slug: str):  # type: ignore
        counted = self.container.catalog.get_category(self.request_context(request), slug)
        return success(category_with_count(counted))


class AdminCategoryListView(ContextAPIView):
    tenant_mode = None

    def post(self, request):  # type: ignore
        data = self.validated(CategoryCreateSerializer, request.data)
        category = self.container.catalog_admin.create_category(
            self.request_context(request), CreateCategoryCommand(**data),
        )
        return success(
            CategorySerializer(category).data,
            message="Category created successfully",
            status_code=status.HTTP_201_CREATED,
        )


class AdminCategoryDetailView(ContextAPIView):
    tenant_mode = None

    def patch(self, request, category_id: str):  # type: ignore
        data = self.validated(CategoryUpdateSerializer, request.data)
        category = self.container.catalog_admin.update_category(
            self.request_context(request), category_id, CategoryPatch(**data),
        )
        return success(CategorySerializer(category).data, message="Category updated successfully")

    def delete(self, request, category_id: str):  # type: ignore
        self.container.catalog_admin.deactivate_category(self.request_context(request), category_id)
        return success(None, message="Category deleted successfully")


class HomepageStatsView(ContextAPIView):
    tenant_mode = None

    def get(self, request):  # type: ignore
        return success(self.container.catalog.homepage_stats().to_dict())
