"""URL routing for tenants."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import (
    PublicTenantDetailView,
    PublicTenantListView,
    TenantDetailView,
    TenantListView,
    TenantSettingsView,
    TenantStatsView,
)

urlpatterns = [
    path("", TenantListView.as_view(), name="tenant-list"),
    path("public/", PublicTenantListView.as_view(), name="tenant-public-list"),
    path("public/<str:id_or_slug>/", PublicTenantDetailView.as_view(), name="tenant-public-detail"),
    path("<str:tenant_id>/", TenantDetailView.as_view(), name="tenant-detail"),
    path("<str:tenant_id>/settings/", TenantSettingsView.as_view(), name="tenant-settings"),
    path("<str:tenant_id>/stats/", TenantStatsView.as_view(), name="tenant-stats"),
]
