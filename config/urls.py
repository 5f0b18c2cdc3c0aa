"""URL configuration for the attractions marketplace.

Every application router is mounted under the versioned API prefix.
"""
from django.urls import path, include  # type: ignore

from apps.attractions.urls import (
    attraction_urlpatterns,
    category_urlpatterns,
    destination_urlpatterns,
    stats_urlpatterns,
)

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/tenants/', include('apps.tenants.urls')),
    path('api/v1/attractions/', include(attraction_urlpatterns)),
    path('api/v1/destinations/', include(destination_urlpatterns)),
    path('api/v1/categories/', include(category_urlpatterns)),
    path('api/v1/reviews/', include('apps.reviews.urls')),
    path('api/v1/stats/', include(stats_urlpatterns)),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/payments/', include('apps.payments.urls')),
]
