"""URL declarations for the users app."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import MeView, UserCollectionView, UserDeactivateView

urlpatterns = [
    path('', UserCollectionView.as_view(), name='user-list'),
    path('me/', MeView.as_view(), name='user-me'),
    path('<str:user_id>/deactivate/', UserDeactivateView.as_view(), name='user-deactivate'),
]
