"""
URL configuration for events_app.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import EventViewSet

# Create router for viewsets
router = DefaultRouter()
router.register(r'events', EventViewSet)

urlpatterns = [
    path('', include(router.urls)),
]
