"""
URL configuration for the storefront backend.

The storefront and admin panel talk to a single generic endpoint,
/api/data, which reads and writes named buckets in the key-value store.
"""
from django.urls import path, include

urlpatterns = [
    path('api/', include('backend.core.urls')),
]
