"""
URL configuration for Vitrine example project.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("vitrine.api.urls")),
]
