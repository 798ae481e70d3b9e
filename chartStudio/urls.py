"""URL configuration for chartStudio."""

from __future__ import annotations

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("", include("charts.urls")),
    path("admin/", admin.site.urls),
]
