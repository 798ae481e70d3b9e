"""URL configuration for chart editing endpoints."""

from __future__ import annotations

from django.urls import path

from charts import views

app_name = "charts"

urlpatterns = [
    path("charts/<int:chart_id>/", views.chart_detail, name="detail"),
    path("charts/<int:chart_id>/kind/", views.change_kind, name="change_kind"),
    path("charts/<int:chart_id>/transition/", views.resolve_transition, name="resolve_transition"),
    path("charts/<int:chart_id>/datasets/", views.add_dataset, name="add_dataset"),
    path("charts/<int:chart_id>/datasets/remove/", views.remove_dataset, name="remove_dataset"),
    path("charts/<int:chart_id>/mode/", views.change_mode, name="change_mode"),
    path("charts/<int:chart_id>/groups/", views.manage_group, name="manage_group"),
    path("charts/<int:chart_id>/datasets/arrange/", views.arrange_dataset, name="arrange_dataset"),
    path("charts/<int:chart_id>/slices/rename/", views.rename_slice, name="rename_slice"),
]
