"""Admin registrations for stored charts."""

from __future__ import annotations

from django.contrib import admin

from charts.models import ChartBackup, ChartDocument


class ChartBackupInline(admin.TabularInline):
    """Read-only view of a chart's per-family backups."""

    model = ChartBackup
    extra = 0
    readonly_fields = ("family", "datasets", "updated_at")
    can_delete = True


@admin.register(ChartDocument)
class ChartDocumentAdmin(admin.ModelAdmin):
    """Admin for chart documents."""

    list_display = ("name", "kind", "mode", "uniformity", "pending_kind", "updated_at")
    list_filter = ("kind", "mode", "uniformity")
    search_fields = ("name",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [ChartBackupInline]


@admin.register(ChartBackup)
class ChartBackupAdmin(admin.ModelAdmin):
    """Admin for per-family chart backups."""

    list_display = ("document", "family", "updated_at")
    list_filter = ("family",)
