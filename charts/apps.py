"""Django app configuration for stored charts."""

from __future__ import annotations

from django.apps import AppConfig
from django.core.exceptions import ImproperlyConfigured


class ChartsConfig(AppConfig):
    """AppConfig for chart documents and their transition backups."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "charts"
    verbose_name = "Charts"

    def ready(self) -> None:
        """Fail fast when the editor settings name unknown chart kinds."""

        from charts.services import configured_mixable_kinds

        try:
            configured_mixable_kinds()
        except ValueError as exc:
            raise ImproperlyConfigured(f"CHART_EDITOR_MIXABLE_KINDS: {exc}") from exc
