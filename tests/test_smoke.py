"""Minimal smoke tests for initial scaffolding."""

from __future__ import annotations

import pytest


@pytest.mark.unit
def test_editor_imports() -> None:
    """Import the editor package and verify the public entry point exists."""

    from editor import ChartEditingSession

    assert callable(ChartEditingSession)


@pytest.mark.unit
def test_editor_does_not_import_django() -> None:
    """The editing core stays free of Django imports."""

    from pathlib import Path

    import editor

    package_dir = Path(editor.__file__).parent
    for module in package_dir.glob("*.py"):
        assert "django" not in module.read_text(encoding="utf-8"), module.name


@pytest.mark.integration
def test_django_project_loads() -> None:
    """Import and initialize Django to verify settings are valid."""

    import os

    import django
    from django.conf import settings

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "chartStudio.settings")
    django.setup()
    assert "charts.apps.ChartsConfig" in settings.INSTALLED_APPS
    assert settings.CHART_EDITOR_MIXABLE_KINDS == ["bar", "line", "area"]
