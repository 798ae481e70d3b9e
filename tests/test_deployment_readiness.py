"""Deployment readiness tests for production settings."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

pytestmark = pytest.mark.integration

_SECRET = "tests-only-secret-key-please-replace-with-a-long-random-value-0123456789"


def _repo_root() -> Path:
    """Return the repository root directory."""

    return Path(__file__).resolve().parent.parent


def _run_manage_check_deploy(*, env: dict[str, str]) -> subprocess.CompletedProcess[str]:
    """Run `manage.py check --deploy` in a subprocess.

    Args:
        env: Environment variables to merge into the current environment.

    Returns:
        Completed process result with captured output.
    """

    merged_env = os.environ.copy()
    merged_env.update(env)
    merged_env.setdefault("DJANGO_SETTINGS_MODULE", "chartStudio.settings")
    return subprocess.run(
        [
            sys.executable,
            "manage.py",
            "check",
            "--deploy",
            "--fail-level",
            "WARNING",
        ],
        cwd=_repo_root(),
        env=merged_env,
        check=False,
        capture_output=True,
        text=True,
    )


def test_manage_check_deploy_passes_with_required_env(tmp_path: Path) -> None:
    """Verify production settings satisfy Django's deployment checks."""

    result = _run_manage_check_deploy(
        env={
            "DJANGO_DEBUG": "0",
            "DJANGO_SECRET_KEY": _SECRET,
            "DJANGO_ALLOWED_HOSTS": "example.com",
            "DJANGO_CSRF_TRUSTED_ORIGINS": "https://example.com",
            "DATABASE_URL": f"sqlite:///{tmp_path / 'db.sqlite3'}",
        }
    )
    assert result.returncode == 0, result.stdout + "\n" + result.stderr


def test_manage_check_deploy_requires_secret_key(tmp_path: Path) -> None:
    """Ensure production settings refuse to boot without a non-default secret key."""

    env = {
        "DJANGO_DEBUG": "0",
        "DJANGO_ALLOWED_HOSTS": "example.com",
        "DATABASE_URL": f"sqlite:///{tmp_path / 'db.sqlite3'}",
    }
    if "DJANGO_SECRET_KEY" in os.environ:
        env["DJANGO_SECRET_KEY"] = ""
    result = _run_manage_check_deploy(env=env)
    assert result.returncode != 0
    assert "DJANGO_SECRET_KEY is required" in result.stderr


def test_manage_check_deploy_rejects_unknown_mixable_kinds(tmp_path: Path) -> None:
    """Fail fast when the mixable chart kinds setting names an unknown kind."""

    result = _run_manage_check_deploy(
        env={
            "DJANGO_DEBUG": "0",
            "DJANGO_SECRET_KEY": _SECRET,
            "DJANGO_ALLOWED_HOSTS": "example.com",
            "DATABASE_URL": f"sqlite:///{tmp_path / 'db.sqlite3'}",
            "CHART_EDITOR_MIXABLE_KINDS": "bar,sankey",
        }
    )
    assert result.returncode != 0
    assert "CHART_EDITOR_MIXABLE_KINDS" in result.stdout + result.stderr
