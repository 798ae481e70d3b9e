"""Create chart documents and per-family backups."""

from __future__ import annotations

import django.db.models.deletion
from django.db import migrations, models

KIND_CHOICES = [
    ("bar", "Bar"),
    ("horizontalBar", "Horizontal Bar"),
    ("stackedBar", "Stacked Bar"),
    ("line", "Line"),
    ("area", "Area"),
    ("pie", "Pie"),
    ("doughnut", "Doughnut"),
    ("polarArea", "Polar Area"),
    ("radar", "Radar"),
    ("scatter", "Scatter"),
    ("bubble", "Bubble"),
]


class Migration(migrations.Migration):
    """Initial schema for the charts app."""

    initial = True

    dependencies: list[tuple[str, str]] = []

    operations = [
        migrations.CreateModel(
            name="ChartDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120, unique=True)),
                ("kind", models.CharField(choices=KIND_CHOICES, default="bar", max_length=20)),
                (
                    "mode",
                    models.CharField(
                        choices=[("single", "Single"), ("grouped", "Grouped")], default="single", max_length=10
                    ),
                ),
                (
                    "uniformity",
                    models.CharField(
                        choices=[("uniform", "Uniform"), ("mixed", "Mixed")], default="uniform", max_length=10
                    ),
                ),
                ("active_group_id", models.CharField(default="default", max_length=40)),
                ("groups", models.JSONField(blank=True, default=list)),
                ("datasets", models.JSONField(blank=True, default=list)),
                (
                    "pending_kind",
                    models.CharField(
                        blank=True,
                        choices=KIND_CHOICES,
                        default="",
                        help_text="Requested cross-family kind awaiting a resolution action.",
                        max_length=20,
                    ),
                ),
                ("manual_form_open", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="ChartBackup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "family",
                    models.CharField(
                        choices=[("categorical", "Categorical"), ("coordinate", "Coordinate")], max_length=20
                    ),
                ),
                ("datasets", models.JSONField(default=list)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "document",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="backups",
                        to="charts.chartdocument",
                    ),
                ),
            ],
        ),
        migrations.AddConstraint(
            model_name="chartbackup",
            constraint=models.UniqueConstraint(fields=("document", "family"), name="uniq_chart_backup_family"),
        ),
    ]
