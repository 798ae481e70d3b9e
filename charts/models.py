"""Database models for stored charts and their cross-family backups."""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models

from editor.codec import decode_datasets
from editor.kinds import CHART_KIND_LABELS, ChartKind, Family

CHART_KIND_CHOICES: tuple[tuple[str, str], ...] = tuple(
    (kind.value, CHART_KIND_LABELS[kind]) for kind in ChartKind
)
MODE_CHOICES: tuple[tuple[str, str], ...] = (("single", "Single"), ("grouped", "Grouped"))
UNIFORMITY_CHOICES: tuple[tuple[str, str], ...] = (("uniform", "Uniform"), ("mixed", "Mixed"))
FAMILY_CHOICES: tuple[tuple[str, str], ...] = tuple(
    (family.value, family.value.title()) for family in Family
)


class ChartDocument(models.Model):
    """A persisted chart: its kind, datasets and grouping state.

    Datasets are stored as the encoded payload produced by `editor.codec`.
    A cross-family kind request that has not been resolved yet is kept in
    `pending_kind` so the proposal survives between requests.
    """

    name = models.CharField(max_length=120, unique=True)
    kind = models.CharField(max_length=20, choices=CHART_KIND_CHOICES, default=ChartKind.bar.value)
    mode = models.CharField(max_length=10, choices=MODE_CHOICES, default="single")
    uniformity = models.CharField(max_length=10, choices=UNIFORMITY_CHOICES, default="uniform")
    active_group_id = models.CharField(max_length=40, default="default")
    groups = models.JSONField(default=list, blank=True)
    datasets = models.JSONField(default=list, blank=True)
    pending_kind = models.CharField(
        max_length=20,
        choices=CHART_KIND_CHOICES,
        blank=True,
        default="",
        help_text="Requested cross-family kind awaiting a resolution action.",
    )
    manual_form_open = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        """Return the chart name for display contexts."""

        return self.name


class ChartBackup(models.Model):
    """Most recent datasets of one family, taken when a chart left that family."""

    document = models.ForeignKey(ChartDocument, on_delete=models.CASCADE, related_name="backups")
    family = models.CharField(max_length=20, choices=FAMILY_CHOICES)
    datasets = models.JSONField(default=list)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["document", "family"], name="uniq_chart_backup_family")
        ]

    def __str__(self) -> str:
        """Return a concise display string."""

        return f"ChartBackup({self.document_id}, {self.family})"

    def clean(self) -> None:
        """Validate that the stored datasets decode and match the backup family.

        Raises:
            ValidationError: When the payload is malformed or holds datasets
                of the other family.
        """

        super().clean()
        try:
            datasets = decode_datasets(self.datasets)
        except ValueError as exc:
            raise ValidationError({"datasets": str(exc)}) from exc
        for dataset in datasets:
            if dataset.family.value != self.family:
                raise ValidationError(
                    {"datasets": f"Dataset {dataset.label!r} does not belong to the {self.family} family."}
                )
