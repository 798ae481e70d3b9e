"""Forms validating chart editing intents."""

from __future__ import annotations

from django import forms

from charts.models import CHART_KIND_CHOICES, MODE_CHOICES, UNIFORMITY_CHOICES
from editor.kinds import ChartKind, parse_chart_kind

TRANSITION_ACTION_CHOICES: tuple[tuple[str, str], ...] = (
    ("restore", "Restore previous data"),
    ("load_sample", "Load sample data"),
    ("quick_transform", "Quick transform"),
    ("create_manually", "Create manually"),
    ("complete_manual", "Save manual dataset"),
    ("cancel_manual", "Close manual form"),
    ("cancel", "Cancel"),
)


class ChartKindForm(forms.Form):
    """Validate a chart kind request."""

    kind = forms.ChoiceField(choices=CHART_KIND_CHOICES)

    def cleaned_kind(self) -> ChartKind:
        return parse_chart_kind(self.cleaned_data["kind"])


class TransitionActionForm(forms.Form):
    """Validate a transition resolution action and its manual-form fields."""

    action = forms.ChoiceField(choices=TRANSITION_ACTION_CHOICES)
    label = forms.CharField(required=False, max_length=120)
    color = forms.CharField(required=False, max_length=40)
    rows = forms.JSONField(required=False)

    def clean(self) -> dict:
        """Require a label and rows when completing the manual form."""

        cleaned = super().clean()
        if cleaned.get("action") == "complete_manual":
            if not (cleaned.get("label") or "").strip():
                self.add_error("label", "A dataset name is required.")
            rows = cleaned.get("rows")
            if not isinstance(rows, list) or not rows:
                self.add_error("rows", "At least one row is required.")
            elif any(not isinstance(row, dict) for row in rows):
                self.add_error("rows", "Each row must be an object.")
        return cleaned


class DatasetForm(forms.Form):
    """Validate a dataset submitted as a label plus raw rows."""

    label = forms.CharField(max_length=120)
    chart_type = forms.ChoiceField(choices=CHART_KIND_CHOICES, required=False)
    color = forms.CharField(required=False, max_length=40)
    rows = forms.JSONField()

    def clean_rows(self) -> list:
        rows = self.cleaned_data["rows"]
        if not isinstance(rows, list) or not rows:
            raise forms.ValidationError("Rows must be a non-empty list.")
        if any(not isinstance(row, dict) for row in rows):
            raise forms.ValidationError("Each row must be an object.")
        return rows

    def cleaned_chart_type(self) -> ChartKind | None:
        raw = self.cleaned_data.get("chart_type")
        return parse_chart_kind(raw) if raw else None


class DatasetRemoveForm(forms.Form):
    """Validate a dataset removal."""

    label = forms.CharField(max_length=120)


class ModeForm(forms.Form):
    """Validate grouping mode, uniformity and group selection changes."""

    mode = forms.ChoiceField(choices=MODE_CHOICES, required=False)
    uniformity = forms.ChoiceField(choices=UNIFORMITY_CHOICES, required=False)
    group_id = forms.CharField(required=False, max_length=40)
    assignments = forms.JSONField(required=False)

    def clean_assignments(self) -> dict[str, str] | None:
        assignments = self.cleaned_data.get("assignments")
        if assignments in (None, ""):
            return None
        if not isinstance(assignments, dict):
            raise forms.ValidationError("Assignments must map dataset labels to group ids.")
        return {str(label): str(group_id) for label, group_id in assignments.items()}


GROUP_ACTION_CHOICES: tuple[tuple[str, str], ...] = (
    ("create", "Create group"),
    ("rename", "Rename group"),
    ("delete", "Delete group"),
)

ARRANGE_ORDER_CHOICES: tuple[tuple[str, str], ...] = (
    ("asc", "Value, ascending"),
    ("desc", "Value, descending"),
    ("label-asc", "Label, A to Z"),
    ("label-desc", "Label, Z to A"),
    ("reverse", "Reverse"),
)


class GroupForm(forms.Form):
    """Validate a group create, rename or delete request."""

    action = forms.ChoiceField(choices=GROUP_ACTION_CHOICES)
    group_id = forms.CharField(required=False, max_length=40)
    name = forms.CharField(required=False, max_length=120)

    def clean(self) -> dict:
        cleaned = super().clean()
        action = cleaned.get("action")
        if action in ("rename", "delete") and not cleaned.get("group_id"):
            self.add_error("group_id", "A group id is required.")
        if action == "rename" and not (cleaned.get("name") or "").strip():
            self.add_error("name", "A group name is required.")
        return cleaned


class DatasetArrangeForm(forms.Form):
    """Validate a dataset sort or reverse request."""

    label = forms.CharField(max_length=120)
    order = forms.ChoiceField(choices=ARRANGE_ORDER_CHOICES)


class SliceRenameForm(forms.Form):
    """Validate a slice rename."""

    index = forms.IntegerField(min_value=0)
    name = forms.CharField(max_length=120)
    label = forms.CharField(required=False, max_length=120)
