"""JSON endpoints dispatching chart editing intents to an editing session.

Each request opens a session from the stored chart, applies one intent and
writes the session back. Rejected intents answer 400 with the error kind so
the client can show the reason; the stored chart is left as it was.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from django import forms
from django.db import transaction
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from charts.forms import (
    ChartKindForm,
    DatasetArrangeForm,
    DatasetForm,
    DatasetRemoveForm,
    GroupForm,
    ModeForm,
    SliceRenameForm,
    TransitionActionForm,
)
from charts.models import ChartDocument
from charts.services import open_session, save_session
from editor.builder import ManualDatasetDraft, parse_categorical_rows, parse_coordinate_rows
from editor.codec import encode_datasets
from editor.errors import ChartErrorKind, OperationResult
from editor.kinds import Family, family_of
from editor.session import ChartEditingSession
from editor.transition import TransitionAction

logger = logging.getLogger(__name__)


def _encode_draft(draft: ManualDatasetDraft) -> dict[str, Any]:
    return {
        "chart_type": draft.chart_type.value,
        "label": draft.label,
        "color": draft.color,
        "rows": [{"x": row.x, "y": row.y, "r": row.r} for row in draft.rows],
    }


def chart_payload(document: ChartDocument, session: ChartEditingSession) -> dict[str, Any]:
    """Serialize the session state for the chart editor UI.

    Args:
        document: Stored chart backing the session.
        session: Open editing session.

    Returns:
        JSON-safe dictionary describing the chart and any pending transition.
    """

    model = session.model
    modes = session.modes
    negotiator = session.negotiator
    proposal = negotiator.proposal
    transition: dict[str, Any] = {"state": negotiator.state, "proposal": None, "manual_form": None}
    if proposal is not None:
        transition["proposal"] = {
            "source_kind": proposal.source_kind.value,
            "target_kind": proposal.target_kind.value,
            "direction": proposal.direction,
            "has_backup": proposal.has_backup,
            "token": proposal.token,
            "actions": [action.value for action in proposal.available_actions],
        }
    if negotiator.draft is not None:
        transition["manual_form"] = _encode_draft(negotiator.draft)
    return {
        "id": document.pk,
        "name": document.name,
        "kind": model.kind.value,
        "family": model.family.value,
        "mode": modes.mode,
        "uniformity": modes.uniformity,
        "active_group_id": modes.active_group_id,
        "groups": [{"id": g.id, "name": g.name, "is_default": g.is_default} for g in modes.groups],
        "available_kinds": [kind.value for kind in modes.available_kinds()],
        "datasets": encode_datasets(model.datasets),
        "transition": transition,
    }


def _failure(result: OperationResult) -> JsonResponse:
    error = result.error.value if result.error is not None else None
    return JsonResponse({"ok": False, "error": error, "message": result.message}, status=400)


def _form_errors(form: forms.Form) -> JsonResponse:
    return JsonResponse(
        {"ok": False, "error": "InvalidRequest", "errors": form.errors.get_json_data()},
        status=400,
    )


def _apply(chart_id: int, intent: Callable[[ChartEditingSession], OperationResult]) -> JsonResponse:
    """Open the chart, run one intent and persist the result.

    The document row is locked for the duration so concurrent intents on one
    chart are applied one after the other.
    """

    with transaction.atomic():
        document = ChartDocument.objects.select_for_update().filter(pk=chart_id).first()
        if document is None:
            return JsonResponse({"ok": False, "error": "Chart not found."}, status=404)
        with open_session(document) as session:
            result = intent(session)
            if not result.ok:
                logger.info("Chart %s rejected intent: %s (%s)", chart_id, result.error, result.message)
                transaction.set_rollback(True)
                return _failure(result)
            save_session(document, session)
            return JsonResponse({"ok": True, "message": result.message, "chart": chart_payload(document, session)})


@require_GET
def chart_detail(request: HttpRequest, chart_id: int) -> JsonResponse:
    """Return the stored chart and its pending transition, if any."""

    document = ChartDocument.objects.filter(pk=chart_id).first()
    if document is None:
        return JsonResponse({"ok": False, "error": "Chart not found."}, status=404)
    with open_session(document) as session:
        return JsonResponse({"ok": True, "chart": chart_payload(document, session)})


@require_POST
def change_kind(request: HttpRequest, chart_id: int) -> JsonResponse:
    """Relabel the chart or open a cross-family transition proposal."""

    form = ChartKindForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)
    target = form.cleaned_kind()
    return _apply(chart_id, lambda session: session.change_kind(target).result)


@require_POST
def resolve_transition(request: HttpRequest, chart_id: int) -> JsonResponse:
    """Apply one resolution action to the pending transition."""

    form = TransitionActionForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)
    action = form.cleaned_data["action"]

    def intent(session: ChartEditingSession) -> OperationResult:
        negotiator = session.negotiator
        if action == "complete_manual":
            try:
                rows = parse_coordinate_rows(form.cleaned_data["rows"])
            except ValueError as exc:
                return OperationResult.failure(ChartErrorKind.invalid_dataset, str(exc))
            return negotiator.complete_manual(
                form.cleaned_data["label"],
                rows,
                color=form.cleaned_data.get("color") or None,
            )
        if action == "cancel_manual":
            return negotiator.cancel_manual()
        handlers = {
            TransitionAction.restore.value: negotiator.restore,
            TransitionAction.load_sample.value: negotiator.load_sample,
            TransitionAction.quick_transform.value: negotiator.quick_transform,
            TransitionAction.create_manually.value: negotiator.create_manually,
            TransitionAction.cancel.value: negotiator.cancel,
        }
        return handlers[action]()

    return _apply(chart_id, intent)


@require_POST
def add_dataset(request: HttpRequest, chart_id: int) -> JsonResponse:
    """Validate and append a dataset built from submitted rows."""

    form = DatasetForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)
    chart_type = form.cleaned_chart_type()

    def intent(session: ChartEditingSession) -> OperationResult:
        kind = chart_type or session.model.kind
        try:
            if family_of(kind) is Family.categorical:
                rows = parse_categorical_rows(form.cleaned_data["rows"])
            else:
                rows = parse_coordinate_rows(form.cleaned_data["rows"])
        except ValueError as exc:
            return OperationResult.failure(ChartErrorKind.invalid_dataset, str(exc))
        return session.add_dataset_from_rows(
            form.cleaned_data["label"],
            rows,
            chart_type=chart_type,
            color=form.cleaned_data.get("color") or None,
        )

    return _apply(chart_id, intent)


@require_POST
def remove_dataset(request: HttpRequest, chart_id: int) -> JsonResponse:
    """Remove a dataset by label (unknown labels are ignored)."""

    form = DatasetRemoveForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)

    def intent(session: ChartEditingSession) -> OperationResult:
        session.remove_dataset(form.cleaned_data["label"])
        return OperationResult.success()

    return _apply(chart_id, intent)


@require_POST
def change_mode(request: HttpRequest, chart_id: int) -> JsonResponse:
    """Change grouping mode, uniformity and/or the active group."""

    form = ModeForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)
    data = form.cleaned_data

    def intent(session: ChartEditingSession) -> OperationResult:
        if data.get("mode"):
            result = session.set_mode(data["mode"], assignments=data.get("assignments"))
            if not result.ok:
                return result
        if data.get("group_id"):
            result = session.select_group(data["group_id"])
            if not result.ok:
                return result
        if data.get("uniformity"):
            return session.set_uniformity(data["uniformity"])
        return OperationResult.success()

    return _apply(chart_id, intent)


@require_POST
def manage_group(request: HttpRequest, chart_id: int) -> JsonResponse:
    """Create, rename or delete a dataset group."""

    form = GroupForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)
    data = form.cleaned_data

    def intent(session: ChartEditingSession) -> OperationResult:
        if data["action"] == "create":
            group = session.create_group(data.get("name") or "")
            return OperationResult.success(f"Created group {group.id}.")
        if data["action"] == "rename":
            return session.rename_group(data["group_id"], data["name"])
        return session.delete_group(data["group_id"])

    return _apply(chart_id, intent)


@require_POST
def arrange_dataset(request: HttpRequest, chart_id: int) -> JsonResponse:
    """Sort or reverse the points of one dataset."""

    form = DatasetArrangeForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)
    label = form.cleaned_data["label"]
    order = form.cleaned_data["order"]

    def intent(session: ChartEditingSession) -> OperationResult:
        if order == "reverse":
            return session.reverse_dataset(label)
        return session.sort_dataset(label, order)

    return _apply(chart_id, intent)


@require_POST
def rename_slice(request: HttpRequest, chart_id: int) -> JsonResponse:
    """Rename one slice across the datasets that share it."""

    form = SliceRenameForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)
    data = form.cleaned_data
    return _apply(
        chart_id,
        lambda session: session.rename_slice(data["index"], data["name"], label=data.get("label") or None),
    )
