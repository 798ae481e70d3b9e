"""Storing and reopening chart editing sessions."""

from __future__ import annotations

import pytest
from django.core.exceptions import ValidationError

from editor.codec import encode_datasets
from editor.kinds import ChartKind, Family

pytestmark = pytest.mark.integration


@pytest.mark.django_db
def test_open_session_restores_stored_state(chart_document) -> None:
    """A session opens with the stored kind and datasets."""

    from charts.services import open_session

    session = open_session(chart_document)

    assert session.state().kind is ChartKind.bar
    assert session.model.labels() == ("Sales",)
    assert session.modes.mode == "single"
    assert session.negotiator.state == "idle"


@pytest.mark.django_db
def test_transition_backups_are_stored_per_family(chart_document) -> None:
    """Leaving a family writes one backup row for it."""

    from charts.models import ChartBackup
    from charts.services import open_session, save_session

    session = open_session(chart_document)
    session.change_kind(ChartKind.scatter)
    assert session.negotiator.quick_transform().ok
    save_session(chart_document, session)

    chart_document.refresh_from_db()
    backup = ChartBackup.objects.get(document=chart_document)
    assert chart_document.kind == "scatter"
    assert backup.family == Family.categorical.value
    assert backup.datasets[0]["label"] == "Sales"

    reopened = open_session(chart_document)
    proposal = reopened.change_kind(ChartKind.bar).proposal
    assert proposal is not None and proposal.has_backup
    assert reopened.negotiator.restore().ok
    assert reopened.state().datasets[0].slice_labels == ("Jan", "Feb", "Mar")
    assert ChartBackup.objects.filter(document=chart_document).count() == 2


@pytest.mark.django_db
def test_pending_transition_survives_a_reload(chart_document) -> None:
    """A pending proposal is offered again after reopening."""

    from charts.services import open_session, save_session

    session = open_session(chart_document)
    session.change_kind(ChartKind.bubble)
    session.negotiator.create_manually()
    save_session(chart_document, session)

    chart_document.refresh_from_db()
    assert chart_document.pending_kind == "bubble"
    assert chart_document.manual_form_open
    reopened = open_session(chart_document)
    assert reopened.negotiator.state == "proposed"
    assert reopened.negotiator.proposal.target_kind is ChartKind.bubble
    assert reopened.negotiator.draft is not None


@pytest.mark.django_db
def test_grouping_state_is_saved(chart_document) -> None:
    """Mode, groups and active group are written back."""

    from charts.services import open_session, save_session

    session = open_session(chart_document)
    assert session.set_mode("grouped").ok
    session.select_group("north")
    save_session(chart_document, session)

    chart_document.refresh_from_db()
    reopened = open_session(chart_document)
    assert reopened.modes.mode == "grouped"
    assert reopened.modes.active_group_id == "north"
    assert "north" in {group.id for group in reopened.modes.groups}


@pytest.mark.django_db
def test_mixable_kinds_come_from_settings(chart_document, settings) -> None:
    """The mixable list is read from settings."""

    from charts.services import open_session

    settings.CHART_EDITOR_MIXABLE_KINDS = ["bar", "radar"]
    session = open_session(chart_document)

    assert session.modes.mixable_kinds == frozenset({ChartKind.bar, ChartKind.radar})


@pytest.mark.django_db
def test_backup_clean_rejects_datasets_of_the_other_family(categorical, chart_document) -> None:
    """A backup holding the wrong family fails clean()."""

    from charts.models import ChartBackup

    backup = ChartBackup(
        document=chart_document,
        family=Family.coordinate.value,
        datasets=encode_datasets([categorical("Sales", [1])]),
    )

    with pytest.raises(ValidationError):
        backup.full_clean()
