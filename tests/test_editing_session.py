"""ChartEditingSession intent handling."""

from __future__ import annotations

import math

import pytest

from editor.builder import CategoricalRow, CoordinateRow
from editor.dto import CategoricalPoint, CoordinatePoint, Dataset
from editor.errors import ChartErrorKind
from editor.kinds import ChartKind
from editor.session import ChartEditingSession

pytestmark = pytest.mark.unit


def _bubble_session() -> ChartEditingSession:
    bubbles = Dataset(
        label="Bubbles",
        chart_type=ChartKind.bubble,
        points=(CoordinatePoint(x=0.0, y=1.0, r=4.0), CoordinatePoint(x=1.0, y=2.0, r=6.0)),
        colors=("#1976d2", "#1976d2"),
    )
    return ChartEditingSession(kind=ChartKind.bubble, datasets=[bubbles])


def _grouped_session(categorical) -> ChartEditingSession:
    return ChartEditingSession(
        datasets=[
            categorical("A", [1, 2, 3], names=["Jan", "Feb", "Mar"], mode="grouped", group_id="g"),
            categorical("B", [4, 5, 6], names=["Jan", "Feb", "Mar"], mode="grouped", group_id="g"),
            categorical("C", [7, 8, 9], names=["Jan", "Feb", "Mar"], mode="grouped", group_id="h"),
        ],
        mode="grouped",
        active_group_id="g",
    )


def test_within_family_change_relabels_immediately(categorical) -> None:
    """Bar to line needs no negotiation."""

    session = ChartEditingSession(datasets=[categorical("Sales", [1, 2])])

    change = session.change_kind(ChartKind.line)

    assert change.result.ok
    assert not change.needs_negotiation
    assert session.state().kind is ChartKind.line
    assert session.state().datasets[0].chart_type is ChartKind.line


def test_cross_family_change_waits_for_a_resolution(categorical) -> None:
    """Bar to scatter only applies once an action resolves it."""

    session = ChartEditingSession(datasets=[categorical("Sales", [12, 19, 3])])

    change = session.change_kind(ChartKind.scatter)

    assert change.needs_negotiation
    assert session.state().kind is ChartKind.bar
    assert session.negotiator.quick_transform().ok
    assert session.state().kind is ChartKind.scatter


def test_within_family_request_cancels_a_pending_proposal(categorical) -> None:
    """Picking a same-family kind abandons the open proposal."""

    session = ChartEditingSession(datasets=[categorical("Sales", [1, 2])])
    session.change_kind(ChartKind.bubble)

    session.change_kind(ChartKind.area)

    assert session.negotiator.state == "cancelled"
    assert session.state().kind is ChartKind.area


def test_mixed_group_keeps_dataset_kinds_on_mixable_change(categorical) -> None:
    """A mixable kind only changes the nominal chart kind."""

    session = ChartEditingSession(
        datasets=[
            categorical("A", [1, 2], mode="grouped", group_id="g"),
            categorical("B", [1, 2], chart_type=ChartKind.line, mode="grouped", group_id="g"),
        ],
        mode="grouped",
        uniformity="mixed",
        active_group_id="g",
    )

    session.change_kind(ChartKind.area)

    assert session.state().kind is ChartKind.area
    assert [d.chart_type for d in session.state().datasets] == [ChartKind.bar, ChartKind.line]


def test_non_mixable_change_forces_uniform_and_relabels(categorical) -> None:
    """Radar cannot be mixed, so the group turns uniform."""

    session = ChartEditingSession(
        datasets=[categorical("A", [1, 2], mode="grouped", group_id="g")],
        mode="grouped",
        uniformity="mixed",
        active_group_id="g",
    )

    session.change_kind(ChartKind.radar)

    assert session.modes.uniformity == "uniform"
    assert session.state().datasets[0].chart_type is ChartKind.radar


def test_add_dataset_in_uniform_group_rejects_other_kinds_atomically(categorical) -> None:
    """A rejected dataset leaves the chart as it was."""

    session = ChartEditingSession(datasets=[categorical("A", [1, 2])])
    session.set_mode("grouped")
    before = session.state()

    result = session.add_dataset(categorical("B", [3, 4], chart_type=ChartKind.line))

    assert result.error is ChartErrorKind.chart_type_locked
    assert session.state() == before


def test_add_dataset_joins_the_active_group_with_its_slice_labels(categorical) -> None:
    """New datasets are keyed to the active group."""

    session = ChartEditingSession(datasets=[categorical("A", [1, 2], names=["Jan", "Feb"])])
    session.set_mode("grouped")

    result = session.add_dataset(categorical("B", [3, 4], names=["Jan", "Feb"]).with_changes(slice_labels=None))

    assert result.ok
    added = session.model.get("B")
    assert added.group_id == session.modes.active_group_id
    assert added.slice_labels == ("Jan", "Feb")


def test_add_dataset_from_rows_checks_row_family_and_input() -> None:
    """Row types must match the kind and the label must be filled in."""

    session = ChartEditingSession()

    assert session.add_dataset_from_rows("Pts", [CoordinateRow(x=1, y=2)]).error is ChartErrorKind.incompatible_family
    assert session.add_dataset_from_rows(" ", [CategoricalRow(name="A", value=1)]).error is ChartErrorKind.invalid_dataset
    assert session.add_dataset_from_rows("Sales", [CategoricalRow(name="A", value=1)]).ok
    assert session.model.labels() == ("Sales",)


def test_add_bubble_dataset_with_nan_radius_is_rejected() -> None:
    """A NaN radius fails validation like any other invalid radius."""

    session = ChartEditingSession(kind=ChartKind.bubble)
    rows = [CoordinateRow(x=1, y=2, r=3), CoordinateRow(x=4, y=5, r=math.nan)]

    result = session.add_dataset_from_rows("Bubbles", rows)

    assert result.error is ChartErrorKind.invalid_radius
    assert session.model.datasets == ()


@pytest.mark.parametrize("radius", [None, -4.0, math.nan])
def test_bubble_point_edits_check_the_radius(radius: float | None) -> None:
    """Editing or adding a bubble point without a valid radius is refused."""

    session = _bubble_session()
    before = session.state()
    point = CoordinatePoint(x=3.0, y=3.0, r=radius)

    assert session.update_point("Bubbles", 0, point).error is ChartErrorKind.invalid_radius
    assert session.add_point("Bubbles", point).error is ChartErrorKind.invalid_radius
    assert session.state() == before


def test_bubble_point_edits_with_a_radius_apply() -> None:
    """Valid bubble points are updated and appended."""

    session = _bubble_session()

    assert session.update_point("Bubbles", 0, CoordinatePoint(x=0.0, y=1.0, r=2.0)).ok
    assert session.add_point("Bubbles", CoordinatePoint(x=2.0, y=3.0, r=5.0)).ok

    assert [point.r for point in session.model.get("Bubbles").points] == [2.0, 6.0, 5.0]


def test_point_count_is_frozen_while_a_group_has_several_members(categorical) -> None:
    """Adding or removing points would break the group's point count."""

    session = ChartEditingSession(datasets=[categorical("A", [1, 2]), categorical("B", [3, 4])])
    session.set_mode("grouped")

    added = session.add_point("A", CategoricalPoint(name="Slice 3", value=5.0))
    removed = session.remove_point("A", 0)

    assert added.error is ChartErrorKind.group_size_mismatch
    assert removed.error is ChartErrorKind.group_size_mismatch
    assert session.update_point("A", 0, CategoricalPoint(name="Slice 1", value=9.0)).ok


def test_rename_slice_renames_the_whole_active_group(categorical) -> None:
    """Every member of the active group gets the new slice name."""

    session = _grouped_session(categorical)

    assert session.rename_slice(1, "February").ok

    a, b, c = session.model.datasets
    assert a.slice_labels == b.slice_labels == ("Jan", "February", "Mar")
    assert b.points[1].name == "February"
    assert c.slice_labels == ("Jan", "Feb", "Mar")


def test_rename_slice_by_label_uses_that_datasets_group(categorical) -> None:
    """Naming a dataset renames within its own group, not the active one."""

    session = _grouped_session(categorical)

    assert session.rename_slice(0, "January", label="C").ok

    assert [d.slice_labels[0] for d in session.model.datasets] == ["Jan", "Jan", "January"]


def test_rename_slice_in_single_mode_needs_a_dataset(categorical) -> None:
    """Single mode renames one named dataset."""

    session = ChartEditingSession(datasets=[categorical("A", [1, 2], names=["Jan", "Feb"]), categorical("B", [3, 4])])

    assert session.rename_slice(0, "Q1").error is ChartErrorKind.dataset_not_found
    assert session.rename_slice(0, "Q1", label="A").ok
    assert session.rename_slice(5, "Q6", label="A").error is ChartErrorKind.point_not_found

    assert session.model.get("A").slice_labels == ("Q1", "Feb")
    assert session.model.get("B").slice_labels == ("Slice 1", "Slice 2")


def test_sort_and_reverse_are_refused_inside_a_shared_group(categorical) -> None:
    """Reordering one member would misalign the group's slice labels."""

    session = _grouped_session(categorical)
    before = session.state()

    assert session.sort_dataset("A", "desc").error is ChartErrorKind.slice_label_mismatch
    assert session.reverse_dataset("B").error is ChartErrorKind.slice_label_mismatch
    assert session.state() == before


def test_sort_and_reverse_apply_to_a_lone_dataset(categorical) -> None:
    """A dataset alone in its group can be reordered."""

    session = _grouped_session(categorical)

    assert session.sort_dataset("C", "desc").ok
    assert session.model.get("C").slice_labels == ("Mar", "Feb", "Jan")
    assert session.reverse_dataset("C").ok
    assert [point.value for point in session.model.get("C").points] == [7.0, 8.0, 9.0]


def test_group_management_goes_through_the_session(categorical) -> None:
    """Create, rename and delete groups from the session."""

    session = _grouped_session(categorical)

    group = session.create_group("Spare")
    assert session.rename_group(group.id, "Backup").ok
    assert session.rename_group("default", "Main").error is ChartErrorKind.action_unavailable
    assert session.delete_group(group.id).ok

    assert group.id not in [g.id for g in session.modes.groups]


def test_closed_session_refuses_intents(categorical) -> None:
    """Leaving the context closes the session and drops the proposal."""

    with ChartEditingSession(datasets=[categorical("A", [1])]) as session:
        session.change_kind(ChartKind.scatter)

    assert session.closed
    assert session.negotiator.proposal is None
    with pytest.raises(RuntimeError, match="closed"):
        session.change_kind(ChartKind.line)
