"""Encoding and decoding of chart payloads."""

from __future__ import annotations

import pytest

from editor.codec import (
    PAYLOAD_VERSION,
    decode_chart_state,
    decode_dataset,
    decode_datasets,
    encode_chart_state,
    encode_dataset,
)
from editor.dto import ChartState, CoordinatePoint, Dataset
from editor.kinds import ChartKind

pytestmark = pytest.mark.unit


def test_encode_dataset_uses_wire_kind_and_omits_unset_fields() -> None:
    """Payloads carry wire kinds and skip empty optionals."""

    scatter = Dataset(
        label="Points",
        chart_type=ChartKind.scatter,
        points=(CoordinatePoint(x=1.0, y=2.0),),
        colors=("#1976d2",),
    )

    payload = encode_dataset(scatter)

    assert payload == {
        "label": "Points",
        "chart_type": "scatter",
        "points": [{"x": 1.0, "y": 2.0}],
        "colors": ["#1976d2"],
        "mode": "single",
    }


def test_chart_state_payload_restores_equal_state(categorical) -> None:
    """Decoding an encoded chart gives an equal state."""

    state = ChartState(
        kind=ChartKind.polar_area,
        datasets=(
            categorical(
                "Sales", [1, 2], chart_type=ChartKind.polar_area, names=["Jan", "Feb"], mode="grouped", group_id="g1"
            ),
        ),
    )

    payload = encode_chart_state(state)

    assert payload["version"] == PAYLOAD_VERSION
    assert payload["kind"] == "polarArea"
    assert decode_chart_state(payload) == state


def test_decode_dispatches_points_on_the_chart_type_family() -> None:
    """Point shape follows the dataset's chart type."""

    payload = {
        "label": "Odd",
        "chart_type": "bar",
        "points": [{"x": 1, "y": 2}],
        "colors": ["#1976d2"],
    }

    with pytest.raises(ValueError, match="missing 'name'"):
        decode_dataset(payload)


def test_decode_rejects_datasets_from_another_family(categorical) -> None:
    """A dataset outside the chart family fails to decode."""

    payload = {
        "kind": "scatter",
        "datasets": [encode_dataset(categorical("Sales", [1]))],
    }

    with pytest.raises(ValueError, match="categorical"):
        decode_chart_state(payload)


@pytest.mark.parametrize(
    "payload",
    [
        {"datasets": "nope"},
        {"datasets": [{"label": "A", "chart_type": "bar", "points": "nope"}]},
        {"datasets": [{"label": "A", "chart_type": "sankey", "points": []}]},
        {"datasets": [{"label": "A", "chart_type": "bar", "points": [{"name": "x", "value": "ten"}], "colors": ["#000"]}]},
    ],
)
def test_decode_rejects_malformed_payloads(payload: dict) -> None:
    """Malformed payloads raise ValueError."""

    with pytest.raises(ValueError):
        decode_chart_state(payload)


def test_decode_datasets_treats_missing_payload_as_empty() -> None:
    """A missing dataset list decodes to no datasets."""

    assert decode_datasets(None) == ()
