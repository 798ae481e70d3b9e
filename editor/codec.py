"""Encoding/decoding helpers for chart payloads.

Payloads are plain JSON-compatible dictionaries. Decoding dispatches point
parsing on the family of the stored `chart_type`, never on which keys a point
happens to carry.
"""

from __future__ import annotations

from typing import Any, Iterable, cast

from .dto import CategoricalPoint, ChartState, CoordinatePoint, Dataset, Point
from .kinds import ChartKind, Family, family_of, parse_chart_kind

PAYLOAD_VERSION = "chart_state_v1"


def encode_point(point: Point) -> dict[str, Any]:
    """Encode one point; `r` is omitted when absent."""

    if isinstance(point, CategoricalPoint):
        return {"name": point.name, "value": point.value}
    payload: dict[str, Any] = {"x": point.x, "y": point.y}
    if point.r is not None:
        payload["r"] = point.r
    return payload


def encode_dataset(dataset: Dataset) -> dict[str, Any]:
    """Encode a Dataset into a JSON-serializable dictionary."""

    payload: dict[str, Any] = {
        "label": dataset.label,
        "chart_type": dataset.chart_type.value,
        "points": [encode_point(point) for point in dataset.points],
        "colors": list(dataset.colors),
        "mode": dataset.mode,
    }
    if dataset.group_id is not None:
        payload["group_id"] = dataset.group_id
    if dataset.slice_labels is not None:
        payload["slice_labels"] = list(dataset.slice_labels)
    return payload


def encode_datasets(datasets: Iterable[Dataset]) -> list[dict[str, Any]]:
    return [encode_dataset(dataset) for dataset in datasets]


def encode_chart_state(state: ChartState) -> dict[str, Any]:
    """Encode a ChartState for storage or transport.

    Args:
        state: Chart snapshot to encode.

    Returns:
        Dict payload safe for JSONField storage.
    """

    return {
        "version": PAYLOAD_VERSION,
        "kind": state.kind.value,
        "datasets": encode_datasets(state.datasets),
    }


def decode_dataset(payload: dict[str, Any]) -> Dataset:
    """Decode a Dataset previously produced by `encode_dataset`.

    Raises:
        ValueError: When required fields are missing or inconsistent.
    """

    if not isinstance(payload, dict):
        raise ValueError("Dataset payload must be an object.")
    chart_type = parse_chart_kind(payload.get("chart_type"))
    family = family_of(chart_type)
    raw_points = payload.get("points")
    if not isinstance(raw_points, list):
        raise ValueError("Dataset payload requires a list of points.")
    points = tuple(
        _decode_point(cast(dict[str, Any], raw), family=family, index=idx) for idx, raw in enumerate(raw_points)
    )

    mode = str(payload.get("mode") or "single")
    if mode not in ("single", "grouped"):
        raise ValueError(f"Unsupported dataset mode: {mode!r}.")
    slice_labels = payload.get("slice_labels")
    group_id = payload.get("group_id")
    return Dataset(
        label=str(payload.get("label") or ""),
        chart_type=chart_type,
        points=points,
        colors=tuple(str(color) for color in (payload.get("colors") or ())),
        mode=mode,  # type: ignore[arg-type]
        group_id=str(group_id) if group_id else None,
        slice_labels=tuple(str(label) for label in slice_labels) if isinstance(slice_labels, list) else None,
    )


def decode_datasets(payload: object) -> tuple[Dataset, ...]:
    """Decode a list of dataset payloads."""

    if payload in (None, ""):
        return ()
    if not isinstance(payload, list):
        raise ValueError("Datasets payload must be a list.")
    return tuple(decode_dataset(cast(dict[str, Any], item)) for item in payload)


def decode_chart_state(payload: dict[str, Any]) -> ChartState:
    """Decode a ChartState from a stored payload dictionary.

    Raises:
        ValueError: When the kind is unknown, a dataset is malformed, or a
            dataset belongs to a different family than the chart.
    """

    kind = parse_chart_kind(payload.get("kind") or ChartKind.bar.value)
    datasets = decode_datasets(payload.get("datasets"))
    for dataset in datasets:
        if dataset.family is not family_of(kind):
            raise ValueError(
                f"Dataset {dataset.label!r} is {dataset.family.value} but the chart kind {kind.value!r} is not."
            )
    return ChartState(kind=kind, datasets=datasets)


def _decode_point(raw: dict[str, Any], *, family: Family, index: int) -> Point:
    if not isinstance(raw, dict):
        raise ValueError(f"points[{index}] must be an object.")
    try:
        if family is Family.categorical:
            return CategoricalPoint(name=str(raw["name"]), value=float(raw["value"]))
        r_raw = raw.get("r")
        return CoordinatePoint(
            x=float(raw["x"]),
            y=float(raw["y"]),
            r=None if r_raw is None else float(r_raw),
        )
    except KeyError as exc:
        raise ValueError(f"points[{index}] is missing {exc.args[0]!r} for a {family.value} dataset.") from exc
    except (TypeError, ValueError) as exc:
        raise ValueError(f"points[{index}] has a non-numeric coordinate or value.") from exc
