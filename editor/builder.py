"""Construct datasets from user-entered rows.

Builders turn raw form rows (labelled values or coordinate points) into
`Dataset` values with colors and slice metadata. Structural checks against the
chart happen later in `editor.validator`; builders only reject input that
cannot form a dataset at all.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Final, Iterable, Mapping, Sequence

from .dto import CategoricalPoint, ChartMode, CoordinatePoint, Dataset
from .kinds import ChartKind, Family, family_of

BASE_PALETTE: Final[tuple[str, ...]] = (
    "#1976d2",
    "#2e7d32",
    "#c62828",
    "#f9a825",
    "#6a1b9a",
    "#00838f",
    "#ef6c00",
    "#4a148c",
    "#00695c",
    "#bf360c",
)

DEFAULT_COORDINATE_ROWS: Final[tuple[tuple[float, float, float], ...]] = (
    (10.0, 20.0, 10.0),
    (20.0, 35.0, 15.0),
    (30.0, 25.0, 8.0),
)

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
_HSL_COLOR = re.compile(r"^hsl\((\d+(?:\.\d+)?),\s*(\d+)%,\s*(\d+)%\)$")


@dataclass(frozen=True, slots=True)
class CategoricalRow:
    """A user-entered slice: name, value and an optional color."""

    name: str
    value: float
    color: str | None = None


@dataclass(frozen=True, slots=True)
class CoordinateRow:
    """A user-entered coordinate point; `r` is only used for bubble datasets."""

    x: float
    y: float
    r: float | None = None


@dataclass(frozen=True, slots=True)
class ManualDatasetDraft:
    """Pre-filled form state for creating a coordinate dataset by hand.

    Args:
        chart_type: Scatter or bubble.
        label: Suggested dataset name.
        rows: Suggested starting rows.
        color: Suggested point color.
    """

    chart_type: ChartKind
    label: str
    rows: tuple[CoordinateRow, ...]
    color: str


def generate_color_palette(count: int) -> list[str]:
    """Return `count` distinct colors, extending the base palette by golden-angle hues."""

    if count <= len(BASE_PALETTE):
        return list(BASE_PALETTE[:count])
    extra = [f"hsl({(i * 137.5) % 360:g}, 70%, 50%)" for i in range(count - len(BASE_PALETTE))]
    return list(BASE_PALETTE) + extra


def darken_color(color: str, amount: int = 20) -> str:
    """Darken a hex or hsl color; other formats are returned unchanged."""

    if _HEX_COLOR.match(color):
        channels = [max(0, int(color[i : i + 2], 16) - amount) for i in (1, 3, 5)]
        return "#" + "".join(f"{value:02x}" for value in channels)
    match = _HSL_COLOR.match(color)
    if match:
        hue, saturation, lightness = match.groups()
        return f"hsl({hue}, {saturation}%, {max(0, int(lightness) - amount)}%)"
    return color


def parse_number(raw: object, *, field: str) -> float:
    """Parse a user-entered number (accepts thousands separators).

    Raises:
        ValueError: When the value is blank, not numeric, or not finite.
    """

    if isinstance(raw, bool):
        raise ValueError(f"{field} must be a number.")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw if raw is not None else "").strip().replace(",", "")
        if not text:
            raise ValueError(f"{field} is required.")
        try:
            value = float(text)
        except ValueError as exc:
            raise ValueError(f"{field} must be a number, got {raw!r}.") from exc
    if not math.isfinite(value):
        raise ValueError(f"{field} must be a finite number, got {raw!r}.")
    return value


def parse_categorical_rows(raw_rows: Iterable[Mapping[str, object]]) -> tuple[CategoricalRow, ...]:
    """Parse form payload rows (`name`, `value`, optional `color`)."""

    rows = []
    for idx, raw in enumerate(raw_rows):
        color = raw.get("color")
        rows.append(
            CategoricalRow(
                name=str(raw.get("name") or "").strip(),
                value=parse_number(raw.get("value"), field=f"rows[{idx}].value"),
                color=str(color) if color else None,
            )
        )
    return tuple(rows)


def parse_coordinate_rows(raw_rows: Iterable[Mapping[str, object]]) -> tuple[CoordinateRow, ...]:
    """Parse form payload rows (`x`, `y`, optional `r`)."""

    rows = []
    for idx, raw in enumerate(raw_rows):
        r_raw = raw.get("r")
        rows.append(
            CoordinateRow(
                x=parse_number(raw.get("x"), field=f"rows[{idx}].x"),
                y=parse_number(raw.get("y"), field=f"rows[{idx}].y"),
                r=None if r_raw in (None, "") else parse_number(r_raw, field=f"rows[{idx}].r"),
            )
        )
    return tuple(rows)


def default_categorical_rows(group_labels: Sequence[str] | None = None) -> tuple[CategoricalRow, ...]:
    """Return starting rows for a new categorical dataset.

    Args:
        group_labels: Slice labels of the active group; when given, one
            zero-valued row per label is returned so the new dataset lines up.
    """

    if group_labels:
        return tuple(CategoricalRow(name=label, value=0.0) for label in group_labels)
    return (
        CategoricalRow(name="Slice 1", value=10.0),
        CategoricalRow(name="Slice 2", value=20.0),
        CategoricalRow(name="Slice 3", value=15.0),
    )


def manual_draft(chart_type: ChartKind, *, existing_count: int = 0) -> ManualDatasetDraft:
    """Return the pre-filled form for a hand-made scatter/bubble dataset."""

    if family_of(chart_type) is not Family.coordinate:
        raise ValueError(f"Manual coordinate datasets require scatter or bubble, got {chart_type.value!r}.")
    name = "Bubble Dataset" if chart_type is ChartKind.bubble else "Scatter Dataset"
    return ManualDatasetDraft(
        chart_type=chart_type,
        label=name,
        rows=tuple(CoordinateRow(x=x, y=y, r=r) for x, y, r in DEFAULT_COORDINATE_ROWS),
        color=BASE_PALETTE[existing_count % len(BASE_PALETTE)],
    )


def build_categorical_dataset(
    label: str,
    rows: Sequence[CategoricalRow],
    *,
    chart_type: ChartKind = ChartKind.bar,
    mode: ChartMode = "single",
    group_id: str | None = None,
) -> Dataset:
    """Build a categorical dataset from labelled rows.

    Blank row names become "Slice N"; rows without a color take the palette
    color at their position. `slice_labels` snapshots the row names.

    Raises:
        ValueError: For a blank label, no rows, or a coordinate chart type.
    """

    if family_of(chart_type) is not Family.categorical:
        raise ValueError(f"{chart_type.value!r} is not a categorical chart kind.")
    name = _require_label(label)
    if not rows:
        raise ValueError("A dataset needs at least one row.")

    palette = generate_color_palette(len(rows))
    names = tuple(row.name.strip() or f"Slice {idx + 1}" for idx, row in enumerate(rows))
    return Dataset(
        label=name,
        chart_type=chart_type,
        points=tuple(CategoricalPoint(name=n, value=float(row.value)) for n, row in zip(names, rows)),
        colors=tuple(row.color or palette[idx] for idx, row in enumerate(rows)),
        mode=mode,
        group_id=group_id,
        slice_labels=names,
    )


def build_coordinate_dataset(
    label: str,
    rows: Sequence[CoordinateRow],
    *,
    chart_type: ChartKind = ChartKind.scatter,
    color: str | None = None,
    mode: ChartMode = "single",
    group_id: str | None = None,
) -> Dataset:
    """Build a scatter or bubble dataset from coordinate rows.

    Scatter datasets drop any `r` values. All points share one color.

    Raises:
        ValueError: For a blank label, no rows, or a categorical chart type.
    """

    if family_of(chart_type) is not Family.coordinate:
        raise ValueError(f"{chart_type.value!r} is not a coordinate chart kind.")
    name = _require_label(label)
    if not rows:
        raise ValueError("A dataset needs at least one point.")

    keep_radius = chart_type is ChartKind.bubble
    fill = color or BASE_PALETTE[0]
    return Dataset(
        label=name,
        chart_type=chart_type,
        points=tuple(
            CoordinatePoint(
                x=float(row.x),
                y=float(row.y),
                r=float(row.r) if keep_radius and row.r is not None else None,
            )
            for row in rows
        ),
        colors=(fill,) * len(rows),
        mode=mode,
        group_id=group_id,
    )


def _require_label(label: str) -> str:
    name = (label or "").strip()
    if not name:
        raise ValueError("Dataset name is required.")
    return name
