"""Value types for the chart data model.

Datasets are immutable. Edits produce a new Dataset that replaces the old one
inside the owning ChartDataModel.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Literal, Union

from .kinds import ChartKind, Family, family_of

ChartMode = Literal["single", "grouped"]
Uniformity = Literal["uniform", "mixed"]


@dataclass(frozen=True, slots=True)
class CategoricalPoint:
    """One named value of a categorical dataset.

    Attributes:
        name: Category (slice) name.
        value: Numeric value.
    """

    name: str
    value: float


@dataclass(frozen=True, slots=True)
class CoordinatePoint:
    """One point of a scatter or bubble dataset.

    Attributes:
        x: Horizontal coordinate.
        y: Vertical coordinate.
        r: Bubble radius; only meaningful for bubble datasets.
    """

    x: float
    y: float
    r: float | None = None


def has_valid_radius(point: CoordinatePoint) -> bool:
    """Return True when a bubble point has a finite radius above zero."""

    return point.r is not None and math.isfinite(point.r) and point.r > 0


Point = Union[CategoricalPoint, CoordinatePoint]

_POINT_CLASS_BY_FAMILY: dict[Family, type] = {
    Family.categorical: CategoricalPoint,
    Family.coordinate: CoordinatePoint,
}


def point_class_for(family: Family) -> type:
    """Return the point class carried by datasets of a family."""

    return _POINT_CLASS_BY_FAMILY[family]


@dataclass(frozen=True, slots=True)
class Dataset:
    """One named series within a chart.

    The point variant is keyed by `family_of(chart_type)`; construction fails
    when the points do not match that family.

    Attributes:
        label: Non-empty, user-visible series name.
        chart_type: Kind this dataset renders as.
        points: Categorical or coordinate points (never mixed).
        colors: One color per point.
        mode: Grouping mode the dataset was created in.
        group_id: Owning group when `mode == "grouped"`.
        slice_labels: Categorical label snapshot used to align grouped datasets.

    Raises:
        ValueError: When the label is blank, a point does not match the
            dataset family, or colors and points differ in length.
    """

    label: str
    chart_type: ChartKind
    points: tuple[Point, ...]
    colors: tuple[str, ...]
    mode: ChartMode = "single"
    group_id: str | None = None
    slice_labels: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if not self.label.strip():
            raise ValueError("Dataset.label must be a non-empty string.")
        expected = point_class_for(self.family)
        for idx, point in enumerate(self.points):
            if not isinstance(point, expected):
                raise ValueError(
                    f"Dataset[{self.label}].points[{idx}] is not a {expected.__name__} "
                    f"(chart_type={self.chart_type.value!r})."
                )
        if len(self.colors) != len(self.points):
            raise ValueError(
                f"Dataset[{self.label}] has {len(self.colors)} colors for {len(self.points)} points."
            )

    @property
    def family(self) -> Family:
        """Family of the dataset's chart type."""

        return family_of(self.chart_type)

    @property
    def point_count(self) -> int:
        """Number of points in the dataset."""

        return len(self.points)

    def effective_slice_labels(self) -> tuple[str, ...] | None:
        """Return slice labels, falling back to point names for categorical data."""

        if self.family is not Family.categorical:
            return None
        if self.slice_labels is not None:
            return self.slice_labels
        return tuple(point.name for point in self.points)  # type: ignore[union-attr]

    def with_changes(self, **changes: object) -> "Dataset":
        """Return a copy with the given fields replaced (re-running invariants)."""

        return replace(self, **changes)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class ChartState:
    """Read-only view of a chart handed to rendering and persistence consumers."""

    kind: ChartKind
    datasets: tuple[Dataset, ...]

    @property
    def family(self) -> Family:
        """Family of the chart's nominal kind."""

        return family_of(self.kind)
