"""Deterministic sample datasets offered when a chart changes family."""

from __future__ import annotations

from typing import Final, Protocol

from .builder import (
    BASE_PALETTE,
    CategoricalRow,
    CoordinateRow,
    build_categorical_dataset,
    build_coordinate_dataset,
)
from .dto import Dataset
from .kinds import CHART_KIND_LABELS, ChartKind, Family, family_of

SAMPLE_POINT_COUNT: Final[int] = 8

_SAMPLE_MONTHS: Final[tuple[str, ...]] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
)
_SAMPLE_VALUES: Final[tuple[float, ...]] = (12.0, 19.0, 3.0, 5.0, 2.0, 3.0, 9.0, 14.0)
_SAMPLE_COORDINATES: Final[tuple[tuple[float, float, float], ...]] = (
    (10.0, 20.0, 10.0),
    (15.0, 32.0, 6.0),
    (22.0, 18.0, 14.0),
    (30.0, 41.0, 8.0),
    (38.0, 27.0, 18.0),
    (45.0, 36.0, 5.0),
    (52.0, 12.0, 12.0),
    (60.0, 45.0, 16.0),
)


class SampleGenerator(Protocol):
    """Source of family-appropriate starter datasets."""

    def generate(self, kind: ChartKind) -> tuple[Dataset, ...]: ...


class DefaultSampleGenerator:
    """Sample generator returning fixed data, so repeated calls are equal."""

    def generate(self, kind: ChartKind) -> tuple[Dataset, ...]:
        """Return one sample dataset rendered as `kind`.

        Args:
            kind: Target chart kind.

        Returns:
            A single dataset with SAMPLE_POINT_COUNT points of the kind's family.
        """

        label = f"Sample {CHART_KIND_LABELS[kind]} Data"
        if family_of(kind) is Family.categorical:
            rows = [
                CategoricalRow(name=name, value=value)
                for name, value in zip(_SAMPLE_MONTHS, _SAMPLE_VALUES)
            ]
            return (build_categorical_dataset(label, rows, chart_type=kind),)

        rows = [CoordinateRow(x=x, y=y, r=r) for x, y, r in _SAMPLE_COORDINATES]
        return (build_coordinate_dataset(label, rows, chart_type=kind, color=BASE_PALETTE[0]),)
