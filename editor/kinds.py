"""Chart kinds and the categorical/coordinate family partition.

Every family comparison in the editor goes through `family_of`. Callers must
never test membership against ad hoc lists of kind strings.
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Iterable, Literal


class ChartKind(str, Enum):
    """Supported chart kinds (values match the frontend identifiers)."""

    bar = "bar"
    horizontal_bar = "horizontalBar"
    stacked_bar = "stackedBar"
    line = "line"
    area = "area"
    pie = "pie"
    doughnut = "doughnut"
    polar_area = "polarArea"
    radar = "radar"
    scatter = "scatter"
    bubble = "bubble"


class Family(str, Enum):
    """Point-schema family of a chart kind."""

    categorical = "categorical"
    coordinate = "coordinate"


Direction = Literal["toCoordinate", "toCategorical"]

_FAMILY_BY_KIND: Final[dict[ChartKind, Family]] = {
    ChartKind.bar: Family.categorical,
    ChartKind.horizontal_bar: Family.categorical,
    ChartKind.stacked_bar: Family.categorical,
    ChartKind.line: Family.categorical,
    ChartKind.area: Family.categorical,
    ChartKind.pie: Family.categorical,
    ChartKind.doughnut: Family.categorical,
    ChartKind.polar_area: Family.categorical,
    ChartKind.radar: Family.categorical,
    ChartKind.scatter: Family.coordinate,
    ChartKind.bubble: Family.coordinate,
}

CHART_KIND_LABELS: Final[dict[ChartKind, str]] = {
    ChartKind.bar: "Bar",
    ChartKind.horizontal_bar: "Horizontal Bar",
    ChartKind.stacked_bar: "Stacked Bar",
    ChartKind.line: "Line",
    ChartKind.area: "Area",
    ChartKind.pie: "Pie",
    ChartKind.doughnut: "Doughnut",
    ChartKind.polar_area: "Polar Area",
    ChartKind.radar: "Radar",
    ChartKind.scatter: "Scatter",
    ChartKind.bubble: "Bubble",
}

# Kinds that may be combined inside one grouped+mixed group unless configured otherwise.
DEFAULT_MIXABLE_KINDS: Final[frozenset[ChartKind]] = frozenset(
    {ChartKind.bar, ChartKind.line, ChartKind.area}
)

# Slice-per-point kinds that cannot share one group axis with other datasets.
SLICE_ONLY_KINDS: Final[frozenset[ChartKind]] = frozenset({ChartKind.pie, ChartKind.doughnut})


def family_of(kind: ChartKind) -> Family:
    """Return the family a chart kind belongs to.

    Args:
        kind: Chart kind to classify.

    Returns:
        The kind's Family.
    """

    return _FAMILY_BY_KIND[kind]


def same_family(a: ChartKind, b: ChartKind) -> bool:
    """Return True when two kinds share a point schema."""

    return family_of(a) is family_of(b)


def kinds_in_family(family: Family) -> tuple[ChartKind, ...]:
    """Return every kind of a family in declaration order."""

    return tuple(kind for kind in ChartKind if _FAMILY_BY_KIND[kind] is family)


def transition_direction(target: ChartKind) -> Direction:
    """Return the negotiation direction for a cross-family switch to `target`."""

    return "toCoordinate" if family_of(target) is Family.coordinate else "toCategorical"


def parse_chart_kind(value: object) -> ChartKind:
    """Parse a chart kind from its wire value or enum name.

    Args:
        value: A ChartKind, a frontend identifier (e.g. "polarArea") or an enum
            member name (e.g. "polar_area").

    Returns:
        The matching ChartKind.

    Raises:
        ValueError: When the value does not name a supported kind.
    """

    if isinstance(value, ChartKind):
        return value
    raw = str(value or "").strip()
    try:
        return ChartKind(raw)
    except ValueError:
        pass
    try:
        return ChartKind[raw]
    except KeyError as exc:
        raise ValueError(f"Unsupported chart kind: {raw!r}.") from exc


def parse_chart_kinds(values: Iterable[object]) -> frozenset[ChartKind]:
    """Parse a collection of chart kind identifiers (used for configuration)."""

    return frozenset(parse_chart_kind(value) for value in values)
