"""Chart kind families and kind parsing."""

from __future__ import annotations

import pytest

from editor.kinds import (
    ChartKind,
    Family,
    family_of,
    kinds_in_family,
    parse_chart_kind,
    parse_chart_kinds,
    same_family,
    transition_direction,
)

pytestmark = pytest.mark.unit


def test_every_kind_has_exactly_one_family() -> None:
    """Each chart kind belongs to one family."""

    categorical = set(kinds_in_family(Family.categorical))
    coordinate = set(kinds_in_family(Family.coordinate))

    assert coordinate == {ChartKind.scatter, ChartKind.bubble}
    assert categorical | coordinate == set(ChartKind)
    assert not categorical & coordinate


def test_same_family_and_direction() -> None:
    """Families compare by kind and the direction follows the target family."""

    assert same_family(ChartKind.bar, ChartKind.radar)
    assert not same_family(ChartKind.pie, ChartKind.scatter)
    assert transition_direction(ChartKind.bubble) == "toCoordinate"
    assert transition_direction(ChartKind.line) == "toCategorical"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("polarArea", ChartKind.polar_area),
        ("polar_area", ChartKind.polar_area),
        (" horizontalBar ", ChartKind.horizontal_bar),
        (ChartKind.bubble, ChartKind.bubble),
    ],
)
def test_parse_chart_kind_accepts_wire_values_and_names(raw: object, expected: ChartKind) -> None:
    """Kinds parse from wire values and enum names."""

    assert parse_chart_kind(raw) is expected
    assert family_of(parse_chart_kind(raw)) is family_of(expected)


def test_parse_chart_kind_rejects_unknown_values() -> None:
    """Unknown kinds raise ValueError."""

    with pytest.raises(ValueError, match="Unsupported chart kind"):
        parse_chart_kind("histogram")
    with pytest.raises(ValueError):
        parse_chart_kinds(["bar", "sankey"])
