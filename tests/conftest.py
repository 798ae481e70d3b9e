"""Pytest fixtures shared across the test suite."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import pytest

from editor.dto import CategoricalPoint, Dataset
from editor.kinds import ChartKind


def _build_categorical(
    label: str,
    values: Sequence[float],
    *,
    chart_type: ChartKind = ChartKind.bar,
    names: Sequence[str] | None = None,
    mode: str = "single",
    group_id: str | None = None,
) -> Dataset:
    names = list(names) if names is not None else [f"Slice {idx + 1}" for idx in range(len(values))]
    return Dataset(
        label=label,
        chart_type=chart_type,
        points=tuple(CategoricalPoint(name=name, value=float(value)) for name, value in zip(names, values)),
        colors=tuple("#1976d2" for _ in values),
        mode=mode,  # type: ignore[arg-type]
        group_id=group_id,
        slice_labels=tuple(names),
    )


@pytest.fixture
def categorical() -> Callable[..., Dataset]:
    """Return a factory for categorical datasets whose points share one color."""

    return _build_categorical


@pytest.fixture
def chart_document(db):
    """Return a stored bar chart holding one three-slice dataset."""

    from charts.models import ChartDocument
    from editor.codec import encode_datasets

    return ChartDocument.objects.create(
        name="Quarterly sales",
        kind=ChartKind.bar.value,
        datasets=encode_datasets([_build_categorical("Sales", [12, 19, 3], names=["Jan", "Feb", "Mar"])]),
    )


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    The suite is runnable by intent:
    - `unit`: pure, fast tests with no database access.
    - `integration`: tests touching Django, database, views, or IO.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
