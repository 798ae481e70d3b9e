"""ChartDataModel: the canonical in-memory chart.

Every mutating method builds the complete new dataset tuple before assigning
it, so a rejected call leaves `kind` and `datasets` exactly as they were.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Final, Iterable, Literal

from .dto import CategoricalPoint, ChartState, CoordinatePoint, Dataset, Point, has_valid_radius, point_class_for
from .errors import ChartErrorKind, OperationResult
from .kinds import ChartKind, Family, family_of

SortOrder = Literal["asc", "desc", "label-asc", "label-desc"]
SORT_ORDERS: Final[tuple[str, ...]] = ("asc", "desc", "label-asc", "label-desc")


class ChartDataModel:
    """Chart kind plus the datasets it exclusively owns.

    Args:
        kind: Nominal chart kind.
        datasets: Initial datasets; they must already satisfy the model
            invariants (same family as `kind`, unique labels).
    """

    def __init__(self, kind: ChartKind = ChartKind.bar, datasets: Iterable[Dataset] = ()) -> None:
        self._kind = kind
        self._datasets: tuple[Dataset, ...] = tuple(datasets)

    def __repr__(self) -> str:
        return f"ChartDataModel(kind={self._kind.value!r}, datasets={len(self._datasets)})"

    @property
    def kind(self) -> ChartKind:
        return self._kind

    @property
    def family(self) -> Family:
        return family_of(self._kind)

    @property
    def datasets(self) -> tuple[Dataset, ...]:
        return self._datasets

    def state(self) -> ChartState:
        """Return a read-only snapshot for rendering/persistence consumers."""

        return ChartState(kind=self._kind, datasets=self._datasets)

    def labels(self) -> tuple[str, ...]:
        return tuple(dataset.label for dataset in self._datasets)

    def get(self, label: str) -> Dataset | None:
        """Return the dataset with `label`, or None."""

        for dataset in self._datasets:
            if dataset.label == label:
                return dataset
        return None

    def group_members(self, group_id: str | None) -> tuple[Dataset, ...]:
        """Return datasets assigned to `group_id` in model order."""

        if group_id is None:
            return ()
        return tuple(dataset for dataset in self._datasets if dataset.group_id == group_id)

    def replace_all(self, kind: ChartKind, datasets: Iterable[Dataset]) -> None:
        """Atomically swap kind and datasets.

        The caller is responsible for having validated the new datasets.
        """

        new_datasets = tuple(datasets)
        self._kind = kind
        self._datasets = new_datasets

    def add_dataset(self, dataset: Dataset) -> OperationResult:
        """Append a dataset.

        Args:
            dataset: Dataset to add. It may render as a different kind than the
                chart (mixed mode) but never as a kind from another family.

        Returns:
            OperationResult; `IncompatibleFamily` or `DuplicateLabel` on failure.
        """

        if dataset.family is not self.family:
            return OperationResult.failure(
                ChartErrorKind.incompatible_family,
                f"Dataset {dataset.label!r} is {dataset.family.value} but the chart is {self.family.value}.",
            )
        if self.get(dataset.label) is not None:
            return OperationResult.failure(
                ChartErrorKind.duplicate_label,
                f"A dataset labelled {dataset.label!r} already exists.",
            )
        self._datasets = self._datasets + (dataset,)
        return OperationResult.success()

    def remove_dataset(self, label: str) -> None:
        """Remove the dataset labelled `label`; absent labels are ignored."""

        self._datasets = tuple(dataset for dataset in self._datasets if dataset.label != label)

    def replace_dataset(self, dataset: Dataset) -> OperationResult:
        """Replace the dataset with the same label."""

        if self.get(dataset.label) is None:
            return OperationResult.failure(
                ChartErrorKind.dataset_not_found, f"No dataset labelled {dataset.label!r}."
            )
        if dataset.family is not self.family:
            return OperationResult.failure(
                ChartErrorKind.incompatible_family,
                f"Dataset {dataset.label!r} is {dataset.family.value} but the chart is {self.family.value}.",
            )
        self._datasets = tuple(dataset if d.label == dataset.label else d for d in self._datasets)
        return OperationResult.success()

    def update_point(self, label: str, index: int, point: Point) -> OperationResult:
        """Replace one point of a dataset."""

        dataset, failure = self._locate(label, index=index, point=point)
        if failure is not None:
            return failure
        assert dataset is not None
        points = list(dataset.points)
        points[index] = point
        return self.replace_dataset(dataset.with_changes(points=tuple(points)))

    def append_point(self, label: str, point: Point, color: str | None = None) -> OperationResult:
        """Append a point (and its color) to a dataset.

        Categorical appends also extend `slice_labels` when the dataset carries them.
        """

        dataset, failure = self._locate(label, point=point)
        if failure is not None:
            return failure
        assert dataset is not None
        fill = color or (dataset.colors[-1] if dataset.colors else "#1976d2")
        changes: dict[str, object] = {
            "points": dataset.points + (point,),
            "colors": dataset.colors + (fill,),
        }
        if dataset.slice_labels is not None:
            changes["slice_labels"] = dataset.slice_labels + (point.name,)  # type: ignore[union-attr]
        return self.replace_dataset(dataset.with_changes(**changes))

    def remove_point(self, label: str, index: int) -> OperationResult:
        """Remove one point (and its color/slice label) from a dataset."""

        dataset, failure = self._locate(label, index=index)
        if failure is not None:
            return failure
        assert dataset is not None

        def _drop(values: tuple) -> tuple:
            return values[:index] + values[index + 1 :]

        changes: dict[str, object] = {"points": _drop(dataset.points), "colors": _drop(dataset.colors)}
        if dataset.slice_labels is not None and index < len(dataset.slice_labels):
            changes["slice_labels"] = _drop(dataset.slice_labels)
        return self.replace_dataset(dataset.with_changes(**changes))

    def sort_dataset(self, label: str, order: SortOrder) -> OperationResult:
        """Reorder a dataset's points, keeping colors and slice labels aligned.

        Args:
            label: Dataset to sort.
            order: `asc`/`desc` sort by value (`y` for coordinate points);
                `label-asc`/`label-desc` sort by slice name (`x` for
                coordinate points).

        Returns:
            OperationResult; `DatasetNotFound` for an unknown label.
        """

        dataset, failure = self._locate(label)
        if failure is not None:
            return failure
        assert dataset is not None
        if order not in SORT_ORDERS:
            return OperationResult.failure(ChartErrorKind.action_unavailable, f"Unknown sort order {order!r}.")
        by_label = order.startswith("label-")
        descending = order.endswith("desc")

        def key(idx: int) -> object:
            point = dataset.points[idx]
            if isinstance(point, CategoricalPoint):
                return point.name.casefold() if by_label else point.value
            return point.x if by_label else point.y

        permutation = sorted(range(dataset.point_count), key=key, reverse=descending)
        return self.replace_dataset(_permute(dataset, permutation))

    def reverse_dataset(self, label: str) -> OperationResult:
        """Reverse a dataset's point order along with its colors and slice labels."""

        dataset, failure = self._locate(label)
        if failure is not None:
            return failure
        assert dataset is not None
        return self.replace_dataset(_permute(dataset, list(reversed(range(dataset.point_count)))))

    def rename_slice(self, labels: Iterable[str], index: int, name: str) -> OperationResult:
        """Rename the slice at `index` in every listed categorical dataset at once.

        Either every dataset is renamed or none is.
        """

        new_name = name.strip()
        if not new_name:
            return OperationResult.failure(ChartErrorKind.invalid_dataset, "Slice name must be non-empty.")
        renamed: dict[str, Dataset] = {}
        for label in labels:
            dataset, failure = self._locate(label, index=index)
            if failure is not None:
                return failure
            assert dataset is not None
            if dataset.family is not Family.categorical:
                return OperationResult.failure(
                    ChartErrorKind.incompatible_family,
                    f"Dataset {label!r} has coordinate points, which carry no slice names.",
                )
            points = list(dataset.points)
            points[index] = replace(points[index], name=new_name)  # type: ignore[type-var]
            changes: dict[str, object] = {"points": tuple(points)}
            if dataset.slice_labels is not None and index < len(dataset.slice_labels):
                slice_labels = list(dataset.slice_labels)
                slice_labels[index] = new_name
                changes["slice_labels"] = tuple(slice_labels)
            renamed[label] = dataset.with_changes(**changes)
        self._datasets = tuple(renamed.get(dataset.label, dataset) for dataset in self._datasets)
        return OperationResult.success()

    def relabel_kind(self, kind: ChartKind, *, relabel_datasets: bool = True) -> OperationResult:
        """Change the nominal kind within the current family.

        Args:
            kind: New nominal kind; must share the current family.
            relabel_datasets: When True every dataset adopts `kind` as its
                chart type; when False datasets keep their own (mixed mode).

        Returns:
            OperationResult; `IncompatibleFamily` for a cross-family kind, which
            must go through the TransitionNegotiator instead.
        """

        if family_of(kind) is not self.family:
            return OperationResult.failure(
                ChartErrorKind.incompatible_family,
                f"Switching {self._kind.value!r} to {kind.value!r} crosses families; negotiate the transition.",
            )
        datasets = self._datasets
        if relabel_datasets:
            datasets = tuple(dataset.with_changes(chart_type=kind) for dataset in datasets)
        self.replace_all(kind, datasets)
        return OperationResult.success()

    def _locate(
        self,
        label: str,
        *,
        index: int | None = None,
        point: Point | None = None,
    ) -> tuple[Dataset | None, OperationResult | None]:
        """Resolve a dataset for a point edit, returning a failure when it cannot apply."""

        dataset = self.get(label)
        if dataset is None:
            return None, OperationResult.failure(
                ChartErrorKind.dataset_not_found, f"No dataset labelled {label!r}."
            )
        if index is not None and not 0 <= index < dataset.point_count:
            return None, OperationResult.failure(
                ChartErrorKind.point_not_found,
                f"Dataset {label!r} has no point at index {index}.",
            )
        if point is not None and not isinstance(point, point_class_for(dataset.family)):
            return None, OperationResult.failure(
                ChartErrorKind.incompatible_family,
                f"Dataset {label!r} only accepts {dataset.family.value} points.",
            )
        if dataset.chart_type is ChartKind.bubble and isinstance(point, CoordinatePoint):
            if not has_valid_radius(point):
                return None, OperationResult.failure(
                    ChartErrorKind.invalid_radius,
                    f"Bubble points of {label!r} need a finite radius greater than zero.",
                )
        return dataset, None


def _permute(dataset: Dataset, permutation: list[int]) -> Dataset:
    changes: dict[str, object] = {
        "points": tuple(dataset.points[idx] for idx in permutation),
        "colors": tuple(dataset.colors[idx] for idx in permutation),
    }
    if dataset.slice_labels is not None and len(dataset.slice_labels) == dataset.point_count:
        changes["slice_labels"] = tuple(dataset.slice_labels[idx] for idx in permutation)
    return dataset.with_changes(**changes)
