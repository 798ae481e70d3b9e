"""Per-editor chart session.

A `ChartEditingSession` is created when a user opens a chart and closed when
they leave it. It owns the ChartDataModel, its ModeController and its
TransitionNegotiator, and is the single entry point for UI intents. Nothing
in this package keeps chart state at module level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Sequence

from .builder import (
    CategoricalRow,
    CoordinateRow,
    build_categorical_dataset,
    build_coordinate_dataset,
)
from .dto import ChartMode, ChartState, Dataset, Point, Uniformity
from .errors import ChartErrorKind, OperationResult
from .kinds import DEFAULT_MIXABLE_KINDS, ChartKind, Family, family_of
from .model import ChartDataModel, SortOrder
from .modes import DEFAULT_GROUP_ID, ChartGroup, ModeController
from .samples import SampleGenerator
from .transition import BackupStore, TransitionNegotiator, TransitionProposal
from .validator import validate_dataset

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KindChange:
    """Outcome of a chart kind request.

    Args:
        result: Applied/rejected status of the request itself.
        proposal: Set when the change crosses families and awaits a
            resolution action on the negotiator.
    """

    result: OperationResult
    proposal: TransitionProposal | None = None

    @property
    def needs_negotiation(self) -> bool:
        return self.proposal is not None


class ChartEditingSession:
    """Owner of one chart's model, modes and transition negotiation.

    Args:
        kind: Initial chart kind.
        datasets: Initial datasets (already consistent with `kind`).
        mode: Initial grouping mode.
        uniformity: Initial uniformity mode.
        groups: Known groups.
        active_group_id: Initially selected group.
        backup_store: Per-family snapshot store for transitions.
        sample_generator: Source of sample datasets for transitions.
        mixable_kinds: Kinds allowed to differ in a grouped+mixed group.
        id_factory: Optional group id generator.
    """

    def __init__(
        self,
        *,
        kind: ChartKind = ChartKind.bar,
        datasets: Iterable[Dataset] = (),
        mode: ChartMode = "single",
        uniformity: Uniformity = "uniform",
        groups: Iterable[ChartGroup] = (),
        active_group_id: str = DEFAULT_GROUP_ID,
        backup_store: BackupStore | None = None,
        sample_generator: SampleGenerator | None = None,
        mixable_kinds: frozenset[ChartKind] = DEFAULT_MIXABLE_KINDS,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.model = ChartDataModel(kind, datasets)
        mode_kwargs = {"id_factory": id_factory} if id_factory is not None else {}
        self.modes = ModeController(
            self.model,
            mode=mode,
            uniformity=uniformity,
            groups=groups,
            active_group_id=active_group_id,
            mixable_kinds=mixable_kinds,
            **mode_kwargs,
        )
        self.negotiator = TransitionNegotiator(
            self.model,
            self.modes,
            backup_store=backup_store,
            sample_generator=sample_generator,
        )
        self._closed = False

    def __enter__(self) -> "ChartEditingSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """End the session, discarding any pending transition."""

        if not self._closed:
            self.negotiator.cancel()
            self._closed = True

    def state(self) -> ChartState:
        return self.model.state()

    def change_kind(self, target: ChartKind) -> KindChange:
        """Handle a chart kind request.

        Within-family changes relabel the chart immediately. Cross-family
        changes open a transition proposal and leave the model untouched.
        """

        self._ensure_open()
        if self.negotiator.requires_negotiation(target):
            proposal = self.negotiator.propose(target)
            return KindChange(result=OperationResult.success("Transition requires a resolution."), proposal=proposal)

        if self.negotiator.state == "proposed":
            self.negotiator.cancel()
        if target is self.model.kind:
            return KindChange(result=OperationResult.success())
        relabel = self.modes.relabels_on_kind_change(target)
        result = self.model.relabel_kind(target, relabel_datasets=relabel)
        logger.debug("Relabelled chart kind to %s (datasets relabelled=%s).", target.value, relabel)
        return KindChange(result=result)

    def add_dataset(self, candidate: Dataset) -> OperationResult:
        """Validate a candidate against the active context and append it."""

        self._ensure_open()
        prepared = self.modes.prepare_candidate(candidate)
        checked = validate_dataset(prepared, self.modes.context())
        if not checked.is_valid:
            logger.debug("Rejected dataset %r: %s", candidate.label, checked.error)
            return checked.as_operation()
        assert checked.dataset is not None
        return self.model.add_dataset(checked.dataset)

    def add_dataset_from_rows(
        self,
        label: str,
        rows: Sequence[CategoricalRow] | Sequence[CoordinateRow],
        *,
        chart_type: ChartKind | None = None,
        color: str | None = None,
    ) -> OperationResult:
        """Build a dataset from user rows and add it.

        Args:
            label: Dataset name.
            rows: Categorical rows for categorical kinds, coordinate rows otherwise.
            chart_type: Kind for the new dataset; defaults to the chart kind.
            color: Point color for coordinate datasets.
        """

        self._ensure_open()
        kind = chart_type or self.model.kind
        categorical = family_of(kind) is Family.categorical
        expected = CategoricalRow if categorical else CoordinateRow
        if any(not isinstance(row, expected) for row in rows):
            return OperationResult.failure(
                ChartErrorKind.incompatible_family,
                f"{kind.value!r} datasets are built from {expected.__name__} rows.",
            )
        try:
            if categorical:
                dataset = build_categorical_dataset(label, rows, chart_type=kind)  # type: ignore[arg-type]
            else:
                dataset = build_coordinate_dataset(label, rows, chart_type=kind, color=color)  # type: ignore[arg-type]
        except ValueError as exc:
            return OperationResult.failure(ChartErrorKind.invalid_dataset, str(exc))
        return self.add_dataset(dataset)

    def remove_dataset(self, label: str) -> None:
        self._ensure_open()
        self.model.remove_dataset(label)

    def update_point(self, label: str, index: int, point: Point) -> OperationResult:
        self._ensure_open()
        return self.model.update_point(label, index, point)

    def add_point(self, label: str, point: Point, color: str | None = None) -> OperationResult:
        """Append a point; refused when it would desynchronize a multi-dataset group."""

        self._ensure_open()
        locked = self._group_locked(label)
        if locked is not None:
            return locked
        return self.model.append_point(label, point, color)

    def remove_point(self, label: str, index: int) -> OperationResult:
        """Remove a point; refused when it would desynchronize a multi-dataset group."""

        self._ensure_open()
        locked = self._group_locked(label)
        if locked is not None:
            return locked
        return self.model.remove_point(label, index)

    def sort_dataset(self, label: str, order: SortOrder) -> OperationResult:
        """Sort one dataset; refused when grouped siblings share its slice order."""

        self._ensure_open()
        locked = self._order_locked(label)
        if locked is not None:
            return locked
        return self.model.sort_dataset(label, order)

    def reverse_dataset(self, label: str) -> OperationResult:
        """Reverse one dataset; refused when grouped siblings share its slice order."""

        self._ensure_open()
        locked = self._order_locked(label)
        if locked is not None:
            return locked
        return self.model.reverse_dataset(label)

    def rename_slice(self, index: int, name: str, *, label: str | None = None) -> OperationResult:
        """Rename one slice across every dataset that shares it.

        Args:
            index: Position of the slice.
            name: New slice name.
            label: Dataset whose slice is renamed. When it belongs to a group,
                every member of that group is renamed too. Defaults to the
                active group in grouped mode.
        """

        self._ensure_open()
        if label is not None:
            dataset = self.model.get(label)
            if dataset is None:
                return OperationResult.failure(ChartErrorKind.dataset_not_found, f"No dataset labelled {label!r}.")
            targets = self.model.group_members(dataset.group_id) if dataset.mode == "grouped" else (dataset,)
        elif self.modes.mode == "grouped":
            targets = self.model.group_members(self.modes.active_group_id)
        else:
            targets = ()
        if not targets:
            return OperationResult.failure(ChartErrorKind.dataset_not_found, "No dataset holds that slice.")
        return self.model.rename_slice([dataset.label for dataset in targets], index, name)

    def create_group(self, name: str) -> ChartGroup:
        self._ensure_open()
        return self.modes.create_group(name)

    def rename_group(self, group_id: str, name: str) -> OperationResult:
        self._ensure_open()
        return self.modes.rename_group(group_id, name)

    def delete_group(self, group_id: str) -> OperationResult:
        self._ensure_open()
        return self.modes.delete_group(group_id)

    def set_mode(self, mode: ChartMode, *, assignments: Mapping[str, str] | None = None) -> OperationResult:
        self._ensure_open()
        return self.modes.set_mode(mode, assignments=assignments)

    def set_uniformity(self, uniformity: Uniformity) -> OperationResult:
        self._ensure_open()
        return self.modes.set_uniformity(uniformity)

    def select_group(self, group_id: str) -> OperationResult:
        self._ensure_open()
        return self.modes.select_group(group_id)

    def _group_locked(self, label: str) -> OperationResult | None:
        dataset = self.model.get(label)
        if dataset is None or dataset.mode != "grouped":
            return None
        if len(self.model.group_members(dataset.group_id)) > 1:
            return OperationResult.failure(
                ChartErrorKind.group_size_mismatch,
                "Points cannot be added or removed while other datasets share this group.",
            )
        return None

    def _order_locked(self, label: str) -> OperationResult | None:
        dataset = self.model.get(label)
        if dataset is None or dataset.mode != "grouped" or dataset.family is not Family.categorical:
            return None
        if len(self.model.group_members(dataset.group_id)) > 1:
            return OperationResult.failure(
                ChartErrorKind.slice_label_mismatch,
                "Slices cannot be reordered while other datasets share this group.",
            )
        return None

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("This chart editing session is closed.")
