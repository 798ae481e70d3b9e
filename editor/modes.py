"""Grouping mode, uniformity mode and group selection.

The ModeController owns the chart-level `mode` (single/grouped) and
`uniformity` (uniform/mixed) flags, the group registry, and the active group.
It derives the validation context used for new datasets and re-keys datasets
when the grouping mode changes.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Mapping

from .dto import ChartMode, Dataset, Uniformity
from .errors import ChartErrorKind, OperationResult
from .kinds import DEFAULT_MIXABLE_KINDS, SLICE_ONLY_KINDS, ChartKind, kinds_in_family
from .model import ChartDataModel
from .validator import ValidationContext, validate_dataset

logger = logging.getLogger(__name__)

DEFAULT_GROUP_ID = "default"


@dataclass(frozen=True, slots=True)
class ChartGroup:
    """A named set of datasets sharing one slice/point structure.

    Args:
        id: Stable identifier stored on member datasets as `group_id`.
        name: Display name.
        is_default: The default group cannot be renamed or deleted.
    """

    id: str
    name: str
    is_default: bool = False


def _new_group_id() -> str:
    return uuid.uuid4().hex[:12]


class ModeController:
    """Mode/uniformity state machine bound to one ChartDataModel.

    Args:
        model: The chart being edited.
        mode: Initial grouping mode.
        uniformity: Initial uniformity mode.
        groups: Known groups; the default group is always registered.
        active_group_id: Group consulted for sibling validation.
        mixable_kinds: Kinds allowed to differ inside a grouped+mixed group.
        id_factory: Generator for fresh group ids.
    """

    def __init__(
        self,
        model: ChartDataModel,
        *,
        mode: ChartMode = "single",
        uniformity: Uniformity = "uniform",
        groups: Iterable[ChartGroup] = (),
        active_group_id: str = DEFAULT_GROUP_ID,
        mixable_kinds: frozenset[ChartKind] = DEFAULT_MIXABLE_KINDS,
        id_factory: Callable[[], str] = _new_group_id,
    ) -> None:
        self._model = model
        self._mode: ChartMode = mode
        self._uniformity: Uniformity = uniformity
        self._groups: dict[str, ChartGroup] = {
            DEFAULT_GROUP_ID: ChartGroup(id=DEFAULT_GROUP_ID, name="Default", is_default=True)
        }
        for group in groups:
            self._groups[group.id] = group
        self._active_group_id = active_group_id
        self._ensure_group(active_group_id)
        self.mixable_kinds = frozenset(mixable_kinds)
        self._id_factory = id_factory

    @property
    def mode(self) -> ChartMode:
        return self._mode

    @property
    def uniformity(self) -> Uniformity:
        return self._uniformity

    @property
    def active_group_id(self) -> str:
        return self._active_group_id

    @property
    def groups(self) -> tuple[ChartGroup, ...]:
        return tuple(self._groups.values())

    def siblings(self) -> tuple[Dataset, ...]:
        """Return the active group's datasets (empty in single mode)."""

        if self._mode != "grouped":
            return ()
        return self._model.group_members(self._active_group_id)

    def context(self) -> ValidationContext:
        """Return the validation context for a dataset added right now."""

        return ValidationContext(
            family=self._model.family,
            mode=self._mode,
            uniformity=self._uniformity,
            siblings=self.siblings(),
            mixable_kinds=self.mixable_kinds,
        )

    def prepare_candidate(self, dataset: Dataset) -> Dataset:
        """Key a candidate dataset to the current mode and active group."""

        if self._mode == "grouped":
            return dataset.with_changes(mode="grouped", group_id=self._active_group_id)
        return dataset.with_changes(mode="single", group_id=None)

    def available_kinds(self) -> tuple[ChartKind, ...]:
        """Return the chart kinds a new dataset may use in the current state."""

        family_kinds = kinds_in_family(self._model.family)
        if self._mode == "single":
            return family_kinds
        if self._uniformity == "mixed":
            return tuple(kind for kind in family_kinds if kind in self.mixable_kinds)
        siblings = self.siblings()
        if siblings:
            return (siblings[0].chart_type,)
        return tuple(kind for kind in family_kinds if kind not in SLICE_ONLY_KINDS)

    def create_group(self, name: str) -> ChartGroup:
        """Register a new, empty group (it is not selected)."""

        label = name.strip() or f"Group {len(self._groups) + 1}"
        group = ChartGroup(id=self._id_factory(), name=label)
        self._groups[group.id] = group
        return group

    def select_group(self, group_id: str) -> OperationResult:
        """Select the group whose datasets act as validation siblings.

        Selection never mutates datasets. Unknown ids are registered as new
        empty groups.
        """

        if not group_id.strip():
            return OperationResult.failure(ChartErrorKind.action_unavailable, "Group id must be non-empty.")
        self._ensure_group(group_id)
        self._active_group_id = group_id
        return OperationResult.success()

    def rename_group(self, group_id: str, name: str) -> OperationResult:
        """Give a group a new display name; the default group keeps its name."""

        group = self._groups.get(group_id)
        if group is None:
            return OperationResult.failure(ChartErrorKind.action_unavailable, f"No group with id {group_id!r}.")
        if group.is_default:
            return OperationResult.failure(ChartErrorKind.action_unavailable, "The default group cannot be renamed.")
        if not name.strip():
            return OperationResult.failure(ChartErrorKind.action_unavailable, "Group name must be non-empty.")
        self._groups[group_id] = replace(group, name=name.strip())
        return OperationResult.success()

    def delete_group(self, group_id: str) -> OperationResult:
        """Delete a group, moving its datasets into the default group.

        The move is validated against the default group's current members and
        is refused atomically when it would break their point count, slice
        labels or chart type. Deleting the active group selects the default
        group.
        """

        group = self._groups.get(group_id)
        if group is None:
            return OperationResult.failure(ChartErrorKind.action_unavailable, f"No group with id {group_id!r}.")
        if group.is_default:
            return OperationResult.failure(ChartErrorKind.action_unavailable, "The default group cannot be deleted.")

        members = list(self._model.group_members(DEFAULT_GROUP_ID))
        moved: dict[str, Dataset] = {}
        for dataset in self._model.group_members(group_id):
            result = validate_dataset(
                dataset.with_changes(group_id=DEFAULT_GROUP_ID),
                ValidationContext(
                    family=self._model.family,
                    mode="grouped",
                    uniformity=self._uniformity,
                    siblings=tuple(members),
                    mixable_kinds=self.mixable_kinds,
                ),
            )
            if not result.is_valid:
                return result.as_operation()
            assert result.dataset is not None
            members.append(result.dataset)
            moved[dataset.label] = result.dataset

        if moved:
            self._model.replace_all(
                self._model.kind,
                (moved.get(dataset.label, dataset) for dataset in self._model.datasets),
            )
        del self._groups[group_id]
        if self._active_group_id == group_id:
            self._active_group_id = DEFAULT_GROUP_ID
        logger.info("Deleted group %s; %d datasets moved to the default group.", group_id, len(moved))
        return OperationResult.success()

    def set_mode(self, mode: ChartMode, *, assignments: Mapping[str, str] | None = None) -> OperationResult:
        """Switch between single and grouped mode.

        Args:
            mode: Target grouping mode.
            assignments: Optional dataset label -> group id mapping used when
                entering grouped mode; unlisted datasets join one fresh group.

        Returns:
            OperationResult; grouping that would break group invariants (point
            count, slice labels, uniform chart type) is rejected atomically.
        """

        if mode == "single":
            datasets = tuple(
                dataset.with_changes(mode="single", group_id=None) for dataset in self._model.datasets
            )
            self._model.replace_all(self._model.kind, datasets)
            self._mode = "single"
            logger.info("Chart switched to single mode (%d datasets).", len(datasets))
            return OperationResult.success()

        if self._mode == "grouped" and assignments is None:
            return OperationResult.success()

        assignments = dict(assignments or {})
        fresh_id = self._id_factory()
        grouped: list[Dataset] = []
        for dataset in self._model.datasets:
            group_id = assignments.get(dataset.label, fresh_id)
            candidate = dataset.with_changes(mode="grouped", group_id=group_id)
            members = tuple(d for d in grouped if d.group_id == group_id)
            result = validate_dataset(
                candidate,
                ValidationContext(
                    family=self._model.family,
                    mode="grouped",
                    uniformity=self._uniformity,
                    siblings=members,
                    mixable_kinds=self.mixable_kinds,
                ),
            )
            if not result.is_valid:
                return result.as_operation()
            assert result.dataset is not None
            grouped.append(result.dataset)

        used_ids = [d.group_id for d in grouped if d.group_id is not None]
        for group_id in dict.fromkeys(used_ids or [fresh_id]):
            self._ensure_group(group_id)

        self._model.replace_all(self._model.kind, grouped)
        self._mode = "grouped"
        self._active_group_id = used_ids[0] if used_ids else fresh_id
        logger.info(
            "Chart switched to grouped mode (%d datasets, active group %s).",
            len(grouped),
            self._active_group_id,
        )
        return OperationResult.success()

    def set_uniformity(self, uniformity: Uniformity) -> OperationResult:
        """Switch uniformity; mixed -> uniform requires one chart type in the active group."""

        if uniformity == "uniform" and self._uniformity == "mixed":
            kinds = {dataset.chart_type for dataset in self._model.group_members(self._active_group_id)}
            if len(kinds) > 1:
                return OperationResult.failure(
                    ChartErrorKind.mixed_types_present,
                    f"The active group mixes {sorted(kind.value for kind in kinds)}; reconcile chart types first.",
                )
        self._uniformity = uniformity
        return OperationResult.success()

    def relabels_on_kind_change(self, kind: ChartKind) -> bool:
        """Decide whether a within-family kind change relabels every dataset.

        Grouped+mixed charts keep per-dataset kinds when the new kind is
        mixable. A non-mixable kind forces the chart back to uniform.
        """

        if self._mode == "grouped" and self._uniformity == "mixed":
            if kind in self.mixable_kinds:
                return False
            logger.info("Kind %s cannot be mixed; switching uniformity to uniform.", kind.value)
            self._uniformity = "uniform"
        return True

    def sync_with_model(self) -> None:
        """Re-derive mode, groups and uniformity after a wholesale replacement."""

        datasets = self._model.datasets
        if not datasets:
            return
        group_ids = [d.group_id for d in datasets if d.mode == "grouped" and d.group_id is not None]
        if not group_ids:
            self._mode = "single"
            return
        self._mode = "grouped"
        for group_id in group_ids:
            self._ensure_group(group_id)
        if self._active_group_id not in group_ids:
            self._active_group_id = group_ids[0]
        for group_id in set(group_ids):
            kinds = {d.chart_type for d in self._model.group_members(group_id)}
            if len(kinds) > 1:
                self._uniformity = "mixed"
                break

    def _ensure_group(self, group_id: str) -> None:
        if group_id not in self._groups:
            self._groups[group_id] = ChartGroup(id=group_id, name=f"Group {len(self._groups) + 1}")
