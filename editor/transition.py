"""Negotiation of chart-kind changes that cross the family boundary.

Categorical and coordinate datasets have disjoint point schemas, so switching
between families cannot keep the current data. The negotiator moves through
`idle -> proposed -> resolved | cancelled` and never drops data silently:
every resolution first snapshots the family being left into the backup store,
so the opposite transition can later offer `restore()`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterable, Literal, Protocol, Sequence

from .builder import CoordinateRow, ManualDatasetDraft, build_coordinate_dataset, manual_draft
from .dto import CategoricalPoint, CoordinatePoint, Dataset
from .errors import ChartErrorKind, OperationResult
from .kinds import ChartKind, Direction, Family, family_of, transition_direction
from .model import ChartDataModel
from .modes import ModeController
from .samples import DefaultSampleGenerator, SampleGenerator
from .validator import ValidationContext, validate_dataset

logger = logging.getLogger(__name__)

TransitionState = Literal["idle", "proposed", "resolved", "cancelled"]

MIN_BUBBLE_RADIUS: Final[float] = 5.0
MAX_BUBBLE_RADIUS: Final[float] = 20.0


class TransitionAction(str, Enum):
    """Resolution actions a proposal may offer."""

    restore = "restore"
    load_sample = "load_sample"
    quick_transform = "quick_transform"
    create_manually = "create_manually"
    cancel = "cancel"


class BackupStore(Protocol):
    """Most-recent dataset snapshot per family (two slots)."""

    def get(self, family: Family) -> tuple[Dataset, ...] | None: ...

    def put(self, family: Family, datasets: Sequence[Dataset]) -> None: ...


class InMemoryBackupStore:
    """Backup store kept for the lifetime of one editing session."""

    def __init__(self) -> None:
        self._slots: dict[Family, tuple[Dataset, ...]] = {}

    def get(self, family: Family) -> tuple[Dataset, ...] | None:
        return self._slots.get(family)

    def put(self, family: Family, datasets: Sequence[Dataset]) -> None:
        self._slots[family] = tuple(datasets)


@dataclass(frozen=True, slots=True)
class TransitionProposal:
    """A pending cross-family kind change awaiting the user's choice.

    Args:
        source_kind: Chart kind when the change was requested.
        target_kind: Requested chart kind.
        direction: `toCoordinate` or `toCategorical`.
        has_backup: Whether a snapshot of the target family exists.
        token: Identifies this proposal; superseded tokens are rejected.
    """

    source_kind: ChartKind
    target_kind: ChartKind
    direction: Direction
    has_backup: bool
    token: int

    @property
    def available_actions(self) -> tuple[TransitionAction, ...]:
        """Actions the user may pick for this proposal."""

        actions: list[TransitionAction] = []
        if self.has_backup:
            actions.append(TransitionAction.restore)
        actions.append(TransitionAction.load_sample)
        if self.direction == "toCoordinate":
            actions.extend((TransitionAction.quick_transform, TransitionAction.create_manually))
        actions.append(TransitionAction.cancel)
        return tuple(actions)

    def offers(self, action: TransitionAction) -> bool:
        return action in self.available_actions


def quick_transform_datasets(datasets: Iterable[Dataset], target: ChartKind) -> tuple[Dataset, ...]:
    """Map categorical datasets onto coordinate points.

    Each point `{name, value}` at position i becomes `{x: i, y: value}`. Bubble
    targets get `r` scaled from |value| into [MIN_BUBBLE_RADIUS, MAX_BUBBLE_RADIUS]
    relative to the largest |value| of the dataset.

    Args:
        datasets: Categorical datasets to convert.
        target: Scatter or bubble.

    Returns:
        Converted datasets (labels, colors and grouping preserved).
    """

    converted = []
    for dataset in datasets:
        values = [point.value for point in dataset.points if isinstance(point, CategoricalPoint)]
        peak = max((abs(value) for value in values), default=0.0)
        points = []
        for idx, value in enumerate(values):
            radius = None
            if target is ChartKind.bubble:
                scale = abs(value) / peak if peak else 0.0
                radius = round(MIN_BUBBLE_RADIUS + scale * (MAX_BUBBLE_RADIUS - MIN_BUBBLE_RADIUS), 2)
            points.append(CoordinatePoint(x=float(idx), y=value, r=radius))
        converted.append(dataset.with_changes(chart_type=target, points=tuple(points), slice_labels=None))
    return tuple(converted)


class TransitionNegotiator:
    """State machine for cross-family chart kind changes.

    Args:
        model: Chart being edited.
        modes: Mode controller of the same chart.
        backup_store: Per-family snapshot store.
        sample_generator: Source of sample datasets.
    """

    def __init__(
        self,
        model: ChartDataModel,
        modes: ModeController,
        *,
        backup_store: BackupStore | None = None,
        sample_generator: SampleGenerator | None = None,
    ) -> None:
        self._model = model
        self._modes = modes
        self.backup_store: BackupStore = backup_store if backup_store is not None else InMemoryBackupStore()
        self._samples: SampleGenerator = sample_generator or DefaultSampleGenerator()
        self._state: TransitionState = "idle"
        self._proposal: TransitionProposal | None = None
        self._draft: ManualDatasetDraft | None = None
        self._tokens = 0

    @property
    def state(self) -> TransitionState:
        return self._state

    @property
    def proposal(self) -> TransitionProposal | None:
        return self._proposal

    @property
    def draft(self) -> ManualDatasetDraft | None:
        """Open manual-creation form, when `create_manually()` is in progress."""

        return self._draft

    def requires_negotiation(self, target: ChartKind) -> bool:
        """Return True when switching to `target` crosses families."""

        return family_of(target) is not self._model.family

    def propose(self, target: ChartKind) -> TransitionProposal:
        """Enter `proposed` for a cross-family kind change.

        A new proposal supersedes any pending one (its draft is discarded).

        Raises:
            ValueError: When `target` is in the chart's current family.
        """

        if not self.requires_negotiation(target):
            raise ValueError(
                f"{self._model.kind.value!r} -> {target.value!r} stays within one family; relabel the kind instead."
            )
        self._tokens += 1
        backup = self.backup_store.get(family_of(target))
        self._proposal = TransitionProposal(
            source_kind=self._model.kind,
            target_kind=target,
            direction=transition_direction(target),
            has_backup=bool(backup),
            token=self._tokens,
        )
        self._draft = None
        self._state = "proposed"
        logger.info(
            "Proposed %s transition %s -> %s (backup=%s).",
            self._proposal.direction,
            self._proposal.source_kind.value,
            target.value,
            self._proposal.has_backup,
        )
        return self._proposal

    def restore(self) -> OperationResult:
        """Replace the datasets with the target family's backup."""

        proposal, failure = self._require(TransitionAction.restore)
        if failure is not None:
            return failure
        assert proposal is not None
        backup = self.backup_store.get(family_of(proposal.target_kind))
        if not backup:
            return OperationResult.failure(
                ChartErrorKind.missing_backup,
                f"No {family_of(proposal.target_kind).value} backup is available to restore.",
            )
        return self._resolve(proposal, backup, action=TransitionAction.restore)

    def load_sample(self) -> OperationResult:
        """Install sample data for the requested kind."""

        proposal, failure = self._require(TransitionAction.load_sample)
        if failure is not None:
            return failure
        assert proposal is not None
        samples = tuple(self._modes.prepare_candidate(d) for d in self._samples.generate(proposal.target_kind))
        return self._resolve(proposal, samples, action=TransitionAction.load_sample)

    def quick_transform(self) -> OperationResult:
        """Convert the current categorical datasets into coordinate datasets."""

        proposal, failure = self._require(TransitionAction.quick_transform)
        if failure is not None:
            return failure
        assert proposal is not None
        current = self._model.datasets
        if not current or all(dataset.point_count == 0 for dataset in current):
            return OperationResult.failure(
                ChartErrorKind.not_transformable, "There is no categorical data to transform."
            )
        return self._resolve(
            proposal,
            quick_transform_datasets(current, proposal.target_kind),
            action=TransitionAction.quick_transform,
        )

    def create_manually(self) -> OperationResult:
        """Open a manual dataset form; the proposal stays pending until it completes."""

        proposal, failure = self._require(TransitionAction.create_manually)
        if failure is not None:
            return failure
        assert proposal is not None
        self._draft = manual_draft(proposal.target_kind, existing_count=len(self._model.datasets))
        return OperationResult.success()

    def complete_manual(
        self,
        label: str,
        rows: Sequence[CoordinateRow],
        *,
        color: str | None = None,
        token: int | None = None,
    ) -> OperationResult:
        """Finish a manual dataset and install it as the chart's only dataset.

        Args:
            label: Dataset name entered by the user.
            rows: Coordinate rows entered by the user.
            color: Point color; defaults to the draft color.
            token: Proposal token the form was opened for; a mismatch means the
                proposal was superseded and the completion is ignored.
        """

        proposal = self._proposal
        if self._state != "proposed" or proposal is None or self._draft is None:
            return OperationResult.failure(ChartErrorKind.action_unavailable, "No manual dataset form is open.")
        if token is not None and token != proposal.token:
            return OperationResult.failure(
                ChartErrorKind.action_unavailable, "The transition this form belongs to was superseded."
            )
        try:
            dataset = build_coordinate_dataset(
                label,
                rows,
                chart_type=proposal.target_kind,
                color=color or self._draft.color,
            )
        except ValueError as exc:
            return OperationResult.failure(ChartErrorKind.invalid_dataset, str(exc))

        dataset = self._modes.prepare_candidate(dataset)
        checked = validate_dataset(dataset, ValidationContext(family=family_of(proposal.target_kind)))
        if not checked.is_valid:
            return checked.as_operation()
        assert checked.dataset is not None
        return self._resolve(proposal, (checked.dataset,), action=TransitionAction.create_manually)

    def cancel_manual(self) -> OperationResult:
        """Close the manual form; the proposal stays pending."""

        if self._draft is None:
            return OperationResult.failure(ChartErrorKind.action_unavailable, "No manual dataset form is open.")
        self._draft = None
        return OperationResult.success()

    def cancel(self) -> OperationResult:
        """Abandon the pending proposal; the model is untouched."""

        if self._state == "proposed":
            logger.info("Cancelled transition to %s.", self._proposal.target_kind.value if self._proposal else "?")
            self._state = "cancelled"
        self._proposal = None
        self._draft = None
        return OperationResult.success()

    def _require(self, action: TransitionAction) -> tuple[TransitionProposal | None, OperationResult | None]:
        """Return the pending proposal, or a failure when `action` is not offered."""

        proposal = self._proposal
        if self._state != "proposed" or proposal is None:
            return None, OperationResult.failure(
                ChartErrorKind.action_unavailable, "There is no pending chart type transition."
            )
        if action is TransitionAction.restore and not proposal.has_backup:
            return None, OperationResult.failure(
                ChartErrorKind.missing_backup,
                f"No {family_of(proposal.target_kind).value} backup is available to restore.",
            )
        if not proposal.offers(action):
            return None, OperationResult.failure(
                ChartErrorKind.action_unavailable,
                f"{action.value} is not available when moving {proposal.direction}.",
            )
        return proposal, None

    def _resolve(
        self,
        proposal: TransitionProposal,
        datasets: Sequence[Dataset],
        *,
        action: TransitionAction,
    ) -> OperationResult:
        """Back up the family being left, then install `datasets` under the target kind."""

        leaving = self._model.family
        current = self._model.datasets
        if current:
            self.backup_store.put(leaving, current)
        self._model.replace_all(proposal.target_kind, datasets)
        self._modes.sync_with_model()
        self._state = "resolved"
        self._proposal = None
        self._draft = None
        logger.info(
            "Resolved transition to %s via %s (%d datasets; %s backed up).",
            proposal.target_kind.value,
            action.value,
            len(datasets),
            leaving.value if current else "nothing",
        )
        return OperationResult.success()
