"""Typed error kinds and result containers for editor operations.

Failures are returned to the caller instead of raised, so UI code can present
the choice to the user. A failed operation never mutates the chart.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .dto import Dataset


class ChartErrorKind(str, Enum):
    """Reasons an editor operation can be rejected."""

    incompatible_family = "IncompatibleFamily"
    group_size_mismatch = "GroupSizeMismatch"
    slice_label_mismatch = "SliceLabelMismatch"
    chart_type_locked = "ChartTypeLockedInUniformGroup"
    kind_not_mixable = "KindNotMixable"
    invalid_radius = "InvalidRadius"
    not_transformable = "NotTransformable"
    mixed_types_present = "MixedTypesPresent"
    missing_backup = "MissingBackup"
    duplicate_label = "DuplicateLabel"
    dataset_not_found = "DatasetNotFound"
    point_not_found = "PointNotFound"
    action_unavailable = "ActionUnavailable"
    invalid_dataset = "InvalidDataset"


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a mutating editor operation.

    Args:
        ok: True when the operation was applied.
        error: Error kind when the operation was rejected.
        message: Human-readable detail intended for UI display.
    """

    ok: bool
    error: ChartErrorKind | None = None
    message: str = ""

    @classmethod
    def success(cls, message: str = "") -> "OperationResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, error: ChartErrorKind, message: str) -> "OperationResult":
        return cls(ok=False, error=error, message=message)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating a candidate dataset.

    Args:
        is_valid: True when every rule passed.
        dataset: The candidate as it should be installed (slice labels may have
            been adopted from the group); None when invalid.
        error: First violated rule.
        message: Human-readable detail for the violated rule.
    """

    is_valid: bool
    dataset: "Dataset | None" = None
    error: ChartErrorKind | None = None
    message: str = ""

    def as_operation(self) -> OperationResult:
        """Convert to an OperationResult for callers that only need ok/error."""

        if self.is_valid:
            return OperationResult.success(self.message)
        assert self.error is not None
        return OperationResult.failure(self.error, self.message)
