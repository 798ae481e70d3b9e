"""Structural validation of candidate datasets.

Rules run in a fixed order and the first failure wins. The only automatic
adjustment is adopting the group's slice labels when the candidate has none.
"""

from __future__ import annotations

from dataclasses import dataclass

from .dto import ChartMode, CoordinatePoint, Dataset, Uniformity, has_valid_radius
from .errors import ChartErrorKind, ValidationResult
from .kinds import DEFAULT_MIXABLE_KINDS, ChartKind, Family


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """What a candidate dataset is checked against.

    Args:
        family: Family the chart currently requires.
        mode: Chart grouping mode.
        uniformity: Group uniformity (only meaningful when grouped).
        siblings: Datasets of the active group, in model order.
        mixable_kinds: Kinds allowed to differ inside a grouped+mixed group.
    """

    family: Family
    mode: ChartMode = "single"
    uniformity: Uniformity = "uniform"
    siblings: tuple[Dataset, ...] = ()
    mixable_kinds: frozenset[ChartKind] = DEFAULT_MIXABLE_KINDS


def validate_dataset(candidate: Dataset, context: ValidationContext) -> ValidationResult:
    """Validate a candidate dataset against the chart context.

    Args:
        candidate: Dataset the user wants to add.
        context: Current chart family, mode, uniformity and group siblings.

    Returns:
        ValidationResult carrying the dataset to install (slice labels adopted
        when missing) or the first violated rule.
    """

    if candidate.family is not context.family:
        return _invalid(
            ChartErrorKind.incompatible_family,
            f"Dataset {candidate.label!r} is {candidate.family.value}; the chart requires {context.family.value}.",
        )

    grouped = context.mode == "grouped" and bool(context.siblings)
    if grouped:
        anchor = context.siblings[0]
        if candidate.point_count != anchor.point_count:
            return _invalid(
                ChartErrorKind.group_size_mismatch,
                f"Dataset {candidate.label!r} has {candidate.point_count} points; "
                f"the group expects {anchor.point_count}.",
            )

        if candidate.family is Family.categorical:
            group_labels = anchor.effective_slice_labels() or ()
            if candidate.slice_labels is None:
                candidate = candidate.with_changes(slice_labels=group_labels)
            elif candidate.slice_labels != group_labels:
                mismatch = _first_mismatch(candidate.slice_labels, group_labels)
                return _invalid(
                    ChartErrorKind.slice_label_mismatch,
                    f"Dataset {candidate.label!r} slice {mismatch} does not match the group's slice labels.",
                )

        if candidate.chart_type is not anchor.chart_type:
            if context.uniformity == "uniform":
                return _invalid(
                    ChartErrorKind.chart_type_locked,
                    f"The group is locked to {anchor.chart_type.value!r}; "
                    f"{candidate.chart_type.value!r} requires mixed uniformity.",
                )
            unmixable = sorted(
                kind.value
                for kind in (candidate.chart_type, anchor.chart_type)
                if kind not in context.mixable_kinds
            )
            if unmixable:
                return _invalid(
                    ChartErrorKind.kind_not_mixable,
                    f"Chart kinds {unmixable} cannot be mixed with other kinds in one group.",
                )

    if candidate.chart_type is ChartKind.bubble:
        for idx, point in enumerate(candidate.points):
            if not isinstance(point, CoordinatePoint) or not has_valid_radius(point):
                return _invalid(
                    ChartErrorKind.invalid_radius,
                    f"Bubble point {idx} of {candidate.label!r} needs a finite radius greater than zero.",
                )

    return ValidationResult(is_valid=True, dataset=candidate)


def _invalid(error: ChartErrorKind, message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error=error, message=message)


def _first_mismatch(a: tuple[str, ...], b: tuple[str, ...]) -> int:
    """Return the first position where two label tuples differ."""

    for idx, (left, right) in enumerate(zip(a, b)):
        if left != right:
            return idx
    return min(len(a), len(b))
