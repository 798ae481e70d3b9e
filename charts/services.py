"""Load and store chart editing sessions.

The editor package is pure; this module is the only place that turns a
`ChartDocument` into a `ChartEditingSession` and writes the session back.
"""

from __future__ import annotations

import logging
from typing import Sequence

from django.conf import settings
from django.db import transaction

from charts.models import ChartBackup, ChartDocument
from editor.codec import decode_chart_state, decode_datasets, encode_datasets
from editor.dto import Dataset
from editor.kinds import DEFAULT_MIXABLE_KINDS, ChartKind, Family, parse_chart_kind, parse_chart_kinds
from editor.modes import ChartGroup
from editor.session import ChartEditingSession

logger = logging.getLogger(__name__)


class DocumentBackupStore:
    """Backup store that keeps one ChartBackup row per document and family."""

    def __init__(self, document: ChartDocument) -> None:
        self._document = document

    def get(self, family: Family) -> tuple[Dataset, ...] | None:
        backup = ChartBackup.objects.filter(document=self._document, family=family.value).first()
        if backup is None:
            return None
        return decode_datasets(backup.datasets)

    def put(self, family: Family, datasets: Sequence[Dataset]) -> None:
        ChartBackup.objects.update_or_create(
            document=self._document,
            family=family.value,
            defaults={"datasets": encode_datasets(datasets)},
        )
        logger.debug("Stored %s backup for chart %s (%d datasets).", family.value, self._document.pk, len(datasets))


def configured_mixable_kinds() -> frozenset[ChartKind]:
    """Return the mixable chart kinds from settings.

    Raises:
        ValueError: When the setting names an unknown chart kind.
    """

    raw = getattr(settings, "CHART_EDITOR_MIXABLE_KINDS", None)
    if raw is None:
        return DEFAULT_MIXABLE_KINDS
    return parse_chart_kinds(raw)


def _decode_groups(payload: object) -> tuple[ChartGroup, ...]:
    if not isinstance(payload, list):
        return ()
    groups = []
    for item in payload:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        groups.append(
            ChartGroup(
                id=str(item["id"]),
                name=str(item.get("name") or item["id"]),
                is_default=bool(item.get("is_default", False)),
            )
        )
    return tuple(groups)


def _encode_groups(groups: Sequence[ChartGroup]) -> list[dict[str, object]]:
    return [{"id": group.id, "name": group.name, "is_default": group.is_default} for group in groups]


def open_session(document: ChartDocument) -> ChartEditingSession:
    """Build an editing session from a stored chart.

    A stored pending transition is proposed again so the user can still pick a
    resolution action; an open manual form is reopened with it.

    Args:
        document: The stored chart.

    Returns:
        A session whose backups are read from and written to the database.

    Raises:
        ValueError: When the stored payload cannot be decoded.
    """

    state = decode_chart_state({"kind": document.kind, "datasets": document.datasets})
    session = ChartEditingSession(
        kind=state.kind,
        datasets=state.datasets,
        mode=document.mode,  # type: ignore[arg-type]
        uniformity=document.uniformity,  # type: ignore[arg-type]
        groups=_decode_groups(document.groups),
        active_group_id=document.active_group_id or "default",
        backup_store=DocumentBackupStore(document),
        mixable_kinds=configured_mixable_kinds(),
    )
    if document.pending_kind:
        pending = parse_chart_kind(document.pending_kind)
        if session.negotiator.requires_negotiation(pending):
            session.change_kind(pending)
            if document.manual_form_open:
                session.negotiator.create_manually()
    return session


def save_session(document: ChartDocument, session: ChartEditingSession) -> ChartDocument:
    """Write the session state back onto its document.

    Args:
        document: The stored chart the session was opened from.
        session: The session to persist.

    Returns:
        The saved document.
    """

    model = session.model
    modes = session.modes
    proposal = session.negotiator.proposal
    with transaction.atomic():
        document.kind = model.kind.value
        document.datasets = encode_datasets(model.datasets)
        document.mode = modes.mode
        document.uniformity = modes.uniformity
        document.active_group_id = modes.active_group_id
        document.groups = _encode_groups(modes.groups)
        document.pending_kind = proposal.target_kind.value if proposal is not None else ""
        document.manual_form_open = proposal is not None and session.negotiator.draft is not None
        document.save()
    logger.debug("Saved chart %s as %s with %d datasets.", document.pk, document.kind, len(model.datasets))
    return document
