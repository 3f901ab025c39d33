"""
Commit writer: applies aggregated totals to the ownership store.

ADD increments counts and marks the card as needing binder placement.
REPLACE overwrites only the finishes present in the import and leaves
placement state alone.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError

from vaultimport.db.ownership_store import OwnershipStore
from vaultimport.models.records import AggregateEntry, ImportMode, OwnershipRecord

logger = logging.getLogger(__name__)


def apply_aggregate(
    record: OwnershipRecord | None,
    entry: AggregateEntry,
    mode: ImportMode,
    now: datetime,
) -> OwnershipRecord:
    """
    Compute the new ownership state for one card.

    Args:
        record: Current ownership, or None if the card was never owned
        entry: Batch totals for the card
        mode: ADD or REPLACE
        now: Timestamp used for needs-placement marking

    Returns:
        The record to persist
    """
    current = record or OwnershipRecord(card_id=entry.card_id)

    if mode == ImportMode.REPLACE:
        return replace(
            current,
            quantity=entry.regular_quantity if entry.has_regular else current.quantity,
            foil_quantity=entry.foil_quantity if entry.has_foil else current.foil_quantity,
        )

    return replace(
        current,
        quantity=current.quantity + entry.regular_quantity,
        foil_quantity=current.foil_quantity + entry.foil_quantity,
        needs_placement_at=now if entry.has_new_copies else current.needs_placement_at,
    )


async def commit_aggregates(
    ownership: OwnershipStore,
    entries: Iterable[AggregateEntry],
    mode: ImportMode,
    now: datetime | None = None,
) -> list[str]:
    """
    Write every entry to the ownership store.

    Each entry is written in its own savepoint, so a failed save is
    recorded and the remaining entries are still written.

    Returns:
        Error messages, one per failed entry
    """
    now = now or datetime.now(UTC)
    errors: list[str] = []

    for entry in entries:
        try:
            async with ownership.savepoint():
                current = await ownership.get(entry.card_id)
                await ownership.upsert(apply_aggregate(current, entry, mode, now))
        except SQLAlchemyError as e:
            logger.error("Failed to save %s: %s", entry.card_name, e)
            errors.append(f"Failed to save {entry.card_name}: {e}")

    return errors
