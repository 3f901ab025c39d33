"""
Ownership store backed by the collection_cards table.

Rows are created lazily on first import and never deleted here.
"""

from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from vaultimport.models.db import CollectionCardDB
from vaultimport.models.records import OwnershipRecord


def ownership_to_model(row: CollectionCardDB) -> OwnershipRecord:
    """Convert a database ownership row to a domain model."""
    return OwnershipRecord(
        card_id=row.card_id,
        quantity=row.quantity or 0,
        foil_quantity=row.foil_quantity or 0,
        needs_placement_at=row.needs_placement_at,
    )


class OwnershipStore:
    """Per-card ownership counts."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def savepoint(self) -> AsyncSessionTransaction:
        """Nested transaction for one card; a failed upsert rolls back only that card."""
        return self._session.begin_nested()

    async def get(self, card_id: str) -> OwnershipRecord | None:
        row = await self._session.get(CollectionCardDB, card_id)
        return ownership_to_model(row) if row else None

    async def upsert(self, record: OwnershipRecord) -> OwnershipRecord:
        """
        Create or overwrite the ownership row for a card.

        Raises:
            SQLAlchemyError: If the flush fails (e.g. unknown card id)
        """
        row = await self._session.get(CollectionCardDB, record.card_id)
        if row is None:
            row = CollectionCardDB(card_id=record.card_id)
            self._session.add(row)

        row.quantity = record.quantity
        row.foil_quantity = record.foil_quantity
        row.needs_placement_at = record.needs_placement_at
        await self._session.flush()
        return ownership_to_model(row)
