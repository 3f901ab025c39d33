"""
Catalog store backed by the card_sets and cards tables.

Read operations serve the card resolver; writes come only from the
missing-set fetcher. Set codes are compared lowercase throughout.
"""

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from vaultimport.models.db import CardDB, CardSetDB
from vaultimport.models.records import CanonicalCard, RemoteSet

logger = logging.getLogger(__name__)

# Separator between faces in multi-faced card names ("Front // Back")
FACE_SEPARATOR = " // "


def front_face(name: str) -> str:
    """Get the front face of a possibly multi-faced card name."""
    return name.split(FACE_SEPARATOR)[0].strip()


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def card_to_model(card: CardDB) -> CanonicalCard:
    """Convert a database card to a domain model."""
    return CanonicalCard(
        id=card.id,
        name=card.name,
        set_code=card.set_code,
        collector_number=card.collector_number,
    )


class CatalogStore:
    """Catalog of canonical cards, one session per batch."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def savepoint(self) -> AsyncSessionTransaction:
        """Nested transaction; a failed write inside rolls back only to here."""
        return self._session.begin_nested()

    async def find_by_id(self, card_id: str) -> CanonicalCard | None:
        card = await self._session.get(CardDB, card_id.strip())
        return card_to_model(card) if card else None

    async def find_by_set_and_number(
        self, set_code: str, collector_number: str
    ) -> CanonicalCard | None:
        result = await self._session.execute(
            select(CardDB)
            .where(CardDB.set_code == set_code.strip().lower())
            .where(CardDB.collector_number == collector_number.strip())
            .limit(1)
        )
        card = result.scalars().first()
        return card_to_model(card) if card else None

    async def find_by_name(self, name: str, set_code: str | None = None) -> CanonicalCard | None:
        """
        Find a card by exact name or by front face.

        A stored "Front // Back" matches a lookup of either the full name or
        just "Front". With no set code, the first match in store order wins.
        """
        name = name.strip()
        prefix = _escape_like(front_face(name)) + FACE_SEPARATOR + "%"
        query = select(CardDB).where(
            or_(CardDB.name == name, CardDB.name.like(prefix, escape="\\"))
        )
        if set_code:
            query = query.where(CardDB.set_code == set_code.strip().lower())

        result = await self._session.execute(query.limit(1))
        card = result.scalars().first()
        return card_to_model(card) if card else None

    async def has_set(self, code: str) -> bool:
        return await self._session.get(CardSetDB, code.strip().lower()) is not None

    async def existing_set_codes(self, codes: Iterable[str]) -> set[str]:
        """Get which of the given (lowercase) set codes are already in the catalog."""
        wanted = {code.lower() for code in codes}
        if not wanted:
            return set()
        result = await self._session.execute(
            select(CardSetDB.code).where(CardSetDB.code.in_(wanted))
        )
        return set(result.scalars().all())

    async def set_names(self, codes: Iterable[str]) -> dict[str, str]:
        """Map lowercase set codes present in the catalog to their names."""
        wanted = {code.lower() for code in codes}
        if not wanted:
            return {}
        result = await self._session.execute(
            select(CardSetDB.code, CardSetDB.name).where(CardSetDB.code.in_(wanted))
        )
        return {code: name for code, name in result.all()}

    async def insert_cards(self, cards: Sequence[CanonicalCard]) -> int:
        """
        Insert cards, skipping ids already present.

        Every card's set must already exist. Returns the number inserted.
        """
        if not cards:
            return 0

        ids = [card.id for card in cards]
        result = await self._session.execute(select(CardDB.id).where(CardDB.id.in_(ids)))
        existing = set(result.scalars().all())

        inserted = 0
        for card in cards:
            if card.id in existing:
                continue
            self._session.add(
                CardDB(
                    id=card.id,
                    name=card.name,
                    set_code=card.set_code.lower(),
                    collector_number=card.collector_number,
                )
            )
            existing.add(card.id)
            inserted += 1

        await self._session.flush()
        return inserted

    async def save_set(self, remote_set: RemoteSet) -> CardSetDB:
        """Create or refresh a set and insert its cards."""
        code = remote_set.code.lower()
        card_set = await self._session.get(CardSetDB, code)
        if card_set is None:
            card_set = CardSetDB(code=code, name=remote_set.name)
            self._session.add(card_set)

        card_set.name = remote_set.name
        card_set.released_at = remote_set.released_at
        card_set.set_type = remote_set.set_type
        card_set.parent_set_code = remote_set.parent_set_code
        card_set.card_count = remote_set.card_count or len(remote_set.cards)
        await self._session.flush()

        inserted = await self.insert_cards(remote_set.cards)
        logger.info("Saved set %s (%s): %d new cards", code, remote_set.name, inserted)
        return card_set
