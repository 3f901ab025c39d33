"""
Card Resolution Service.

Resolves raw import records to catalog-backed canonical cards.

Matchers are tried in order and the first hit wins:
1. Scryfall ID
2. Set code + collector number
3. Name within the record's set
4. Name in any set (first catalog match, no further tie-break)

INVARIANTS:
1. Resolution only reads the catalog (no writes, no network)
2. A matcher whose inputs are blank is skipped, a miss falls through
3. Records with neither a name nor an ID are never resolved
"""

from collections.abc import Awaitable, Callable

from vaultimport.db.catalog_store import CatalogStore
from vaultimport.models.records import CanonicalCard, RawImportRecord

Matcher = Callable[[CatalogStore, RawImportRecord], Awaitable[CanonicalCard | None]]


async def match_by_external_id(
    catalog: CatalogStore, record: RawImportRecord
) -> CanonicalCard | None:
    external_id = record.external_id.strip()
    if not external_id:
        return None
    return await catalog.find_by_id(external_id)


async def match_by_set_and_number(
    catalog: CatalogStore, record: RawImportRecord
) -> CanonicalCard | None:
    number = record.collector_number.strip()
    if not record.normalized_set_code or not number:
        return None
    return await catalog.find_by_set_and_number(record.normalized_set_code, number)


async def match_by_name_in_set(
    catalog: CatalogStore, record: RawImportRecord
) -> CanonicalCard | None:
    name = record.name.strip()
    if not name or not record.normalized_set_code:
        return None
    return await catalog.find_by_name(name, record.normalized_set_code)


async def match_by_name(catalog: CatalogStore, record: RawImportRecord) -> CanonicalCard | None:
    # Several printings can share a name; the first catalog row wins
    name = record.name.strip()
    if not name:
        return None
    return await catalog.find_by_name(name)


MATCHERS: tuple[Matcher, ...] = (
    match_by_external_id,
    match_by_set_and_number,
    match_by_name_in_set,
    match_by_name,
)


class CardResolver:
    """Resolves RawImportRecord -> CanonicalCard against the catalog."""

    def __init__(self, catalog: CatalogStore, matchers: tuple[Matcher, ...] = MATCHERS) -> None:
        self._catalog = catalog
        self._matchers = matchers

    async def resolve(self, record: RawImportRecord) -> CanonicalCard | None:
        """
        Resolve a record to a canonical card.

        Returns:
            The first matcher's hit, or None if every matcher misses
        """
        if record.is_blank:
            return None

        for matcher in self._matchers:
            card = await matcher(self._catalog, record)
            if card is not None:
                return card
        return None
