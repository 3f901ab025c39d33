"""
Row processing: one raw record in, one matched or skipped row out.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from vaultimport.models.records import MatchedRow, RawImportRecord, SkippedRow, SkipReason
from vaultimport.parsers.quantity import parse_foil, parse_quantity
from vaultimport.services.card_resolver import CardResolver

logger = logging.getLogger(__name__)


@dataclass
class RowOutcomes:
    """Rows of one file, split by outcome."""

    matched: list[MatchedRow] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)
    missing_sets: set[str] = field(default_factory=set)
    """Lowercase set codes of rows that did not resolve."""

    @property
    def regular_quantity(self) -> int:
        return sum(row.quantity for row in self.matched if not row.foil)

    @property
    def foil_quantity(self) -> int:
        return sum(row.quantity for row in self.matched if row.foil)


async def process_row(
    resolver: CardResolver,
    record: RawImportRecord,
    failed_sets: frozenset[str] | set[str] = frozenset(),
) -> MatchedRow | SkippedRow:
    """
    Parse and resolve one record.

    Args:
        resolver: Card resolver bound to the catalog
        record: Raw record from a reader
        failed_sets: Set codes whose download failed in this batch

    Returns:
        MatchedRow on a catalog hit, otherwise SkippedRow
    """
    if record.is_blank:
        return SkippedRow(record=record, reason=SkipReason.NO_MATCH)

    quantity = parse_quantity(record.quantity_raw)
    foil = parse_foil(record.foil_raw)

    card = await resolver.resolve(record)
    if card is None:
        logger.debug(
            "Could not find card: %s (%s #%s) - Scryfall ID: %s",
            record.name,
            record.set_code,
            record.collector_number,
            record.external_id,
        )
        reason = (
            SkipReason.UNRESOLVABLE_SET
            if record.normalized_set_code in failed_sets
            else SkipReason.NO_MATCH
        )
        return SkippedRow(record=record, reason=reason)

    return MatchedRow(card=card, quantity=quantity, foil=foil, record=record)


async def process_records(
    resolver: CardResolver,
    records: Iterable[RawImportRecord],
    failed_sets: frozenset[str] | set[str] = frozenset(),
) -> RowOutcomes:
    """Process records in order, collecting matches, skips and unresolved sets."""
    outcomes = RowOutcomes()
    for record in records:
        row = await process_row(resolver, record, failed_sets)
        if isinstance(row, MatchedRow):
            outcomes.matched.append(row)
            continue

        outcomes.skipped.append(row)
        # Blank rows carry nothing worth suggesting a download for
        if not record.is_blank and record.normalized_set_code:
            outcomes.missing_sets.add(record.normalized_set_code)

    return outcomes
