"""
Batch-wide aggregation of matched rows into per-card totals.

Totals are plain sums, so row order (within or across files) never
changes the result.
"""

from collections.abc import Iterable

from vaultimport.models.records import AggregateEntry, MatchedRow


class Aggregator:
    """Accumulates matched rows for one batch."""

    def __init__(self) -> None:
        self._entries: dict[str, AggregateEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, row: MatchedRow) -> None:
        entry = self._entries.get(row.card.id)
        if entry is None:
            entry = AggregateEntry(card_id=row.card.id, card_name=row.card.name)
            self._entries[row.card.id] = entry

        if row.foil:
            entry.foil_quantity += row.quantity
            entry.has_foil = True
        else:
            entry.regular_quantity += row.quantity
            entry.has_regular = True

    def extend(self, rows: Iterable[MatchedRow]) -> None:
        for row in rows:
            self.add(row)

    def entries(self) -> list[AggregateEntry]:
        """Entries in first-seen card order."""
        return list(self._entries.values())


def aggregate(rows: Iterable[MatchedRow]) -> dict[str, AggregateEntry]:
    """Fold matched rows into entries keyed by card id."""
    aggregator = Aggregator()
    aggregator.extend(rows)
    return {entry.card_id: entry for entry in aggregator.entries()}
