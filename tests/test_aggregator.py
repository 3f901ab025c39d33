"""Tests for batch-wide aggregation."""

import itertools

from vaultimport.models.records import CanonicalCard, MatchedRow, RawImportRecord
from vaultimport.services.aggregator import Aggregator, aggregate

CARD_A = CanonicalCard(id="a", name="Card A", set_code="tst", collector_number="1")
CARD_B = CanonicalCard(id="b", name="Card B", set_code="tst", collector_number="2")


def row(card: CanonicalCard, quantity: int, foil: bool = False) -> MatchedRow:
    return MatchedRow(card=card, quantity=quantity, foil=foil, record=RawImportRecord())


class TestAggregate:
    def test_splits_by_finish(self) -> None:
        entries = aggregate([row(CARD_A, 2), row(CARD_A, 3, foil=True), row(CARD_A, 1)])

        entry = entries["a"]
        assert entry.regular_quantity == 3
        assert entry.foil_quantity == 3
        assert entry.has_regular is True
        assert entry.has_foil is True
        assert entry.card_name == "Card A"

    def test_one_entry_per_card(self) -> None:
        entries = aggregate([row(CARD_A, 1), row(CARD_B, 1), row(CARD_A, 1)])

        assert set(entries) == {"a", "b"}

    def test_only_regular_marks_finish(self) -> None:
        entry = aggregate([row(CARD_A, 2)])["a"]

        assert entry.has_regular is True
        assert entry.has_foil is False

    def test_zero_quantity_still_marks_finish(self) -> None:
        entry = aggregate([row(CARD_A, 0, foil=True)])["a"]

        assert entry.foil_quantity == 0
        assert entry.has_foil is True
        assert entry.has_new_copies is False

    def test_order_independent(self) -> None:
        rows = [
            row(CARD_A, 2),
            row(CARD_B, 1, foil=True),
            row(CARD_A, 5, foil=True),
            row(CARD_B, 4),
        ]
        expected = aggregate(rows)

        for permutation in itertools.permutations(rows):
            assert aggregate(permutation) == expected


class TestAggregator:
    def test_accumulates_across_calls(self) -> None:
        """Rows from separate files fold into the same entry."""
        aggregator = Aggregator()

        aggregator.extend([row(CARD_A, 2)])
        aggregator.extend([row(CARD_A, 3)])

        assert len(aggregator) == 1
        assert aggregator.entries()[0].regular_quantity == 5

    def test_first_seen_order(self) -> None:
        aggregator = Aggregator()
        aggregator.add(row(CARD_B, 1))
        aggregator.add(row(CARD_A, 1))

        assert [e.card_id for e in aggregator.entries()] == ["b", "a"]
