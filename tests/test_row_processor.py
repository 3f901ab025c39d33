"""Tests for per-row parsing and resolution."""

from conftest import TEST_CARD_ID

from vaultimport.db.catalog_store import CatalogStore
from vaultimport.models.records import MatchedRow, RawImportRecord, SkippedRow, SkipReason
from vaultimport.services.card_resolver import CardResolver
from vaultimport.services.row_processor import process_records, process_row


class TestProcessRow:
    async def test_matched_row(self, catalog: CatalogStore) -> None:
        record = RawImportRecord(
            name="Test Card", set_code="TST", quantity_raw="2x", external_id=TEST_CARD_ID
        )

        row = await process_row(CardResolver(catalog), record)

        assert isinstance(row, MatchedRow)
        assert row.card.id == TEST_CARD_ID
        assert row.quantity == 2
        assert row.foil is False
        assert row.record is record

    async def test_foil_row(self, catalog: CatalogStore) -> None:
        record = RawImportRecord(external_id=TEST_CARD_ID, quantity_raw="x3", foil_raw="Foil")

        row = await process_row(CardResolver(catalog), record)

        assert isinstance(row, MatchedRow)
        assert row.quantity == 3
        assert row.foil is True

    async def test_blank_record_skipped(self, catalog: CatalogStore) -> None:
        record = RawImportRecord(set_code="tst", collector_number="1")

        row = await process_row(CardResolver(catalog), record)

        assert row == SkippedRow(record=record, reason=SkipReason.NO_MATCH)

    async def test_unresolved_row(self, catalog: CatalogStore) -> None:
        record = RawImportRecord(name="Nonexistent", set_code="tst")

        row = await process_row(CardResolver(catalog), record)

        assert isinstance(row, SkippedRow)
        assert row.reason == SkipReason.NO_MATCH

    async def test_unresolved_row_in_failed_set(self, catalog: CatalogStore) -> None:
        record = RawImportRecord(name="Nonexistent", set_code="BAD")

        row = await process_row(CardResolver(catalog), record, failed_sets={"bad"})

        assert isinstance(row, SkippedRow)
        assert row.reason == SkipReason.UNRESOLVABLE_SET


class TestProcessRecords:
    async def test_splits_and_collects_missing_sets(self, catalog: CatalogStore) -> None:
        records = [
            RawImportRecord(external_id=TEST_CARD_ID, quantity_raw="2x"),
            RawImportRecord(external_id=TEST_CARD_ID, quantity_raw="1", foil_raw="Foil"),
            RawImportRecord(name="Nonexistent", set_code="NEW"),
            RawImportRecord(name="Also Missing"),
            RawImportRecord(set_code="BLANK"),
        ]

        outcomes = await process_records(CardResolver(catalog), records)

        assert len(outcomes.matched) == 2
        assert len(outcomes.skipped) == 3
        assert outcomes.missing_sets == {"new"}
        assert outcomes.regular_quantity == 2
        assert outcomes.foil_quantity == 1
