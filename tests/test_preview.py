"""Tests for preview rendering."""

from conftest import TEST_CARD_ID

from vaultimport.db.catalog_store import CatalogStore
from vaultimport.models.records import RawImportRecord, SkippedRow, SkipReason
from vaultimport.services.card_resolver import CardResolver
from vaultimport.services.preview import (
    UNKNOWN_SET,
    PreviewLine,
    PreviewRows,
    build_preview,
    collect_preview_rows,
)


def line(
    set_code: str, name: str, quantity: int = 1, foil: bool = False, card_id: str | None = "x"
) -> PreviewLine:
    return PreviewLine(set_code=set_code, name=name, quantity=quantity, foil=foil, card_id=card_id)


class TestCollectPreviewRows:
    async def test_matched_pending_and_skipped(self, catalog: CatalogStore) -> None:
        records = [
            RawImportRecord(external_id=TEST_CARD_ID, quantity_raw="2x"),
            RawImportRecord(name="Future Card", set_code="NEW", quantity_raw="3", foil_raw="Foil"),
            RawImportRecord(name="Nonexistent", set_code="tst"),
        ]

        rows = await collect_preview_rows(CardResolver(catalog), records, missing_sets=["new"])

        matched, pending = rows.lines
        assert matched.card_id == TEST_CARD_ID
        assert matched.set_code == "tst"
        assert matched.name == "Test Card"
        assert pending.pending is True
        assert pending.set_code == "new"
        assert pending.quantity == 3
        assert pending.foil is True
        assert [s.reason for s in rows.skipped] == [SkipReason.NO_MATCH]


class TestBuildPreview:
    def test_counts(self) -> None:
        rows = PreviewRows(
            lines=[
                line("tst", "A", 2, card_id="a"),
                line("tst", "A", 1, foil=True, card_id="a"),
                line("tst", "B", 4, card_id="b"),
                line("new", "Future", 3, card_id=None),
            ],
            skipped=[SkippedRow(record=RawImportRecord(), reason=SkipReason.NO_MATCH)],
        )

        report = build_preview(rows, {"tst": "Test Set"}, ["new"])

        assert report.total_count == 10
        assert report.regular_count == 9
        assert report.foil_count == 1
        assert report.unique_count == 3
        assert report.skipped == 1
        assert report.found_sets == ["Test Set"]
        assert report.missing_sets == ["NEW"]
        assert report.truncated is False
        assert report.success is True

    def test_found_sets_are_names(self) -> None:
        rows = PreviewRows(lines=[line("tst", "A"), line("m10", "B"), line("prm", "C")])
        names = {"tst": "Test Set", "m10": "Magic 2010", "prm": "Test Set"}

        report = build_preview(rows, names, [])

        assert report.found_sets == ["Magic 2010", "Test Set"]

    def test_groups_by_set(self) -> None:
        rows = PreviewRows(lines=[line("tst", "A"), line("new", "Future", card_id=None)])

        report = build_preview(rows, {"tst": "Test Set"}, ["new"])

        assert set(report.cards_by_set) == {"TST", "NEW"}
        assert report.cards_by_set["TST"].set_name == "Test Set"
        assert report.cards_by_set["TST"].missing is False
        assert report.cards_by_set["NEW"].set_name == "NEW"
        assert report.cards_by_set["NEW"].missing is True
        assert report.cards_by_set["NEW"].cards[0].name == "Future"

    def test_blank_set_grouped_as_unknown(self) -> None:
        report = build_preview(PreviewRows(lines=[line("", "Loose")]), {}, [])

        assert report.cards_by_set[UNKNOWN_SET].set_name == UNKNOWN_SET

    def test_truncates_set_sample(self) -> None:
        rows = PreviewRows(lines=[line("tst", f"Card {i}") for i in range(5)])

        report = build_preview(rows, {"tst": "Test Set"}, [], sample_size=3)

        group = report.cards_by_set["TST"]
        assert [c.name for c in group.cards] == ["Card 0", "Card 1", "Card 2"]
        assert group.total_cards == 5
        assert group.truncated is True

    def test_truncates_report(self) -> None:
        rows = PreviewRows(lines=[line("tst", f"Card {i}") for i in range(4)])

        assert build_preview(rows, {}, [], row_limit=3).truncated is True
        assert build_preview(rows, {}, [], row_limit=4).truncated is False

    def test_default_limits(self) -> None:
        rows = PreviewRows(lines=[line("tst", f"Card {i}") for i in range(501)])

        report = build_preview(rows, {}, [])

        assert report.truncated is True
        assert len(report.cards_by_set["TST"].cards) == 50
        assert report.cards_by_set["TST"].total_cards == 501

    def test_errors_only_is_failure(self) -> None:
        report = build_preview(PreviewRows(), {}, [], errors=["bad.csv: CSV file is empty"])

        assert report.success is False
        assert report.errors == ["bad.csv: CSV file is empty"]
