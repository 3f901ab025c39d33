"""
Preview Reporter.

Computes what an import would do without writing ownership or downloading
sets. Rows are resolved by the same row processor the commit path uses, so
a preview and a commit over the same catalog make the same decisions. The
one difference: rows whose set is missing from the catalog are reported as
pending ("will be downloaded on commit") instead of being fetched.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from vaultimport.config import settings
from vaultimport.models.records import MatchedRow, RawImportRecord, SkippedRow
from vaultimport.models.result import CardPreview, PreviewReport, SetPreview
from vaultimport.parsers.quantity import parse_foil, parse_quantity
from vaultimport.services.card_resolver import CardResolver
from vaultimport.services.row_processor import process_row

UNKNOWN_SET = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class PreviewLine:
    """One row as it would be imported."""

    set_code: str
    name: str
    quantity: int
    foil: bool
    card_id: str | None = None
    """None for rows pending a set download."""

    @property
    def pending(self) -> bool:
        return self.card_id is None


@dataclass
class PreviewRows:
    """Preview lines of one or more files plus rows that would be skipped."""

    lines: list[PreviewLine] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)

    def extend(self, other: "PreviewRows") -> None:
        self.lines.extend(other.lines)
        self.skipped.extend(other.skipped)


def line_from_match(row: MatchedRow) -> PreviewLine:
    return PreviewLine(
        set_code=row.card.set_code.lower(),
        name=row.card.name,
        quantity=row.quantity,
        foil=row.foil,
        card_id=row.card.id,
    )


def line_from_pending(record: RawImportRecord) -> PreviewLine:
    return PreviewLine(
        set_code=record.normalized_set_code,
        name=record.name.strip() or record.external_id.strip(),
        quantity=parse_quantity(record.quantity_raw),
        foil=parse_foil(record.foil_raw),
    )


async def collect_preview_rows(
    resolver: CardResolver,
    records: Iterable[RawImportRecord],
    missing_sets: Iterable[str],
) -> PreviewRows:
    """
    Resolve records for a preview, in record order.

    Unresolved rows whose set is in missing_sets become pending lines;
    other unresolved rows are skipped.
    """
    missing = set(missing_sets)
    rows = PreviewRows()
    for record in records:
        row = await process_row(resolver, record)
        if isinstance(row, MatchedRow):
            rows.lines.append(line_from_match(row))
        elif not record.is_blank and record.normalized_set_code in missing:
            rows.lines.append(line_from_pending(record))
        else:
            rows.skipped.append(row)
    return rows


def build_preview(
    rows: PreviewRows,
    set_names: Mapping[str, str],
    missing_sets: Iterable[str],
    errors: Iterable[str] = (),
    sample_size: int | None = None,
    row_limit: int | None = None,
) -> PreviewReport:
    """
    Render preview rows into a grouped, truncated report.

    Args:
        rows: Lines and skipped rows from collect_preview_rows
        set_names: Catalog names of the sets already present, by lowercase code
        missing_sets: Lowercase codes that would be downloaded on commit
        errors: Structural errors gathered while reading files
        sample_size: Cards listed per set (default from settings)
        row_limit: Lines above which the report is truncated (default from settings)
    """
    sample_size = settings.preview_sample_size if sample_size is None else sample_size
    row_limit = settings.preview_row_limit if row_limit is None else row_limit
    missing = list(dict.fromkeys(missing_sets))

    cards_by_set: dict[str, SetPreview] = {}
    for line in rows.lines:
        key = line.set_code.upper() or UNKNOWN_SET
        group = cards_by_set.get(key)
        if group is None:
            group = SetPreview(
                set_name=set_names.get(line.set_code) or key,
                missing=line.set_code in missing,
            )
            cards_by_set[key] = group

        group.total_cards += 1
        if len(group.cards) < sample_size:
            group.cards.append(
                CardPreview(name=line.name, quantity=line.quantity, foil=line.foil)
            )
        else:
            group.truncated = True

    matched_ids = {line.card_id for line in rows.lines if not line.pending}
    pending_count = sum(1 for line in rows.lines if line.pending)
    regular = sum(line.quantity for line in rows.lines if not line.foil)
    foil = sum(line.quantity for line in rows.lines if line.foil)

    return PreviewReport(
        total_count=regular + foil,
        regular_count=regular,
        foil_count=foil,
        unique_count=len(matched_ids) + pending_count,
        skipped=len(rows.skipped),
        found_sets=list(dict.fromkeys(set_names[code] for code in sorted(set_names))),
        missing_sets=[code.upper() for code in missing],
        cards_by_set=cards_by_set,
        truncated=len(rows.lines) > row_limit,
        errors=list(errors),
    )
