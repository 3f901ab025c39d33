"""
Parser for Delver Lens CSV exports.

Expected columns (any order, extra columns ignored):
    Name, Edition code, Collector's number, QuantityX, Foil, Scryfall ID

Rows may be ragged and the file may be comma or tab separated.
"""

import csv
from io import StringIO

from vaultimport.models.records import RawImportRecord
from vaultimport.parsers.errors import ImportFileError

# Column aliases, checked in order
ID_COLUMNS = ("Scryfall ID", "scryfall_id")
NAME_COLUMNS = ("Name", "name")
SET_COLUMNS = ("Edition code", "edition_code", "Set")
NUMBER_COLUMNS = ("Collector's number", "collector_number")
QUANTITY_COLUMNS = ("QuantityX", "Quantity", "quantity")
FOIL_COLUMNS = ("Foil", "foil")

DEFAULT_QUANTITY = "1x"

MISSING_ID_COLUMN = "CSV doesn't appear to be a Delver Lens export (missing Scryfall ID column)"


def detect_delimiter(text: str) -> str:
    """Tab if the text contains one, otherwise comma."""
    return "\t" if "\t" in text else ","


def _column_index(header: list[str], aliases: tuple[str, ...]) -> int | None:
    for alias in aliases:
        if alias in header:
            return header.index(alias)
    return None


def _cell(row: list[str], index: int | None, default: str = "") -> str:
    if index is None or index >= len(row):
        return default
    return row[index].strip()


def read_delver_csv(text: str, source: str = "") -> list[RawImportRecord]:
    """
    Parse a Delver Lens CSV export into raw records.

    Args:
        text: Decoded CSV content
        source: File name recorded on each record

    Returns:
        One record per non-empty data row

    Raises:
        ImportFileError: If the file is empty, malformed, or lacks the
            Scryfall ID column
    """
    text = text.lstrip("\ufeff")

    try:
        rows = list(csv.reader(StringIO(text), delimiter=detect_delimiter(text)))
    except csv.Error as e:
        raise ImportFileError(f"CSV parsing error: {e}") from e

    # Drop fully blank lines
    rows = [row for row in rows if any(cell.strip() for cell in row)]
    if len(rows) < 2:
        raise ImportFileError("CSV file is empty")

    header = [cell.strip() for cell in rows[0]]
    id_col = _column_index(header, ID_COLUMNS)
    if id_col is None:
        raise ImportFileError(MISSING_ID_COLUMN)

    name_col = _column_index(header, NAME_COLUMNS)
    set_col = _column_index(header, SET_COLUMNS)
    number_col = _column_index(header, NUMBER_COLUMNS)
    qty_col = _column_index(header, QUANTITY_COLUMNS)
    foil_col = _column_index(header, FOIL_COLUMNS)

    records: list[RawImportRecord] = []
    # Line 1 is the header
    for line, row in enumerate(rows[1:], start=2):
        records.append(
            RawImportRecord(
                name=_cell(row, name_col),
                set_code=_cell(row, set_col),
                collector_number=_cell(row, number_col),
                quantity_raw=_cell(row, qty_col, DEFAULT_QUANTITY) or DEFAULT_QUANTITY,
                foil_raw=_cell(row, foil_col),
                external_id=_cell(row, id_col),
                source=source,
                line=line,
            )
        )

    return records
