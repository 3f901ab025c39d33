"""
Parser for Delver Lens .dlens backups.

A .dlens file is a SQLite database whose layout varies between app
versions. The cards table is located heuristically: known table names
first, then any table with a quantity column, then the first user table.
"""

import logging
import os
import tempfile
from typing import Any

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from vaultimport.models.records import RawImportRecord
from vaultimport.parsers.errors import ImportFileError

logger = logging.getLogger(__name__)

# Common cards table names in Delver backups, checked in order
CANDIDATE_TABLES = ("cards", "collection", "entries", "items", "card_entries")

# Any of these columns marks a table as holding quantities
QUANTITY_COLUMNS = ("quantity", "count")

# Tables never treated as the cards table
SYSTEM_TABLE_PREFIX = "sqlite_"
SYSTEM_TABLES = frozenset({"android_metadata"})

# Columns linking an entry row to its metadata row
LINK_COLUMNS = ("card", "card_id")

SET_COLUMNS = ("set_code", "edition", "set")
NUMBER_COLUMNS = ("collector_number", "number")

MISSING_SCRYFALL_IDS = (
    "This .dlens backup doesn't contain Scryfall IDs. "
    "Please export your collection as CSV from Delver Lens instead, "
    "or ensure your Delver Lens app is synced with Scryfall data."
)


def _is_system_table(table: str) -> bool:
    return table.startswith(SYSTEM_TABLE_PREFIX) or table in SYSTEM_TABLES


def find_cards_table(tables: list[str], columns_by_table: dict[str, list[str]]) -> str | None:
    """
    Pick the table holding collection entries.

    Args:
        tables: Table names in database order
        columns_by_table: Lowercased column names per table
    """
    for name in CANDIDATE_TABLES:
        if name in tables:
            return name

    for table in tables:
        if _is_system_table(table):
            continue
        if any(col in columns_by_table.get(table, []) for col in QUANTITY_COLUMNS):
            return table

    user_tables = [t for t in tables if not _is_system_table(t)]
    return user_tables[0] if user_tables else None


def find_metadata_table(
    tables: list[str], columns_by_table: dict[str, list[str]], cards_table: str
) -> str | None:
    """Find a separate table carrying card names, keyed by id."""
    for table in tables:
        if table == cards_table or "card" not in table.lower():
            continue
        columns = columns_by_table.get(table, [])
        if "id" in columns and "name" in columns:
            return table
    return None


def _first(row: dict[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _select_rows(
    conn: Connection,
    cards_table: str,
    cards_columns: list[str],
    meta_table: str | None,
) -> list[dict[str, Any]]:
    links = [col for col in LINK_COLUMNS if col in cards_columns]
    if meta_table and links:
        join = " OR ".join(f'c."{col}" = m."id"' for col in links)
        query = f'SELECT c.*, m.* FROM "{cards_table}" c LEFT JOIN "{meta_table}" m ON {join}'
        logger.info("Importing %s with metadata table %s", cards_table, meta_table)
    else:
        query = f'SELECT * FROM "{cards_table}"'
        logger.info("Importing from table %s", cards_table)

    result = conn.execute(text(query))
    keys = [key.lower() for key in result.keys()]
    rows: list[dict[str, Any]] = []
    for raw in result:
        row: dict[str, Any] = {}
        # Entry columns win over same-named metadata columns
        for key, value in zip(keys, raw, strict=True):
            if key not in row or row[key] in (None, ""):
                row[key] = value
        rows.append(row)
    return rows


def _read_database(path: str, source: str) -> list[RawImportRecord]:
    engine = create_engine(f"sqlite:///{path}")
    try:
        with engine.connect() as conn:
            inspector = inspect(conn)
            tables = inspector.get_table_names()
            columns_by_table = {
                table: [col["name"].lower() for col in inspector.get_columns(table)]
                for table in tables
            }
            logger.info("Delver database tables: %s", ", ".join(tables))

            cards_table = find_cards_table(tables, columns_by_table)
            if cards_table is None:
                raise ImportFileError(
                    "Could not find cards table in .dlens file. "
                    f"Tables found: {', '.join(tables)}"
                )

            cards_columns = columns_by_table[cards_table]
            meta_table = find_metadata_table(tables, columns_by_table, cards_table)
            rows = _select_rows(conn, cards_table, cards_columns, meta_table)
    finally:
        engine.dispose()

    logger.info("Processing %d rows from Delver database", len(rows))

    if not any(_first(row, ("scryfall_id",)) for row in rows):
        raise ImportFileError(MISSING_SCRYFALL_IDS)

    records: list[RawImportRecord] = []
    for line, row in enumerate(rows, start=1):
        raw_quantity = row.get("quantity")
        if raw_quantity is None:
            raw_quantity = row.get("count")
        quantity = _to_int(raw_quantity, default=1)
        if quantity <= 0:
            continue

        records.append(
            RawImportRecord(
                name=_first(row, ("name",)),
                set_code=_first(row, SET_COLUMNS),
                collector_number=_first(row, NUMBER_COLUMNS),
                quantity_raw=str(quantity),
                foil_raw="1" if _to_int(row.get("foil")) == 1 else "",
                external_id=_first(row, ("scryfall_id",)),
                source=source,
                line=line,
            )
        )

    return records


def read_dlens(data: bytes, source: str = "") -> list[RawImportRecord]:
    """
    Parse a .dlens SQLite backup into raw records.

    Rows with a zero or negative quantity are dropped. A foil column of 1
    marks a foil entry.

    Raises:
        ImportFileError: If the data is not a database, has no cards table,
            or carries no Scryfall IDs
    """
    fd, path = tempfile.mkstemp(suffix=".db")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        return _read_database(path, source)
    except DBAPIError as e:
        raise ImportFileError(f"SQLite error: {e.orig}") from e
    except SQLAlchemyError as e:
        raise ImportFileError(f"SQLite error: {e}") from e
    finally:
        os.unlink(path)
