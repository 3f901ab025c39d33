"""
Parser for JSON collection backups.

Backups hold one item per owned card:
    {"collection": [{"card_id": "...", "quantity": 2, "foil_quantity": 1}, ...]}

A bare top-level array of items is accepted as well.
"""

import json
from typing import Any

from vaultimport.models.records import RawImportRecord
from vaultimport.parsers.errors import ImportFileError


def _count(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def _text(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    return str(value).strip() if value is not None else ""


def read_json_backup(text: str, source: str = "") -> list[RawImportRecord]:
    """
    Parse a JSON backup into raw records.

    Each item yields a regular record and a foil record; a missing count
    reads as 0. Restoring a backup in replace mode therefore overwrites
    both counts.

    Raises:
        ImportFileError: If the JSON is invalid or not a list of items
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportFileError("Invalid JSON file") from e

    collection = data.get("collection") if isinstance(data, dict) else data
    if not isinstance(collection, list) or not all(isinstance(i, dict) for i in collection):
        raise ImportFileError("Invalid backup file format")

    records: list[RawImportRecord] = []
    for line, item in enumerate(collection, start=1):
        common = {
            "name": _text(item, "name"),
            "set_code": _text(item, "set_code"),
            "collector_number": _text(item, "collector_number"),
            "external_id": _text(item, "card_id"),
            "source": source,
            "line": line,
        }
        records.append(RawImportRecord(quantity_raw=str(_count(item.get("quantity"))), **common))
        records.append(
            RawImportRecord(
                quantity_raw=str(_count(item.get("foil_quantity"))),
                foil_raw="foil",
                **common,
            )
        )

    return records
