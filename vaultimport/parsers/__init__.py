from vaultimport.parsers.delver_csv import read_delver_csv
from vaultimport.parsers.dlens import read_dlens
from vaultimport.parsers.errors import ImportFileError
from vaultimport.parsers.json_backup import read_json_backup
from vaultimport.parsers.quantity import parse_foil, parse_quantity
from vaultimport.parsers.readers import read_records, validate_upload

__all__ = [
    "ImportFileError",
    "parse_foil",
    "parse_quantity",
    "read_delver_csv",
    "read_dlens",
    "read_json_backup",
    "read_records",
    "validate_upload",
]
