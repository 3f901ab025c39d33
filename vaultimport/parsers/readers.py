"""
Format reader dispatch and upload validation.

Readers are swappable: each turns a file into RawImportRecords or
raises ImportFileError. Nothing here touches the catalog.
"""

import os
from collections.abc import Callable

from vaultimport.config import settings
from vaultimport.models.records import ImportFile, ImportFormat, RawImportRecord
from vaultimport.parsers.delver_csv import read_delver_csv
from vaultimport.parsers.dlens import read_dlens
from vaultimport.parsers.errors import ImportFileError
from vaultimport.parsers.json_backup import read_json_backup

Reader = Callable[[ImportFile], list[RawImportRecord]]


def _decode(content: bytes) -> str:
    return content.decode("utf-8-sig", errors="replace")


def _read_csv(file: ImportFile) -> list[RawImportRecord]:
    return read_delver_csv(_decode(file.content), source=file.filename)


def _read_dlens(file: ImportFile) -> list[RawImportRecord]:
    return read_dlens(file.content, source=file.filename)


def _read_json(file: ImportFile) -> list[RawImportRecord]:
    return read_json_backup(_decode(file.content), source=file.filename)


READERS: dict[ImportFormat, Reader] = {
    ImportFormat.DELVER_CSV: _read_csv,
    ImportFormat.DLENS: _read_dlens,
    ImportFormat.JSON_BACKUP: _read_json,
}


def validate_upload(
    file: ImportFile,
    import_format: ImportFormat,
    max_bytes: int | None = None,
) -> None:
    """
    Check an upload's size and extension before reading it.

    Raises:
        ImportFileError: If the file is too large or has the wrong extension
    """
    limit = settings.max_upload_bytes if max_bytes is None else max_bytes
    if file.size > limit:
        raise ImportFileError(f"File too large (max {limit // (1024 * 1024)}MB)")

    extension = os.path.splitext(file.filename)[1].lower()
    if extension not in import_format.extensions:
        allowed = ", ".join(import_format.extensions)
        raise ImportFileError(f"Invalid file type. Allowed: {allowed}")


def read_records(file: ImportFile, import_format: ImportFormat) -> list[RawImportRecord]:
    """
    Read a file with the reader registered for its format.

    Raises:
        ImportFileError: On any structural problem with the file
    """
    return READERS[import_format](file)
