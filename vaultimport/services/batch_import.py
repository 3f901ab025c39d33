"""
Batch Orchestrator.

Drives one or more files through set download, row processing,
aggregation and commit (or preview). Files are processed one after
another so sets downloaded for one file are visible to the next.

Failure classification:
- Structural (bad file): one error tagged with the filename, file skipped
- Per-row (no match): counted as skipped
- Collaborator (download/save failure): error string, processing continues
"""

import logging
from collections.abc import Sequence

from vaultimport.config import Settings
from vaultimport.config import settings as default_settings
from vaultimport.db.catalog_store import CatalogStore
from vaultimport.db.ownership_store import OwnershipStore
from vaultimport.models.records import (
    ImportFile,
    ImportFormat,
    ImportMode,
    MatchedRow,
    RawImportRecord,
)
from vaultimport.models.result import ImportResult, PreviewReport
from vaultimport.parsers.errors import ImportFileError
from vaultimport.parsers.readers import read_records, validate_upload
from vaultimport.services.aggregator import Aggregator
from vaultimport.services.card_resolver import CardResolver
from vaultimport.services.commit_writer import commit_aggregates
from vaultimport.services.preview import PreviewRows, build_preview, collect_preview_rows
from vaultimport.services.row_processor import process_records
from vaultimport.services.scryfall_client import ScryfallClient
from vaultimport.services.set_fetcher import (
    collect_set_codes,
    download_missing_sets,
    find_missing_sets,
)

logger = logging.getLogger(__name__)

NO_FILES = "No files provided"


class BatchImporter:
    """
    Imports card collection exports into the ownership store.

    The caller owns the session behind both stores and decides when to
    commit. Without a remote catalog, missing sets are reported but not
    downloaded.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        ownership: OwnershipStore,
        remote: ScryfallClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.catalog = catalog
        self.ownership = ownership
        self.remote = remote
        self.settings = settings or default_settings
        self.resolver = CardResolver(catalog)

    def _read(self, file: ImportFile, import_format: ImportFormat) -> list[RawImportRecord]:
        """Validate and read one file. Raises ImportFileError."""
        validate_upload(file, import_format, max_bytes=self.settings.max_upload_bytes)
        return read_records(file, import_format)

    async def _import_one(
        self, file: ImportFile, import_format: ImportFormat
    ) -> tuple[ImportResult, list[MatchedRow]]:
        try:
            records = self._read(file, import_format)
        except ImportFileError as e:
            logger.warning("Rejected %s: %s", file.filename, e.message)
            return ImportResult(errors=[f"{file.filename}: {e.message}"]), []

        fetched = await download_missing_sets(self.catalog, self.remote, records)
        outcomes = await process_records(self.resolver, records, fetched.failed_sets)

        logger.info(
            "Processed %s: %d matched, %d skipped",
            file.filename,
            len(outcomes.matched),
            len(outcomes.skipped),
        )
        result = ImportResult(
            imported=outcomes.regular_quantity,
            foils_imported=outcomes.foil_quantity,
            skipped=len(outcomes.skipped),
            errors=fetched.errors,
            missing_sets=outcomes.missing_sets,
            downloaded_sets=fetched.downloaded,
        )
        return result, outcomes.matched

    async def import_files(
        self,
        files: Sequence[ImportFile],
        import_format: ImportFormat = ImportFormat.DELVER_CSV,
        mode: ImportMode | str = ImportMode.ADD,
    ) -> ImportResult:
        """
        Import a batch of files and write ownership.

        Matched rows from every file are aggregated together before any
        ownership row is written, so a card appearing in several files is
        written once.

        Args:
            files: Uploaded files
            import_format: Format shared by every file in the batch
            mode: ADD or REPLACE (unknown values fall back to ADD)

        Returns:
            Merged result across all files
        """
        if not files:
            return ImportResult(errors=[NO_FILES])

        mode = ImportMode.coerce(mode)
        aggregator = Aggregator()
        result = ImportResult()

        for file in files:
            file_result, matched = await self._import_one(file, import_format)
            aggregator.extend(matched)
            result = result.merge(file_result)

        save_errors = await commit_aggregates(self.ownership, aggregator.entries(), mode)
        result = result.merge(ImportResult(errors=save_errors))

        logger.info(
            "Import finished: %s",
            result.summary(mode),
            extra={
                "mode": mode.value,
                "files": len(files),
                "cards": len(aggregator),
                "imported": result.imported,
                "foils_imported": result.foils_imported,
                "skipped": result.skipped,
                "errors": len(result.errors),
            },
        )
        return result

    async def import_file(
        self,
        file: ImportFile,
        import_format: ImportFormat = ImportFormat.DELVER_CSV,
        mode: ImportMode | str = ImportMode.ADD,
    ) -> ImportResult:
        return await self.import_files([file], import_format, mode)

    async def preview_files(
        self,
        files: Sequence[ImportFile],
        import_format: ImportFormat = ImportFormat.DELVER_CSV,
    ) -> PreviewReport:
        """
        Report what import_files would do, without writing anything.

        Missing sets are flagged rather than downloaded. Rows in a missing
        set show as pending only when a remote catalog would fetch that set
        on commit; without one they are skipped, as commit would skip them.
        """
        if not files:
            return PreviewReport(errors=[NO_FILES])

        rows = PreviewRows()
        errors: list[str] = []
        missing: list[str] = []
        codes: list[str] = []

        for file in files:
            try:
                records = self._read(file, import_format)
            except ImportFileError as e:
                errors.append(f"{file.filename}: {e.message}")
                continue

            file_missing = await find_missing_sets(self.catalog, records)
            pending_sets = file_missing if self.remote is not None else []
            rows.extend(await collect_preview_rows(self.resolver, records, pending_sets))
            missing.extend(file_missing)
            codes.extend(collect_set_codes(records))

        set_names = await self.catalog.set_names(codes)
        return build_preview(
            rows,
            set_names,
            missing,
            errors,
            sample_size=self.settings.preview_sample_size,
            row_limit=self.settings.preview_row_limit,
        )

    async def preview_file(
        self,
        file: ImportFile,
        import_format: ImportFormat = ImportFormat.DELVER_CSV,
    ) -> PreviewReport:
        return await self.preview_files([file], import_format)
