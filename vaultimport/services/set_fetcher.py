"""
Missing-set detection and download.

Before rows are resolved, every set code in a batch is checked against the
catalog. Commit downloads the missing ones from the remote catalog; preview
only reports them.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from vaultimport.db.catalog_store import CatalogStore
from vaultimport.models.records import RawImportRecord
from vaultimport.models.result import DownloadedSet
from vaultimport.services.scryfall_client import RemoteCatalogError, ScryfallClient

logger = logging.getLogger(__name__)


@dataclass
class SetFetchOutcome:
    """What the download step did for one file."""

    downloaded: list[DownloadedSet] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    failed_sets: set[str] = field(default_factory=set)


def collect_set_codes(records: Iterable[RawImportRecord]) -> list[str]:
    """Distinct non-blank lowercase set codes, in first-seen order."""
    codes = (record.normalized_set_code for record in records)
    return list(dict.fromkeys(code for code in codes if code))


async def find_missing_sets(
    catalog: CatalogStore, records: Iterable[RawImportRecord]
) -> list[str]:
    """Set codes referenced by the records but absent from the catalog. Read-only."""
    codes = collect_set_codes(records)
    existing = await catalog.existing_set_codes(codes)
    return [code for code in codes if code not in existing]


async def download_missing_sets(
    catalog: CatalogStore,
    remote: ScryfallClient | None,
    records: Iterable[RawImportRecord],
) -> SetFetchOutcome:
    """
    Download every missing set the records reference.

    A failure for one set is recorded and the rest are still fetched.
    Without a remote catalog nothing is fetched and no error is recorded.
    """
    outcome = SetFetchOutcome()
    missing = await find_missing_sets(catalog, records)
    if not missing or remote is None:
        return outcome

    logger.info("Downloading %d missing sets: %s", len(missing), ", ".join(missing))

    for code in missing:
        try:
            remote_set = await remote.fetch_set(code)
            if not remote_set.cards:
                outcome.errors.append(f"Failed to download set '{code}' from Scryfall")
                outcome.failed_sets.add(code)
                continue

            async with catalog.savepoint():
                await catalog.save_set(remote_set)
        except (RemoteCatalogError, SQLAlchemyError) as e:
            logger.error("Error downloading set %s: %s", code, e)
            outcome.errors.append(f"Error downloading set '{code}': {e}")
            outcome.failed_sets.add(code)
            continue

        outcome.downloaded.append(
            DownloadedSet(code=code, name=remote_set.name, card_count=len(remote_set.cards))
        )
        logger.info(
            "Downloaded set %s: %s (%d cards)", code, remote_set.name, len(remote_set.cards)
        )

    return outcome
