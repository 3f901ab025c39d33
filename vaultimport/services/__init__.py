"""
Import services.

Resolution, set download, aggregation, commit and preview for
collection imports.
"""

from vaultimport.services.aggregator import Aggregator, aggregate
from vaultimport.services.batch_import import BatchImporter
from vaultimport.services.card_resolver import MATCHERS, CardResolver
from vaultimport.services.commit_writer import apply_aggregate, commit_aggregates
from vaultimport.services.preview import build_preview, collect_preview_rows
from vaultimport.services.row_processor import RowOutcomes, process_records, process_row
from vaultimport.services.scryfall_client import RemoteCatalogError, ScryfallClient
from vaultimport.services.set_fetcher import (
    SetFetchOutcome,
    collect_set_codes,
    download_missing_sets,
    find_missing_sets,
)

__all__ = [
    "MATCHERS",
    "Aggregator",
    "BatchImporter",
    "CardResolver",
    "RemoteCatalogError",
    "RowOutcomes",
    "ScryfallClient",
    "SetFetchOutcome",
    "aggregate",
    "apply_aggregate",
    "build_preview",
    "collect_preview_rows",
    "collect_set_codes",
    "commit_aggregates",
    "download_missing_sets",
    "find_missing_sets",
    "process_records",
    "process_row",
]
