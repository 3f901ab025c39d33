from vaultimport.models.records import (
    AggregateEntry,
    CanonicalCard,
    ImportFile,
    ImportFormat,
    ImportMode,
    MatchedRow,
    OwnershipRecord,
    RawImportRecord,
    RemoteSet,
    SkippedRow,
    SkipReason,
)
from vaultimport.models.result import (
    CardPreview,
    DownloadedSet,
    ImportResult,
    PreviewReport,
    SetPreview,
)

__all__ = [
    "AggregateEntry",
    "CanonicalCard",
    "CardPreview",
    "DownloadedSet",
    "ImportFile",
    "ImportFormat",
    "ImportMode",
    "ImportResult",
    "MatchedRow",
    "OwnershipRecord",
    "PreviewReport",
    "RawImportRecord",
    "RemoteSet",
    "SetPreview",
    "SkipReason",
    "SkippedRow",
]
