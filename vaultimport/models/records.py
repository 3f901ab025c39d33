"""
Import Record Models.

This module defines the boundary between raw third-party export rows
and catalog-backed canonical cards.

INVARIANTS:
- RawImportRecord is UNTRUSTED raw import data (every field may be blank)
- CanonicalCard is TRUSTED catalog data
- MatchedRow/SkippedRow live for one processing pass only
- Record models are frozen, except the AggregateEntry accumulator
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class ImportMode(str, Enum):
    """Batch-level policy for merging imported quantities into ownership."""

    ADD = "add"
    REPLACE = "replace"

    @classmethod
    def coerce(cls, value: "ImportMode | str | None") -> "ImportMode":
        """Coerce user input to a mode, falling back to ADD for unknown values."""
        if isinstance(value, ImportMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.ADD


class ImportFormat(str, Enum):
    """Supported export formats."""

    DELVER_CSV = "delver_csv"
    DLENS = "dlens"
    JSON_BACKUP = "json_backup"

    @property
    def extensions(self) -> tuple[str, ...]:
        """File extensions accepted for this format."""
        return _FORMAT_EXTENSIONS[self]


_FORMAT_EXTENSIONS: dict[ImportFormat, tuple[str, ...]] = {
    ImportFormat.DELVER_CSV: (".csv",),
    ImportFormat.DLENS: (".dlens",),
    ImportFormat.JSON_BACKUP: (".json",),
}


class SkipReason(str, Enum):
    """Why a raw record did not produce a matched row."""

    NO_MATCH = "no_match"
    UNRESOLVABLE_SET = "unresolvable_set"


@dataclass(frozen=True, slots=True)
class ImportFile:
    """An uploaded file awaiting import."""

    filename: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class RawImportRecord:
    """
    One parsed line from an input file.

    This is UNTRUSTED data directly from a third-party export.
    No assumptions about validity - must be resolved against the catalog.

    Attributes:
        name: Card name as it appears in the export (may be blank)
        set_code: Set code in any case (may be blank)
        collector_number: Collector number within the set (may be blank)
        quantity_raw: Free-form quantity string (e.g. "2x")
        foil_raw: Free-form foil marker (e.g. "Foil", "")
        external_id: Scryfall ID when the export carries one
        source: File the record came from
        line: 1-based line/row number within the source
    """

    name: str = ""
    set_code: str = ""
    collector_number: str = ""
    quantity_raw: str = ""
    foil_raw: str = ""
    external_id: str = ""
    source: str = ""
    line: int = 0

    @property
    def is_blank(self) -> bool:
        """True when there is nothing to resolve the record by."""
        return not self.name.strip() and not self.external_id.strip()

    @property
    def normalized_set_code(self) -> str:
        return self.set_code.strip().lower()


@dataclass(frozen=True, slots=True)
class CanonicalCard:
    """
    Catalog-backed canonical card.

    Attributes:
        id: Scryfall UUID (stable, globally unique)
        name: Full card name ("Front // Back" for multi-faced cards)
        set_code: Lowercase set code
        collector_number: Collector number within the set
    """

    id: str
    name: str
    set_code: str
    collector_number: str


@dataclass(frozen=True, slots=True)
class MatchedRow:
    """A raw record resolved to a canonical card."""

    card: CanonicalCard
    quantity: int
    foil: bool
    record: RawImportRecord


@dataclass(frozen=True, slots=True)
class SkippedRow:
    """A raw record that could not be resolved."""

    record: RawImportRecord
    reason: SkipReason


@dataclass(slots=True)
class AggregateEntry:
    """
    Batch-wide totals for one card.

    has_regular/has_foil record whether any row of that finish contributed,
    even with a zero quantity. Replace mode only overwrites present finishes.
    """

    card_id: str
    card_name: str
    regular_quantity: int = 0
    foil_quantity: int = 0
    has_regular: bool = False
    has_foil: bool = False

    @property
    def has_new_copies(self) -> bool:
        return self.regular_quantity > 0 or self.foil_quantity > 0


@dataclass(frozen=True, slots=True)
class OwnershipRecord:
    """Ownership state for one card."""

    card_id: str
    quantity: int = 0
    foil_quantity: int = 0
    needs_placement_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class RemoteSet:
    """
    A set as returned by the remote catalog.

    Only the set itself is fetched; child sets (tokens, promos) are not.
    """

    code: str
    name: str
    cards: tuple[CanonicalCard, ...] = ()
    released_at: date | None = None
    set_type: str | None = None
    parent_set_code: str | None = None
    card_count: int = 0
