"""
Import and preview result models.

These are the units handed back to the caller. They carry counts and
error strings only; nothing here references ORM state.
"""

from pydantic import BaseModel, Field

from vaultimport.models.records import ImportMode


class DownloadedSet(BaseModel):
    """A set fetched from the remote catalog during an import."""

    code: str
    name: str
    card_count: int = 0


class ImportResult(BaseModel):
    """Accumulated outcome of one import batch (possibly many files)."""

    imported: int = Field(default=0, description="Regular copies imported")
    foils_imported: int = Field(default=0, description="Foil copies imported")
    skipped: int = Field(default=0, description="Rows that could not be matched")
    errors: list[str] = Field(default_factory=list)
    missing_sets: set[str] = Field(
        default_factory=set,
        description="Lowercase set codes of rows that failed to resolve",
    )
    downloaded_sets: list[DownloadedSet] = Field(default_factory=list)

    @property
    def total_imported(self) -> int:
        return self.imported + self.foils_imported

    @property
    def success(self) -> bool:
        """Failed only when nothing was imported and something went wrong."""
        return not self.errors or self.total_imported > 0

    def merge(self, other: "ImportResult") -> "ImportResult":
        """Combine two results: sums counts, concatenates lists, unions sets."""
        return ImportResult(
            imported=self.imported + other.imported,
            foils_imported=self.foils_imported + other.foils_imported,
            skipped=self.skipped + other.skipped,
            errors=[*self.errors, *other.errors],
            missing_sets=self.missing_sets | other.missing_sets,
            downloaded_sets=[*self.downloaded_sets, *other.downloaded_sets],
        )

    def summary(self, mode: ImportMode) -> str:
        """
        Get a one-line user-facing summary of the import.

        Mirrors the wording shown after a Delver import: counts first,
        then binder placement, downloaded sets and unresolved sets.
        """
        if self.total_imported == 0 and self.skipped == 0:
            if self.errors:
                message = f"Import failed: {'; '.join(self.errors[:3])}"
                if len(self.errors) > 3:
                    message += "..."
                return message
            return "No valid files provided"

        verb = "Replaced with" if mode == ImportMode.REPLACE else "Added"
        message = f"{verb} {self.imported} cards"
        if self.foils_imported > 0:
            message += f" ({self.foils_imported} foils)"
        if self.skipped > 0:
            message += f", skipped {self.skipped}"

        if mode == ImportMode.ADD and self.total_imported > 0:
            message += f". {self.total_imported} cards marked NEW for binder placement"

        if self.downloaded_sets:
            names = list(dict.fromkeys(s.name for s in self.downloaded_sets))
            message += f". Downloaded {len(names)} set(s): {', '.join(names[:3])}"
            if len(names) > 3:
                message += "..."

        if self.missing_sets:
            codes = sorted(self.missing_sets)
            message += f". Could not find sets: {', '.join(codes[:3])}"
            if len(codes) > 3:
                message += "..."

        return message


class CardPreview(BaseModel):
    """One card line inside a set preview."""

    name: str
    quantity: int
    foil: bool


class SetPreview(BaseModel):
    """Preview of the cards an import would touch within one set."""

    set_name: str
    missing: bool = Field(
        default=False,
        description="True if the set is not in the catalog and will be downloaded on commit",
    )
    cards: list[CardPreview] = Field(default_factory=list)
    total_cards: int = 0
    truncated: bool = False


class PreviewReport(BaseModel):
    """What an import would do, computed without writing ownership."""

    total_count: int = 0
    regular_count: int = 0
    foil_count: int = 0
    unique_count: int = 0
    skipped: int = 0
    found_sets: list[str] = Field(default_factory=list)
    missing_sets: list[str] = Field(default_factory=list)
    cards_by_set: dict[str, SetPreview] = Field(default_factory=dict)
    truncated: bool = False
    errors: list[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors or bool(self.cards_by_set)
