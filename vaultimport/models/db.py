"""
SQLAlchemy ORM models for persistent storage.

Catalog tables (card_sets, cards) are written by the missing-set fetcher;
collection_cards is written by the commit writer.
"""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardSetDB(Base):
    """
    A card set in the local catalog.

    Codes are stored lowercase, matching Scryfall.
    """

    __tablename__ = "card_sets"

    code: Mapped[str] = mapped_column(String(16), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    released_at: Mapped[date | None] = mapped_column(Date, nullable=True)
    card_count: Mapped[int] = mapped_column(Integer, default=0)
    set_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    parent_set_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    cards: Mapped[list["CardDB"]] = relationship(back_populates="card_set")

    def __repr__(self) -> str:
        return f"<CardSetDB(code={self.code}, name={self.name})>"


class CardDB(Base):
    """
    A canonical card printing.

    The Scryfall UUID is the primary key so imports carrying it match directly.
    """

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    set_code: Mapped[str] = mapped_column(
        String(16), ForeignKey("card_sets.code", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255), index=True)
    collector_number: Mapped[str] = mapped_column(String(32), default="")
    rarity: Mapped[str | None] = mapped_column(String(20), nullable=True)

    card_set: Mapped["CardSetDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name}, set={self.set_code})>"


class CollectionCardDB(Base):
    """
    Ownership record for one card.

    needs_placement_at marks copies added but not yet filed into a binder.
    """

    __tablename__ = "collection_cards"

    card_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("cards.id", ondelete="CASCADE"), primary_key=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    foil_quantity: Mapped[int] = mapped_column(Integer, default=0)
    needs_placement_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<CollectionCardDB(card={self.card_id}, qty={self.quantity}, "
            f"foil={self.foil_quantity})>"
        )
