import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vaultimport.config import Settings
from vaultimport.db.catalog_store import CatalogStore
from vaultimport.db.database import configure_sqlite
from vaultimport.db.ownership_store import OwnershipStore
from vaultimport.models.db import Base, CardDB, CardSetDB
from vaultimport.models.records import CanonicalCard, ImportFile, RemoteSet
from vaultimport.services.scryfall_client import RemoteCatalogError

TEST_CARD_ID = "00000000-0000-0000-0000-000000000001"
DFC_CARD_ID = "00000000-0000-0000-0000-000000000002"
BOLT_TST_ID = "00000000-0000-0000-0000-000000000003"
BOLT_M10_ID = "00000000-0000-0000-0000-000000000004"

DELVER_HEADER = "Name,Edition code,Collector's number,QuantityX,Foil,Scryfall ID"


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine with foreign keys enforced."""
    engine = configure_sqlite(create_async_engine("sqlite+aiosqlite:///:memory:", echo=False))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def seeded_session(session: AsyncSession) -> AsyncSession:
    """
    Session with a small catalog:

    tst "Test Set": Test Card #1, Delver of Secrets // Insectile Aberration #2,
                    Lightning Bolt #3
    m10 "Magic 2010": Lightning Bolt #146
    """
    session.add_all(
        [
            CardSetDB(code="tst", name="Test Set", card_count=3),
            CardSetDB(code="m10", name="Magic 2010", card_count=1),
        ]
    )
    await session.flush()
    session.add_all(
        [
            CardDB(id=TEST_CARD_ID, set_code="tst", name="Test Card", collector_number="1"),
            CardDB(
                id=DFC_CARD_ID,
                set_code="tst",
                name="Delver of Secrets // Insectile Aberration",
                collector_number="2",
            ),
            CardDB(id=BOLT_TST_ID, set_code="tst", name="Lightning Bolt", collector_number="3"),
            CardDB(id=BOLT_M10_ID, set_code="m10", name="Lightning Bolt", collector_number="146"),
        ]
    )
    await session.commit()
    return session


@pytest.fixture
def catalog(seeded_session: AsyncSession) -> CatalogStore:
    return CatalogStore(seeded_session)


@pytest.fixture
def ownership(seeded_session: AsyncSession) -> OwnershipStore:
    return OwnershipStore(seeded_session)


@pytest.fixture
def import_settings() -> Settings:
    return Settings(database_url="sqlite+aiosqlite:///:memory:", scryfall_rate_limit_delay=0)


def delver_csv(*rows: str, header: str = DELVER_HEADER, filename: str = "export.csv") -> ImportFile:
    """Build a Delver Lens CSV upload from raw lines."""
    text = "\n".join([header, *rows]) + "\n"
    return ImportFile(filename=filename, content=text.encode("utf-8"))


class FakeRemote:
    """Remote catalog returning canned sets; unknown codes raise."""

    def __init__(self, sets: dict[str, RemoteSet]) -> None:
        self.sets = sets
        self.calls: list[str] = []

    async def fetch_set(self, code: str) -> RemoteSet:
        self.calls.append(code)
        if code not in self.sets:
            raise RemoteCatalogError(f"Failed to fetch set {code}: HTTP 404")
        return self.sets[code]


def new_set(code: str, *ids: str) -> RemoteSet:
    cards = tuple(
        CanonicalCard(id=card_id, name=f"Card {card_id}", set_code=code, collector_number=str(i))
        for i, card_id in enumerate(ids, start=1)
    )
    return RemoteSet(code=code, name=f"Set {code.upper()}", cards=cards)
