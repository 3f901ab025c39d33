from vaultimport.db.catalog_store import CatalogStore, front_face
from vaultimport.db.ownership_store import OwnershipStore

__all__ = [
    "CatalogStore",
    "OwnershipStore",
    "front_face",
]
