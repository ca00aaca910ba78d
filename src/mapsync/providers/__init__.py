"""Remote store implementations and factory."""

from mapsync.providers.factory import create_remote_store
from mapsync.providers.firestore import FirestoreStore
from mapsync.providers.memory import InMemoryRemoteStore

__all__ = ["FirestoreStore", "InMemoryRemoteStore", "create_remote_store"]
