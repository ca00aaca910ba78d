"""Firestore REST provider."""

from mapsync.providers.firestore.store import FirestoreStore

__all__ = ["FirestoreStore"]
