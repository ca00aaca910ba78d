"""Concrete token resolvers."""

from mapsync.auth.resolvers.anonymous import AnonymousTokenResolver
from mapsync.auth.resolvers.env import EnvTokenResolver
from mapsync.auth.resolvers.static import StaticTokenResolver

__all__ = ["AnonymousTokenResolver", "EnvTokenResolver", "StaticTokenResolver"]
