"""Auth module public exports."""

from mapsync.auth.base import TokenResolver
from mapsync.auth.factory import create_token_resolver

__all__ = ["TokenResolver", "create_token_resolver"]
