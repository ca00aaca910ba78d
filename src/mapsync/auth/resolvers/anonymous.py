"""Resolver for stores that need no bearer token (public rules, API key only, or in-memory)."""

from __future__ import annotations

from mapsync.auth.base import TokenResolver


class AnonymousTokenResolver(TokenResolver):
    async def resolve(self) -> str:
        return ""
