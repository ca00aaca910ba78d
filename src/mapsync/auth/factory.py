"""Token resolver factory."""

from __future__ import annotations

from mapsync.auth.base import TokenResolver
from mapsync.auth.resolvers.anonymous import AnonymousTokenResolver
from mapsync.auth.resolvers.env import EnvTokenResolver
from mapsync.auth.resolvers.static import StaticTokenResolver
from mapsync.contracts.config import MapSyncConfig
from mapsync.contracts.exceptions import ConfigError

RESOLVERS: dict[str, type[TokenResolver]] = {
    "none": AnonymousTokenResolver,
    "env": EnvTokenResolver,
    "token": StaticTokenResolver,
}


def create_token_resolver(config: MapSyncConfig) -> TokenResolver:
    auth_mode = config.auth
    if auth_mode not in RESOLVERS:
        raise ConfigError(f"Unknown auth mode: {auth_mode}")

    if auth_mode == "none":
        return AnonymousTokenResolver()
    if auth_mode == "env":
        return EnvTokenResolver()
    return StaticTokenResolver(token=config.token or "")
