import pytest

from mapsync.auth.factory import create_token_resolver
from mapsync.auth.resolvers.anonymous import AnonymousTokenResolver
from mapsync.auth.resolvers.env import TOKEN_ENV_VAR, EnvTokenResolver
from mapsync.auth.resolvers.static import StaticTokenResolver
from mapsync.contracts.config import MapSyncConfig
from mapsync.contracts.exceptions import AuthenticationError, ConfigError


def _make_config(*, auth: str, token: str | None = None) -> MapSyncConfig:
    return MapSyncConfig(provider="firestore", project_id="campus-nav", auth=auth, token=token)


def test_factory_creates_anonymous_resolver() -> None:
    resolver = create_token_resolver(_make_config(auth="none"))

    assert isinstance(resolver, AnonymousTokenResolver)


def test_factory_creates_env_resolver() -> None:
    resolver = create_token_resolver(_make_config(auth="env"))

    assert isinstance(resolver, EnvTokenResolver)


def test_factory_creates_static_resolver() -> None:
    resolver = create_token_resolver(_make_config(auth="token", token="tok_123"))

    assert isinstance(resolver, StaticTokenResolver)


def test_factory_raises_for_unknown_auth_mode() -> None:
    config = MapSyncConfig.model_construct(provider="firestore", project_id="campus-nav", auth="oauth")

    with pytest.raises(ConfigError, match="Unknown auth mode"):
        create_token_resolver(config)


@pytest.mark.asyncio
async def test_anonymous_resolver_returns_empty_token() -> None:
    assert await AnonymousTokenResolver().resolve() == ""


@pytest.mark.asyncio
async def test_env_resolver_reads_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(TOKEN_ENV_VAR, "  env-token \n")

    assert await EnvTokenResolver().resolve() == "env-token"


@pytest.mark.asyncio
async def test_env_resolver_requires_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)

    with pytest.raises(AuthenticationError, match=TOKEN_ENV_VAR):
        await EnvTokenResolver().resolve()


@pytest.mark.asyncio
async def test_static_resolver_rejects_blank_token() -> None:
    assert await StaticTokenResolver(token=" tok ").resolve() == "tok"
    with pytest.raises(AuthenticationError, match="empty"):
        await StaticTokenResolver(token="   ").resolve()
