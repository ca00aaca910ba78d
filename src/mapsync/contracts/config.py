"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

DEFAULT_FIRESTORE_URL = "https://firestore.googleapis.com/v1"


class MapSyncConfig(BaseModel):
    provider: str = "firestore"
    project_id: str | None = None
    database: str = "(default)"
    base_url: str = DEFAULT_FIRESTORE_URL
    auth: str = "none"
    token: str | None = None
    api_key: str | None = None
    seed_path: Path | None = None
    cache_dir: Path = Path("cache")
    max_concurrent: int | None = Field(default=None, ge=1, le=64)
    max_retries: int = Field(default=3, ge=0, le=10)
    timeout_seconds: float = Field(default=30.0, gt=0)
    page_size: int = Field(default=300, ge=1, le=1000)
    commit_partial_versions: bool = True
    cleanup_unused_map_files: bool = True

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_provider(self) -> MapSyncConfig:
        if self.provider not in {"firestore", "memory"}:
            raise ValueError("provider must be one of: firestore, memory")
        if self.provider == "firestore" and not (self.project_id or "").strip():
            raise ValueError("firestore provider requires a non-empty project_id")
        return self

    @model_validator(mode="after")
    def validate_auth_token(self) -> MapSyncConfig:
        token = (self.token or "").strip()
        if self.auth == "token":
            if not token:
                raise ValueError("token auth requires a non-empty token")
            return self
        if token:
            raise ValueError("token must be unset when auth is not 'token'")
        if self.auth not in {"none", "env", "token"}:
            raise ValueError("auth must be one of: none, env, token")
        return self
