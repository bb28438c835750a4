"""skyfeed.core.config

Three config surfaces only:
1) `config/default.yaml`
2) `config/user.yaml` (optional, deep-merged over the default)
3) Environment variables `SKYFEED_<SECTION>__<KEY>` (secrets belong here)

Configuration is loaded once at startup and passed explicitly. Nothing reads
the environment per request.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from skyfeed.core.exceptions import ConfigError

INSECURE_ENV = "SKYFEED_INSECURE_OK"


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


class ServiceConfig(BaseModel):
    did: str = ""
    hostname: str = ""
    # DID that publishes the feed generator records served here.
    publisher_did: str = "did:plc:w4xbfzo7kqfes5zb7r6qv3rw"


class ApiConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    service_key: str = ""
    service_key_header: str = "X-RSKY-KEY"


class DatabaseConfig(BaseModel):
    write_path: Path = Path("data/feedgen.db")
    read_path: Path | None = None
    timeout_seconds: float = 30.0

    @property
    def replica_path(self) -> Path:
        return self.read_path or self.write_path


class AuthConfig(BaseModel):
    """Session-token verification.

    `signing_keys` maps an issuer DID to its PEM-encoded public key. Resolving
    keys from DID documents is someone else's job; this is the static table.
    """

    signing_keys: dict[str, str] = Field(default_factory=dict)
    leeway_seconds: int = 0

    @field_validator("leeway_seconds")
    @classmethod
    def leeway_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("leeway_seconds must be >= 0")
        return v


class MailConfig(BaseModel):
    host: str = ""
    port: int = 587
    username: str = ""
    password: str = ""
    from_address: str = "noreply@localhost"
    use_tls: bool = True
    timeout_seconds: float = 30.0


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "SKYFEED_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        raw = yaml.safe_load(path.read_text()) or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")

        # user.yaml layers over default.yaml when both live in the same directory
        if path.name == "user.yaml":
            default_path = path.parent / "default.yaml"
            if default_path.exists():
                base = yaml.safe_load(default_path.read_text()) or {}
                raw = _deep_merge(base, raw)

        return cls(**raw)

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        user_path = root / "config" / "user.yaml"
        if user_path.exists():
            return cls.from_yaml(user_path)
        return cls.from_yaml(root / "config" / "default.yaml")

    def require_serving(self) -> None:
        """Refuse to serve with a configuration that cannot authenticate anyone."""

        if not self.service.did:
            raise ConfigError("service.did is empty. Set SKYFEED_SERVICE__DID.")

        insecure_ok = os.environ.get(INSECURE_ENV, "").lower() in ("1", "true", "yes")
        if not self.api.service_key and not insecure_ok:
            raise ConfigError(
                "api.service_key is empty. Set SKYFEED_API__SERVICE_KEY "
                f"(or {INSECURE_ENV}=1 for local development only)."
            )
