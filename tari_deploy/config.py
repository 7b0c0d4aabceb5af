from __future__ import annotations

"""
Configuration loader for tari-deploy.

- Reads environment variables (optionally from `.env`) via pydantic-settings.
- Loads the project configuration file (`tari.config.toml`) that maps network
  names to wallet daemon JSON-RPC endpoints.
- Exposes a cached `get_settings()` accessor and `resolve_wallet_daemon_url()`.

Environment variables (prefix TARI_DEPLOY_):
    WALLET_DAEMON_URL       (str, optional)   overrides any network endpoint
    DEFAULT_ACCOUNT         (str, optional)   account used when --account is omitted
    WAIT_TIMEOUT_SECS       (int, default 120)
    HTTP_TIMEOUT_SECS       (float, default 30)
    AUTH_PERMISSIONS        (json list, default ["Admin"])
    SESSION_NAME            (str, default "default")
    NATIVE_RESOURCE_ADDRESS (str)             resource holding the fee token
    BINARY_SIZE_WARNING_BYTES (int)
    LOG_LEVEL / LOG_FORMAT

Project config (`<project-folder>/tari.config.toml`):

    [networks.local]
    wallet_daemon_jrpc_address = "http://127.0.0.1:12009/json_rpc"

    [networks.esme]
    wallet_daemon_jrpc_address = "https://wallet.example:12009/json_rpc"
"""

import enum
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

CONFIG_FILE_NAME = "tari.config.toml"
DEFAULT_LOCAL_WALLET_DAEMON_URL = "http://127.0.0.1:12009/json_rpc"
# Resource address of the native (fee) token: 32 bytes of 0x01.
NATIVE_RESOURCE_ADDRESS = "resource_" + "01" * 32


class Network(str, enum.Enum):
    LOCAL = "local"
    TESTNET = "testnet"
    MAINNET = "mainnet"
    CUSTOM = "custom"

    def __str__(self) -> str:
        return self.value


def _ensure_http_url(url: str) -> str:
    s = url.strip()
    if not s.lower().startswith(("http://", "https://")):
        raise ValueError(f"URL must start with http:// or https://, got: {url!r}")
    return s


# ------------------------------ Project config --------------------------------


class NetworkConfig(BaseModel):
    """A single network profile of the project config."""

    model_config = ConfigDict(extra="forbid")

    wallet_daemon_jrpc_address: str = Field(
        ..., description="HTTP address of the wallet daemon JSON-RPC endpoint."
    )

    @field_validator("wallet_daemon_jrpc_address")
    @classmethod
    def _check_url(cls, v: str) -> str:
        return _ensure_http_url(v)


class ProjectConfig(BaseModel):
    """Project configuration: named network profiles."""

    model_config = ConfigDict(extra="ignore")

    networks: Dict[str, NetworkConfig] = Field(default_factory=dict)

    @classmethod
    def default(cls) -> "ProjectConfig":
        return cls(
            networks={
                Network.LOCAL.value: NetworkConfig(
                    wallet_daemon_jrpc_address=DEFAULT_LOCAL_WALLET_DAEMON_URL
                )
            }
        )

    @classmethod
    def load(cls, project_folder: Path) -> "ProjectConfig":
        """
        Load `<project_folder>/tari.config.toml`. A missing file yields the
        built-in defaults; an unreadable or malformed file is a ConfigError.
        """
        path = Path(project_folder) / CONFIG_FILE_NAME
        if not path.exists():
            return cls.default()
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load project config file (at {path}): {e}") from e
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid project config file (at {path}): {e}") from e

    def find_network_config(self, name: str) -> Optional[NetworkConfig]:
        return self.networks.get(name)


# --------------------------------- Settings ----------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TARI_DEPLOY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    wallet_daemon_url: Optional[str] = Field(
        default=None, description="Overrides the network endpoint from the project config."
    )
    default_account: Optional[str] = Field(
        default=None, description="Fee account used when none is given on the command line."
    )
    wait_timeout_secs: int = Field(
        default=120, gt=0, description="Bound for the wait-for-result call (seconds)."
    )
    http_timeout_secs: float = Field(default=30.0, gt=0, description="Per-request HTTP timeout.")
    auth_permissions: List[str] = Field(
        default_factory=lambda: ["Admin"], description="Permissions requested at login."
    )
    session_name: str = Field(default="default", min_length=1, description="Session label.")
    native_resource_address: str = Field(default=NATIVE_RESOURCE_ADDRESS, min_length=1)
    binary_size_warning_bytes: int = Field(
        default=2 * 1024 * 1024, gt=0, description="Warn before publishing larger binaries."
    )
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="console")

    @field_validator("wallet_daemon_url")
    @classmethod
    def _check_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return _ensure_http_url(v)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


def resolve_wallet_daemon_url(
    *,
    network: Network,
    custom_network: Optional[str],
    project_folder: Path,
    settings: Optional[Settings] = None,
) -> str:
    """
    Resolve the wallet daemon endpoint.

    Order: TARI_DEPLOY_WALLET_DAEMON_URL > project config network > defaults.
    """
    settings = settings or get_settings()
    if settings.wallet_daemon_url:
        return settings.wallet_daemon_url

    if network == Network.CUSTOM:
        if not custom_network:
            raise ConfigError("No custom network name provided!")
        name = custom_network
    else:
        name = network.value

    project = ProjectConfig.load(project_folder)
    found = project.find_network_config(name)
    if found is None:
        raise ConfigError(f"Network not found in project config: {name}")
    return found.wallet_daemon_jrpc_address


__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_LOCAL_WALLET_DAEMON_URL",
    "NATIVE_RESOURCE_ADDRESS",
    "Network",
    "NetworkConfig",
    "ProjectConfig",
    "Settings",
    "get_settings",
    "resolve_wallet_daemon_url",
]
