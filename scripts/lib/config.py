"""
Environment configuration for the eligibility scan.

Values come from the process environment, optionally seeded from a
`.env` file.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .injective_client import DEFAULT_TIMEOUT


class ConfigError(Exception):
    """Exception raised for missing or invalid configuration."""

    pass


@dataclass(frozen=True)
class Config:
    registered_file: str
    rpc_url: str
    indexer_url: str
    catalog_url: Optional[str] = None
    catalog_api_key: Optional[str] = None
    request_timeout: float = DEFAULT_TIMEOUT

    @property
    def uses_catalog(self) -> bool:
        return self.catalog_url is not None


def _required(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, "").strip()
    if not value:
        raise ConfigError(f"{name} not set in environment or .env")
    return value


def _optional(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name, "").strip()
    return value or None


def config_from_env(env: Mapping[str, str]) -> Config:
    """
    Build a Config from an environment mapping.

    Args:
        env: Environment variables

    Returns:
        Validated Config

    Raises:
        ConfigError: If a required value is missing or a value is invalid
    """
    catalog_url = _optional(env, "CATALOG_URL")
    catalog_api_key = _optional(env, "CATALOG_API_KEY")
    if (catalog_url is None) != (catalog_api_key is None):
        raise ConfigError("CATALOG_URL and CATALOG_API_KEY must be set together")

    timeout_raw = _optional(env, "REQUEST_TIMEOUT")
    timeout = DEFAULT_TIMEOUT
    if timeout_raw is not None:
        try:
            timeout = float(timeout_raw)
        except ValueError as e:
            raise ConfigError(
                f"REQUEST_TIMEOUT must be a number, got {timeout_raw!r}"
            ) from e
        if timeout <= 0:
            raise ConfigError(f"REQUEST_TIMEOUT must be positive, got {timeout_raw!r}")

    return Config(
        registered_file=_required(env, "REGISTERED_FILE"),
        rpc_url=_required(env, "RPC_URL").rstrip("/"),
        indexer_url=_required(env, "INDEXER_URL").rstrip("/"),
        catalog_url=catalog_url.rstrip("/") if catalog_url else None,
        catalog_api_key=catalog_api_key,
        request_timeout=timeout,
    )


def load_config(env_file: Optional[str] = None) -> Config:
    """
    Load configuration from a `.env` file and the process environment.

    Existing environment variables take precedence over the file. A
    missing default `.env` is not an error; an explicit one is.
    """
    if env_file is not None and not os.path.isfile(env_file):
        raise ConfigError(f"Env file not found: {env_file}")
    path = env_file or find_dotenv(usecwd=True)
    if path:
        load_dotenv(dotenv_path=path, override=False)
    return config_from_env(os.environ)
