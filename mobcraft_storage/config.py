"""
Configuration for Mobcraft Storage clients.

Settings come from, in order of precedence: explicit arguments, the
MOBCRAFT_* environment variables, and (for the CLI) the JSON config file
in ~/.mobcraft/config.json.
"""

import json
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import AuthenticationError

DEFAULT_BASE_URL = "https://storage.mobcraft.in"
DEFAULT_TIMEOUT = 30.0

ENV_API_KEY = "MOBCRAFT_API_KEY"
ENV_BASE_URL = "MOBCRAFT_BASE_URL"
ENV_TIMEOUT = "MOBCRAFT_TIMEOUT"

CONFIG_FILE = Path.home() / ".mobcraft" / "config.json"


def _parse_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid timeout: {value!r}") from None
    if not math.isfinite(timeout) or timeout <= 0:
        raise ValueError(f"Timeout must be a positive number, got {timeout}")
    return timeout


@dataclass(frozen=True)
class StorageConfig:
    """Connection settings shared by the sync and async clients."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if not self.api_key:
            raise AuthenticationError(
                f"API key is required. Provide it as parameter or {ENV_API_KEY} env var."
            )
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "timeout", _parse_timeout(self.timeout))

    @classmethod
    def resolve(
        cls,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> "StorageConfig":
        """Build a config from explicit arguments, falling back to the environment."""
        env_timeout = os.getenv(ENV_TIMEOUT)
        return cls(
            api_key=api_key or os.getenv(ENV_API_KEY) or "",
            base_url=base_url or os.getenv(ENV_BASE_URL) or DEFAULT_BASE_URL,
            timeout=timeout if timeout is not None else (env_timeout or DEFAULT_TIMEOUT),
        )

    @classmethod
    def from_env(cls) -> "StorageConfig":
        """Build a config from the MOBCRAFT_* environment variables only."""
        return cls.resolve()

    def __repr__(self):
        return f"StorageConfig(api_key='***', base_url={self.base_url!r}, timeout={self.timeout!r})"


def load_config_file(path: Path = CONFIG_FILE) -> Dict[str, Any]:
    """Load CLI settings; a missing or unreadable file yields an empty dict."""
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config_file(config: Dict[str, Any], path: Path = CONFIG_FILE) -> None:
    """Save CLI settings, readable by the owner only."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config, f, indent=2)
    path.chmod(0o600)
