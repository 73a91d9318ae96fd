"""Mondial Relay credentials loaded from the environment or a .env file."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from mondial_relay.rest_client import DEFAULT_TIMEOUT

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Credentials for both Mondial Relay APIs.

    The clients never read the environment themselves; callers build
    them from a Settings instance or pass credentials directly.
    """

    api_key: str = ""
    api_secret: str = ""
    sandbox: bool = False
    api_base_url: str | None = None
    enseigne: str = ""
    private_key: str = ""
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "Settings":
        """Read MONDIAL_RELAY_* variables, loading .env first."""
        load_dotenv()
        return cls(
            api_key=os.getenv("MONDIAL_RELAY_API_KEY", ""),
            api_secret=os.getenv("MONDIAL_RELAY_API_SECRET", ""),
            sandbox=os.getenv("MONDIAL_RELAY_SANDBOX", "").strip().lower() in _TRUE_VALUES,
            api_base_url=os.getenv("MONDIAL_RELAY_API_BASE_URL") or None,
            enseigne=os.getenv("MONDIAL_RELAY_ENSEIGNE", ""),
            private_key=os.getenv("MONDIAL_RELAY_PRIVATE_KEY", ""),
            timeout=float(os.getenv("MONDIAL_RELAY_TIMEOUT", DEFAULT_TIMEOUT)),
        )
