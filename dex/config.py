"""Configuration for the exchange and its HTTP service."""

import os
from dataclasses import dataclass

from dex.models.types import normalize_address

# Registry identity used when none is configured
DEFAULT_REGISTRY_ADDRESS = "0x5fbdb2315678afecb367f032d93f642f64180aa3"

# Most recent events kept in memory per registry and per pool
DEFAULT_EVENT_HISTORY = 1024


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class DexConfig:
    """Centralized configuration for registry, pools and service.

    Attributes:
        registry_address: Identity of the registry; pool addresses are
            derived from it
        claim_token_name: Name given to every pool's claim token
        claim_token_symbol: Symbol given to every pool's claim token
        event_history: Number of recent events each registry and pool keeps
        log_level: Minimum structlog level (DEBUG, INFO, WARNING, ...)
        log_json: Render logs as JSON lines instead of console output
        host: HTTP bind host
        port: HTTP bind port
        debug: Enable uvicorn reload mode
    """

    registry_address: str = DEFAULT_REGISTRY_ADDRESS
    claim_token_name: str = "LP Token"
    claim_token_symbol: str = "LP"
    event_history: int = DEFAULT_EVENT_HISTORY

    log_level: str = "INFO"
    log_json: bool = False

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    def __post_init__(self) -> None:
        normalize_address(self.registry_address, validate=True)
        if self.event_history < 1:
            raise ValueError(f"event_history must be positive, got {self.event_history}")

    @classmethod
    def from_env(cls) -> "DexConfig":
        """Build a configuration from DEX_* environment variables.

        Unset variables fall back to the dataclass defaults.
        """
        defaults = cls()
        return cls(
            registry_address=os.environ.get("DEX_REGISTRY_ADDRESS", defaults.registry_address),
            claim_token_name=os.environ.get("DEX_CLAIM_TOKEN_NAME", defaults.claim_token_name),
            claim_token_symbol=os.environ.get(
                "DEX_CLAIM_TOKEN_SYMBOL", defaults.claim_token_symbol
            ),
            event_history=int(
                os.environ.get("DEX_EVENT_HISTORY", str(defaults.event_history))
            ),
            log_level=os.environ.get("DEX_LOG_LEVEL", defaults.log_level).upper(),
            log_json=_env_flag("DEX_LOG_JSON"),
            host=os.environ.get("DEX_HOST", defaults.host),
            port=int(os.environ.get("DEX_PORT", str(defaults.port))),
            debug=_env_flag("DEX_DEBUG"),
        )


# Default configuration instance
DEFAULT_DEX_CONFIG = DexConfig()
