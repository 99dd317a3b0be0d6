"""Configuration loader for richpresence."""

from __future__ import annotations

import tomllib
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator, model_validator

from richpresence.limits import (
    CONNECT_TIMEOUT,
    MAX_FRAME_BYTES,
    RECONNECT_MAX_DELAY_MS,
    RECONNECT_MIN_DELAY_MS,
)
from richpresence.paths import get_config_path

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_ENDPOINT_BASE = "discord"


class PresenceConfig(BaseModel):
    """Connection settings for a presence client."""

    client_id: str = Field(default="", description="Application identifier sent in the handshake")
    endpoint_base: str = Field(
        default=DEFAULT_ENDPOINT_BASE,
        description="Prefix of the peer's well-known endpoint names (<base>-ipc-N)",
    )
    connect_timeout_seconds: float = Field(
        default=CONNECT_TIMEOUT,
        description="Upper bound for each candidate endpoint connection attempt",
    )
    reconnect_min_delay_ms: int = Field(default=RECONNECT_MIN_DELAY_MS, gt=0)
    reconnect_max_delay_ms: int = Field(default=RECONNECT_MAX_DELAY_MS, gt=0)
    max_frame_bytes: int = Field(
        default=MAX_FRAME_BYTES,
        gt=0,
        description="Largest inbound frame payload accepted before the link is dropped",
    )

    @field_validator("connect_timeout_seconds", mode="before")
    @classmethod
    def validate_connect_timeout(cls, value: object) -> float:
        """Coerce missing or non-positive timeouts to the default."""
        match value:
            case int() | float() as seconds if not isinstance(seconds, bool) and seconds > 0:
                return float(seconds)
            case _:
                pass
        return CONNECT_TIMEOUT

    @model_validator(mode="after")
    def check_delay_bounds(self) -> PresenceConfig:
        if self.reconnect_max_delay_ms < self.reconnect_min_delay_ms:
            msg = "reconnect_max_delay_ms must be >= reconnect_min_delay_ms"
            raise ValueError(msg)
        return self

    @classmethod
    def load(cls, config_path: Path | None = None) -> PresenceConfig:
        """Load configuration from TOML file or use defaults.

        Settings may sit at the top level or under a ``[presence]`` table.
        """
        if config_path is None:
            config_path = get_config_path()

        if config_path.exists():
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
            section = data.get("presence")
            if isinstance(section, dict):
                data = {**data, **section}
                data.pop("presence", None)
            return cls.model_validate(data)

        return cls()


__all__ = ["DEFAULT_ENDPOINT_BASE", "PresenceConfig"]
