"""Configuration model for the Crest client."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from .errors import InvalidOptions


@dataclass(frozen=True)
class CrestConfig:
    """Configuration for a Crest client.

    Attributes:
        base_url: Root URL every resource path is appended to.
        require_callback: When set, every request must be given a callback
            and is dispatched in the background.
        session_id: Key for per-session option overrides in an option store.
        user_agent: User-Agent header sent by the default transport.
        verify_tls: Whether the default transport verifies certificates.
        timeout_seconds: Default request timeout.
        max_workers: Size of the pool running callback requests.
    """

    base_url: str
    require_callback: bool = False
    session_id: str | None = None
    user_agent: str | None = None
    verify_tls: bool = True
    timeout_seconds: float | None = None
    max_workers: int = 4

    def __post_init__(self) -> None:
        if not self.base_url or not isinstance(self.base_url, str):
            raise InvalidOptions("base_url required.")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise InvalidOptions("timeout_seconds must be > 0 when provided")
        if self.max_workers < 1:
            raise InvalidOptions("max_workers must be >= 1")

        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_mapping(cls, options: Any) -> CrestConfig:
        """Build a config from a plain mapping, ignoring unknown keys."""
        if not isinstance(options, Mapping):
            raise InvalidOptions(
                "Client library must be instantiated with a configuration "
                "object."
            )
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in options.items() if k in known}
        if "base_url" not in values:
            raise InvalidOptions("base_url required.")
        return cls(**values)
