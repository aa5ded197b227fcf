"""
Client configuration for GovernsAI.
"""

import dataclasses
import os
import threading
from dataclasses import dataclass, fields
from typing import Any, Optional

from .exceptions import ConfigurationError
from .validation import (
    validate_int_range,
    validate_non_negative,
    validate_required,
    validate_url,
)

MIN_TIMEOUT_MS = 1000
MAX_TIMEOUT_MS = 300000
MAX_RETRIES_LIMIT = 10


@dataclass(frozen=True)
class GovernsAIConfig:
    """
    Immutable client configuration.

    Validated on construction; an invalid value raises ``ConfigurationError``
    before any transport exists. Use ``replace`` to derive a new snapshot.
    """

    api_key: str
    base_url: str
    org_id: str
    timeout_ms: int = 30000
    max_retries: int = 3
    retry_base_delay_ms: int = 1000
    precheck_base_url: Optional[str] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        validate_required(self.api_key, "api_key", error_cls=ConfigurationError)
        validate_required(self.org_id, "org_id", error_cls=ConfigurationError)
        validate_required(self.base_url, "base_url", error_cls=ConfigurationError)
        validate_url(self.base_url, "base_url", error_cls=ConfigurationError)
        validate_url(self.precheck_base_url, "precheck_base_url", error_cls=ConfigurationError)
        validate_int_range(
            self.timeout_ms,
            "timeout_ms",
            MIN_TIMEOUT_MS,
            MAX_TIMEOUT_MS,
            error_cls=ConfigurationError,
        )
        validate_int_range(
            self.max_retries, "max_retries", 0, MAX_RETRIES_LIMIT, error_cls=ConfigurationError
        )
        validate_non_negative(
            self.retry_base_delay_ms, "retry_base_delay_ms", error_cls=ConfigurationError
        )

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def precheck_url(self) -> str:
        """Base URL for precheck calls, falling back to the platform URL."""
        return (self.precheck_base_url or self.base_url).rstrip("/")

    def replace(self, **changes: Any) -> "GovernsAIConfig":
        """Return a validated copy with ``changes`` applied."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration field(s): {', '.join(sorted(unknown))}"
            )
        return dataclasses.replace(self, **changes)

    def to_dict(self, redact: bool = True) -> dict[str, Any]:
        return {
            "api_key": "***" if redact else self.api_key,
            "base_url": self.base_url,
            "org_id": self.org_id,
            "timeout_ms": self.timeout_ms,
            "max_retries": self.max_retries,
            "retry_base_delay_ms": self.retry_base_delay_ms,
            "precheck_base_url": self.precheck_base_url,
        }

    @classmethod
    def from_env(cls) -> "GovernsAIConfig":
        """Create configuration from ``GOVERNS_*`` environment variables."""
        required = {}
        for name in ("GOVERNS_API_KEY", "GOVERNS_BASE_URL", "GOVERNS_ORG_ID"):
            value = os.environ.get(name, "")
            if not value:
                raise ConfigurationError(f"{name} environment variable is required", field=name)
            required[name] = value

        optional: dict[str, Any] = {}
        for name, key in (
            ("GOVERNS_TIMEOUT", "timeout_ms"),
            ("GOVERNS_RETRIES", "max_retries"),
            ("GOVERNS_RETRY_DELAY", "retry_base_delay_ms"),
        ):
            raw = os.environ.get(name)
            if raw:
                try:
                    optional[key] = int(raw)
                except ValueError:
                    raise ConfigurationError(
                        f"{name} must be an integer", field=name, value=raw
                    ) from None

        return cls(
            api_key=required["GOVERNS_API_KEY"],
            base_url=required["GOVERNS_BASE_URL"],
            org_id=required["GOVERNS_ORG_ID"],
            precheck_base_url=os.environ.get("GOVERNS_PRECHECK_URL") or None,
            **optional,
        )


class ConfigHolder:
    """
    Shared reference to the live configuration snapshot.

    Readers take one snapshot per call; ``swap`` replaces the reference as a
    whole, so a reader never sees a half-updated configuration.
    """

    def __init__(self, config: GovernsAIConfig):
        self._config = config
        self._lock = threading.Lock()

    def get(self) -> GovernsAIConfig:
        return self._config

    def swap(self, config: GovernsAIConfig) -> GovernsAIConfig:
        """Install ``config`` and return the previous snapshot."""
        with self._lock:
            previous, self._config = self._config, config
        return previous

    def update(self, **changes: Any) -> GovernsAIConfig:
        """Validate ``changes`` against the current snapshot and install the result."""
        with self._lock:
            new_config = self._config.replace(**changes)
            self._config = new_config
        return new_config
