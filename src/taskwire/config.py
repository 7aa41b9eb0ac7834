"""Configuration: frozen ClientConfig with environment fallbacks."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

from dotenv import load_dotenv

from taskwire.errors import ConfigurationError

load_dotenv()

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _env_float(name: str) -> float | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be a number, got {raw!r}",
            hint=f"Unset {name} or give it a value like '10'.",
        ) from None


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}",
            hint=f"Unset {name} or give it a value like '4'.",
        ) from None


def _env_bool(name: str) -> bool | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{name} must be a boolean, got {raw!r}",
        hint="Use one of: 1/0, true/false, yes/no, on/off.",
    )


def _first(*values: Any) -> Any:
    return next((v for v in values if v is not None), None)


@dataclass(frozen=True)
class ClientConfig:
    """Immutable transport configuration.

    Fields left as ``None`` are resolved from ``TASKWIRE_*`` environment
    variables (a ``.env`` file is loaded first), then from the defaults below.

    Example:
        config = ClientConfig(timeout_s=5, max_workers=8)
    """

    #: Per-request transport timeout. Resolved from ``TASKWIRE_TIMEOUT_S``.
    timeout_s: float | None = None
    #: Worker threads for the blocking transport. ``TASKWIRE_MAX_WORKERS``.
    max_workers: int | None = None
    verify_tls: bool | None = None
    follow_redirects: bool | None = None
    user_agent: str | None = None

    def __post_init__(self) -> None:
        """Resolve environment fallbacks and validate."""
        resolved = {
            "timeout_s": _first(self.timeout_s, _env_float("TASKWIRE_TIMEOUT_S"), 30.0),
            "max_workers": _first(
                self.max_workers, _env_int("TASKWIRE_MAX_WORKERS"), 4
            ),
            "verify_tls": _first(self.verify_tls, _env_bool("TASKWIRE_VERIFY_TLS"), True),
            "follow_redirects": _first(
                self.follow_redirects, _env_bool("TASKWIRE_FOLLOW_REDIRECTS"), True
            ),
            "user_agent": _first(
                self.user_agent, os.environ.get("TASKWIRE_USER_AGENT"), "taskwire"
            ),
        }
        for name, value in resolved.items():
            object.__setattr__(self, name, value)

        if self.timeout_s <= 0:
            raise ConfigurationError(
                f"timeout_s must be > 0, got {self.timeout_s}",
                hint="This bounds each transport request; it is not a task timeout.",
            )
        if self.max_workers < 1:
            raise ConfigurationError(
                f"max_workers must be ≥ 1, got {self.max_workers}",
                hint="This controls how many blocking requests run in parallel.",
            )

    def __str__(self) -> str:
        """Return a compact, developer-friendly representation."""
        return (
            f"ClientConfig(timeout_s={self.timeout_s}, "
            f"max_workers={self.max_workers}, verify_tls={self.verify_tls})"
        )
