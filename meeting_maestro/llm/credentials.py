"""API key validation and the explicit upstream configuration value."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

MIN_KEY_LENGTH = 40


class Provider(StrEnum):
    """Supported upstream completion providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


KEY_PREFIXES: dict[Provider, tuple[str, ...]] = {
    Provider.OPENAI: ("sk-proj-", "sk-"),
    Provider.ANTHROPIC: ("sk-ant-",),
}

_KEY_RE = re.compile(r"^sk-[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class KeyValidation:
    """Outcome of validating an API key. Never holds the key itself."""

    valid: bool
    reason: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"valid": self.valid}
        if self.reason:
            data["reason"] = self.reason
        if self.details:
            data["details"] = self.details
        return data


@dataclass(frozen=True)
class LLMConfig:
    """Everything needed to construct an upstream completion client."""

    provider: Provider
    api_key: str

    def __repr__(self) -> str:
        return f"LLMConfig(provider={self.provider.value!r}, api_key=<redacted>)"


def validate_api_key(key: str | None, provider: Provider = Provider.OPENAI) -> KeyValidation:
    """Check that *key* looks like a usable key for *provider*.

    This is a format check only; whether the key is accepted is up to the
    provider.
    """
    if not key or not key.strip():
        return KeyValidation(valid=False, reason="API key is empty")

    key = key.strip()
    if len(key) < MIN_KEY_LENGTH:
        return KeyValidation(
            valid=False,
            reason=f"Key too short: {len(key)} characters",
            details={"current_length": len(key), "expected_min_length": MIN_KEY_LENGTH},
        )

    prefixes = KEY_PREFIXES[provider]
    if not key.startswith(prefixes):
        return KeyValidation(
            valid=False,
            reason=f"Invalid key prefix. Expected one of: {', '.join(prefixes)}",
            details={"current_prefix": key[:3], "valid_prefixes": list(prefixes)},
        )

    if not _KEY_RE.match(key):
        return KeyValidation(valid=False, reason="Key contains invalid characters")

    return KeyValidation(valid=True)
