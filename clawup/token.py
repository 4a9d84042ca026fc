"""
Gateway token generation from a prioritized list of randomness providers.
"""

import hashlib
import logging
import os
import re
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import TokenGenerationError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
TOKEN_PATTERN = re.compile(r"^[0-9a-f]{64}$")


class TokenProvider(ABC):
    """A source of random bytes for the gateway token."""

    name: str = "provider"
    weak: bool = False

    @abstractmethod
    def try_generate(self) -> Optional[bytes]:
        """
        Return TOKEN_BYTES random bytes, or None when the source is unavailable.
        """
        pass


class OsUrandomProvider(TokenProvider):
    name = "os.urandom"

    def try_generate(self) -> Optional[bytes]:
        try:
            return os.urandom(TOKEN_BYTES)
        except NotImplementedError:
            return None


class SecretsProvider(TokenProvider):
    name = "secrets"

    def try_generate(self) -> Optional[bytes]:
        try:
            return secrets.token_bytes(TOKEN_BYTES)
        except NotImplementedError:
            return None


class TimestampHashProvider(TokenProvider):
    """SHA-256 of the current nanosecond clock. Predictable; last resort only."""

    name = "timestamp-sha256"
    weak = True

    def try_generate(self) -> Optional[bytes]:
        return hashlib.sha256(str(time.time_ns()).encode("ascii")).digest()


DEFAULT_PROVIDERS: Sequence[TokenProvider] = (
    OsUrandomProvider(),
    SecretsProvider(),
    TimestampHashProvider(),
)


@dataclass(frozen=True)
class TokenResult:
    """A generated gateway token and where it came from."""
    value: str
    provider: str
    weak: bool = False

    def __str__(self) -> str:
        return self.value


def is_valid_token(value: str) -> bool:
    return bool(TOKEN_PATTERN.match(value))


def generate_token(providers: Optional[Sequence[TokenProvider]] = None, allow_weak: bool = False) -> TokenResult:
    """
    Generate a 64-character lowercase hex gateway token.

    Providers are tried in order and the first that returns exactly
    TOKEN_BYTES bytes wins.

    Args:
        providers: Providers in preference order (DEFAULT_PROVIDERS when omitted)
        allow_weak: Accept a non-cryptographic provider's output

    Returns:
        TokenResult

    Raises:
        TokenGenerationError: If no provider is available, or only a weak one
            is and allow_weak is False
    """
    providers = DEFAULT_PROVIDERS if providers is None else providers

    for provider in providers:
        raw = provider.try_generate()
        if raw is None or len(raw) != TOKEN_BYTES:
            logger.debug("Token provider %s unavailable", provider.name)
            continue

        if provider.weak:
            if not allow_weak:
                raise TokenGenerationError(
                    f"Only the weak '{provider.name}' token source is available",
                    hint="Re-run with --allow-weak-token to accept a predictable token.",
                )
            logger.warning("Gateway token generated from weak source '%s'", provider.name)

        return TokenResult(value=raw.hex(), provider=provider.name, weak=provider.weak)

    raise TokenGenerationError("No random source is available to generate the gateway token")
