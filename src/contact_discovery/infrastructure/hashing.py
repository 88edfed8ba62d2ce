"""
Deterministic SHA-256 hashing of phone numbers and emails.

No salt: two users' clients must produce the same digest for the same real
identifier, otherwise the server could never match them.
"""

import hashlib
import re
from collections.abc import Callable
from typing import Any

from contact_discovery.domain import HashingFailedError, InvalidInputError

_NON_DIGITS = re.compile(r"\D", re.ASCII)
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_phone_digits(raw: str) -> str:
    """Strip everything that is not a digit, including a leading +."""
    digits = _NON_DIGITS.sub("", raw or "")
    if not digits:
        raise InvalidInputError("Invalid phone number: no digits found")
    return digits


def normalize_email(raw: str) -> str:
    """Trim and lowercase; reject anything that is not local@domain.tld."""
    normalized = (raw or "").strip().lower()
    if not _EMAIL.match(normalized):
        raise InvalidInputError("Invalid email format")
    return normalized


class HashingService:
    """Normalizes identifiers and returns 64-character hex SHA-256 digests."""

    def __init__(self, digest_factory: Callable[[bytes], Any] = hashlib.sha256) -> None:
        self._digest_factory = digest_factory

    def hash_phone_number(self, raw: str) -> str:
        return self._hash_string(normalize_phone_digits(raw))

    def hash_email(self, raw: str) -> str:
        return self._hash_string(normalize_email(raw))

    def hash_contact(self, identifier: str) -> str:
        """Hash as an email when it contains @, otherwise as a phone number."""
        trimmed = (identifier or "").strip()
        if "@" in trimmed:
            return self.hash_email(trimmed)
        return self.hash_phone_number(trimmed)

    def _hash_string(self, value: str) -> str:
        try:
            digest = self._digest_factory(value.encode("utf-8"))
            return digest.hexdigest()
        except Exception as exc:
            raise HashingFailedError(f"Hashing failed: {exc}") from exc
