"""Domain entities: raw and hashed contacts, discovery results, and their enums."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

_SHA256_HEX = re.compile(r"[0-9a-f]{64}")


def is_sha256_hex(value: str) -> bool:
    """True when value is a 64-character lowercase hex digest."""
    return isinstance(value, str) and _SHA256_HEX.fullmatch(value) is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContactPermissionStatus(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class IdentifierType(str, Enum):
    PHONE = "phone"
    EMAIL = "email"


class InviteMethod(str, Enum):
    SMS = "sms"
    EMAIL = "email"
    LINK = "link"
    SHARE = "share"


@dataclass(frozen=True)
class RawContact:
    """
    A contact as read from the device address book.
    Lives only for the duration of one sync run; never persisted.
    """

    id: str
    name: str | None = None
    phone_numbers: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()

    def __post_init__(self):
        if not self.id or not str(self.id).strip():
            raise ValueError("RawContact id must be non-empty.")
        object.__setattr__(self, "phone_numbers", tuple(self.phone_numbers or ()))
        object.__setattr__(self, "emails", tuple(self.emails or ()))

    @property
    def usable_phone_numbers(self) -> tuple[str, ...]:
        return tuple(p for p in self.phone_numbers if isinstance(p, str) and p.strip())

    @property
    def usable_emails(self) -> tuple[str, ...]:
        return tuple(e for e in self.emails if isinstance(e, str) and e.strip())

    @property
    def has_identifier(self) -> bool:
        return bool(self.usable_phone_numbers or self.usable_emails)

    @property
    def label(self) -> str:
        """Name for messages; falls back to the device id."""
        return (self.name or "").strip() or self.id


@dataclass(frozen=True)
class HashedContact:
    """
    One entry per device contact with at least one hashed identifier.
    original_id refers back to the RawContact; name never leaves the client.
    """

    original_id: str
    hashed_identifiers: tuple[str, ...]
    name: str | None = None
    hashed_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        hashes = tuple(self.hashed_identifiers or ())
        if not hashes:
            raise ValueError("HashedContact needs at least one hashed identifier.")
        if not all(is_sha256_hex(h) for h in hashes):
            raise ValueError("HashedContact identifiers must be SHA-256 hex digests.")
        object.__setattr__(self, "hashed_identifiers", hashes)


@dataclass(frozen=True)
class MatchedContact:
    """A device contact that is already a user of the platform."""

    user_id: str
    display_name: str
    username: str | None = None
    profile_photo_url: str | None = None
    mutual_friends: int | None = None


@dataclass(frozen=True)
class UnmatchedContact:
    """
    A device contact eligible for an invite.
    identifier is plaintext and is only used for the invite action itself.
    """

    contact_id: str
    identifier: str
    identifier_type: IdentifierType
    name: str | None = None


@dataclass(frozen=True)
class ContactSyncResult:
    """
    Outcome of one sync run. errors is None unless something non-fatal failed.
    hashed_contacts stays on the client and feeds the explicit matching step.
    """

    total_contacts_scanned: int
    total_hashes_generated: int
    matched: tuple[MatchedContact, ...] = ()
    unmatched: tuple[UnmatchedContact, ...] = ()
    synced_at: datetime = field(default_factory=_utcnow)
    errors: tuple[str, ...] | None = None
    hashed_contacts: tuple[HashedContact, ...] = field(default=(), repr=False)

    @property
    def all_hashes(self) -> list[str]:
        return [h for hc in self.hashed_contacts for h in hc.hashed_identifiers]
