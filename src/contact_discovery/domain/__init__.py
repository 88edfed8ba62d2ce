"""Domain layer: contact entities, enums and errors. No dependencies on outer layers."""

from contact_discovery.domain.entities import (
    ContactPermissionStatus,
    ContactSyncResult,
    HashedContact,
    IdentifierType,
    InviteMethod,
    MatchedContact,
    RawContact,
    UnmatchedContact,
    is_sha256_hex,
)
from contact_discovery.domain.errors import (
    ContactDiscoveryError,
    ContactPermissionError,
    ContactSyncFailedError,
    DiscoveryRequestError,
    HashingFailedError,
    InvalidInputError,
    NotSupportedError,
)

__all__ = [
    "ContactDiscoveryError",
    "ContactPermissionError",
    "ContactPermissionStatus",
    "ContactSyncFailedError",
    "ContactSyncResult",
    "DiscoveryRequestError",
    "HashedContact",
    "HashingFailedError",
    "IdentifierType",
    "InvalidInputError",
    "InviteMethod",
    "MatchedContact",
    "NotSupportedError",
    "RawContact",
    "UnmatchedContact",
    "is_sha256_hex",
]
