"""
Contact discovery core: clean-architecture layout.

- domain: contacts, sync results, errors. No outer dependencies.
- application: use cases (ContactsService), ports, DTOs.
- infrastructure: adapters (HashingService, platform providers, ContactDiscoveryRepository).
"""

from contact_discovery.application import (
    ContactDiscoveryGateway,
    ContactHasher,
    ContactsPlatformProvider,
    ContactsService,
    GroupInvite,
    InviteOutcome,
    InviteResult,
    MatchedContactResult,
    SyncState,
)
from contact_discovery.domain import (
    ContactDiscoveryError,
    ContactPermissionError,
    ContactPermissionStatus,
    ContactSyncFailedError,
    ContactSyncResult,
    DiscoveryRequestError,
    HashedContact,
    HashingFailedError,
    IdentifierType,
    InvalidInputError,
    InviteMethod,
    MatchedContact,
    NotSupportedError,
    RawContact,
    UnmatchedContact,
)
from contact_discovery.infrastructure import (
    ContactDiscoveryRepository,
    HashingService,
    MobileContactsProvider,
    WebContactsProvider,
)

__all__ = [
    "ContactDiscoveryError",
    "ContactDiscoveryGateway",
    "ContactDiscoveryRepository",
    "ContactHasher",
    "ContactPermissionError",
    "ContactPermissionStatus",
    "ContactSyncFailedError",
    "ContactSyncResult",
    "ContactsPlatformProvider",
    "ContactsService",
    "DiscoveryRequestError",
    "GroupInvite",
    "HashedContact",
    "HashingFailedError",
    "HashingService",
    "IdentifierType",
    "InvalidInputError",
    "InviteMethod",
    "InviteOutcome",
    "InviteResult",
    "MatchedContact",
    "MatchedContactResult",
    "MobileContactsProvider",
    "NotSupportedError",
    "RawContact",
    "SyncState",
    "UnmatchedContact",
    "WebContactsProvider",
]
