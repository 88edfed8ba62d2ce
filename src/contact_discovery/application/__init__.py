"""Application layer: the discovery use cases, ports, and DTOs. Depends only on domain."""

from contact_discovery.application.contacts_service import (
    MATCH_BATCH_SIZE,
    ContactsService,
    SyncState,
)
from contact_discovery.application.dto import (
    GroupInvite,
    InviteOutcome,
    InviteResult,
    MatchedContactResult,
)
from contact_discovery.application.ports import (
    ContactDiscoveryGateway,
    ContactHasher,
    ContactsPlatformProvider,
)

__all__ = [
    "MATCH_BATCH_SIZE",
    "ContactDiscoveryGateway",
    "ContactHasher",
    "ContactsPlatformProvider",
    "ContactsService",
    "GroupInvite",
    "InviteOutcome",
    "InviteResult",
    "MatchedContactResult",
    "SyncState",
]
