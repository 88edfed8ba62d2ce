"""Infrastructure layer: concrete implementations of application ports."""

from contact_discovery.infrastructure.discovery_repository import ContactDiscoveryRepository
from contact_discovery.infrastructure.functions_client import FunctionsClient, FunctionsError
from contact_discovery.infrastructure.hashing import HashingService
from contact_discovery.infrastructure.invite_links import (
    compose_group_sms_uri,
    compose_invite_uri,
    invite_message,
)
from contact_discovery.infrastructure.json_store import JsonContactStore
from contact_discovery.infrastructure.platform import (
    MobileContactsProvider,
    NativeContactStore,
    WebContactsProvider,
    select_provider,
)

__all__ = [
    "ContactDiscoveryRepository",
    "FunctionsClient",
    "FunctionsError",
    "HashingService",
    "JsonContactStore",
    "MobileContactsProvider",
    "NativeContactStore",
    "WebContactsProvider",
    "compose_group_sms_uri",
    "compose_invite_uri",
    "invite_message",
    "select_provider",
]
