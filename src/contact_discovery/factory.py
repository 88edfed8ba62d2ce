"""Wire a ContactsService from settings."""

from typing import Any

from contact_discovery.application import ContactsService
from contact_discovery.config import Settings
from contact_discovery.infrastructure import (
    ContactDiscoveryRepository,
    FunctionsClient,
    HashingService,
    NativeContactStore,
    select_provider,
)


def build_repository(settings: Settings, **client_kwargs: Any) -> ContactDiscoveryRepository:
    functions = FunctionsClient(
        settings.functions_base_url(),
        id_token=settings.id_token,
        default_timeout=settings.match_timeout,
        **client_kwargs,
    )
    return ContactDiscoveryRepository(
        functions,
        match_timeout=settings.match_timeout,
        invite_timeout=settings.invite_timeout,
    )


def build_contacts_service(
    settings: Settings,
    *,
    store: NativeContactStore | None = None,
    navigator: Any = None,
    with_gateway: bool = True,
    **client_kwargs: Any,
) -> ContactsService:
    """Pick the platform provider once and attach hashing and the remote gateway."""
    provider = select_provider(settings.platform, store=store, navigator=navigator)
    gateway = build_repository(settings, **client_kwargs) if with_gateway else None
    return ContactsService(provider, HashingService(), gateway)
