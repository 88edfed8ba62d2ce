"""Platform providers. Exactly one is chosen when the service is built."""

from typing import Any

from contact_discovery.infrastructure.platform.mobile import (
    MobileContactsProvider,
    NativeContactStore,
    map_permission_status,
)
from contact_discovery.infrastructure.platform.web import WebContactsProvider

MOBILE_PLATFORMS = frozenset({"ios", "android"})
WEB_PLATFORM = "web"


def select_provider(
    platform: str,
    *,
    store: NativeContactStore | None = None,
    navigator: Any = None,
) -> MobileContactsProvider | WebContactsProvider:
    """Return the provider for platform ("ios", "android" or "web")."""
    name = (platform or "").strip().lower()
    if name == WEB_PLATFORM:
        return WebContactsProvider(navigator)
    if name in MOBILE_PLATFORMS:
        if store is None:
            raise ValueError(f"A native contact store is required on {name}")
        return MobileContactsProvider(store)
    raise ValueError(f"Unknown platform: {platform!r}")


__all__ = [
    "MOBILE_PLATFORMS",
    "WEB_PLATFORM",
    "MobileContactsProvider",
    "NativeContactStore",
    "WebContactsProvider",
    "map_permission_status",
    "select_provider",
]
