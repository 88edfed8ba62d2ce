"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from contact_discovery.application.dto import InviteResult, MatchedContactResult
from contact_discovery.domain import ContactPermissionStatus, InviteMethod, RawContact


class ContactsPlatformProvider(Protocol):
    """Reads contacts and permission state from the host platform."""

    async def request_permission(self) -> ContactPermissionStatus:
        """Ask the user for contact access and return the resulting status."""
        ...

    async def get_permission_status(self) -> ContactPermissionStatus:
        """Return the current status without prompting."""
        ...

    async def get_all_contacts(self) -> list[RawContact]:
        """Return every contact, including ones with neither phone nor email."""
        ...

    def is_supported(self) -> bool:
        """Whether this platform can read contacts at all (runtime check)."""
        ...


class ContactHasher(Protocol):
    """Normalizes and one-way hashes contact identifiers."""

    def hash_phone_number(self, raw: str) -> str: ...

    def hash_email(self, raw: str) -> str: ...

    def hash_contact(self, identifier: str) -> str: ...


class ContactDiscoveryGateway(Protocol):
    """Remote matching and invite endpoints."""

    async def match_contacts(self, hashes: list[str]) -> list[MatchedContactResult]:
        """Return users whose hashed identifiers appear in hashes."""
        ...

    async def send_invite(
        self,
        contact_identifier: str,
        method: InviteMethod | str,
        contact_name: str | None = None,
    ) -> InviteResult:
        """Create (or reuse) a referral for the hashed contact identifier."""
        ...
