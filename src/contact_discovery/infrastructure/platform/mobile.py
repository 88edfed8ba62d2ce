"""iOS/Android contact access through the OS contact store."""

import logging
from typing import Any, Protocol

from contact_discovery.domain import ContactPermissionError, ContactPermissionStatus, RawContact

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    "granted": ContactPermissionStatus.GRANTED,
    "denied": ContactPermissionStatus.DENIED,
}


class NativeContactStore(Protocol):
    """
    The OS address book. Statuses are the store's own strings ("granted",
    "denied", "undetermined", "limited", ...). Contacts are records shaped like
    {"id", "name", "phoneNumbers": [{"number"}], "emails": [{"email"}]}.
    """

    async def request_permissions(self) -> str: ...

    async def get_permissions(self) -> str: ...

    async def get_contacts(self) -> list[dict[str, Any]]: ...


def map_permission_status(native_status: str | None) -> ContactPermissionStatus:
    """Anything the store reports besides granted/denied counts as undetermined."""
    return _STATUS_MAP.get((native_status or "").strip().lower(), ContactPermissionStatus.UNDETERMINED)


def _values(entries: Any, key: str) -> tuple[str, ...]:
    out = []
    for entry in entries or ():
        value = entry.get(key) if isinstance(entry, dict) else entry
        if isinstance(value, str) and value:
            out.append(value)
    return tuple(out)


def _to_raw_contact(record: dict[str, Any]) -> RawContact:
    return RawContact(
        id=str(record["id"]),
        name=record.get("name") or None,
        phone_numbers=_values(record.get("phoneNumbers"), "number"),
        emails=_values(record.get("emails"), "email"),
    )


class MobileContactsProvider:
    """Reads the device address book. Returns every contact, with or without identifiers."""

    def __init__(self, store: NativeContactStore) -> None:
        self._store = store

    async def request_permission(self) -> ContactPermissionStatus:
        return map_permission_status(await self._store.request_permissions())

    async def get_permission_status(self) -> ContactPermissionStatus:
        return map_permission_status(await self._store.get_permissions())

    async def get_all_contacts(self) -> list[RawContact]:
        if await self.get_permission_status() != ContactPermissionStatus.GRANTED:
            raise ContactPermissionError()
        records = await self._store.get_contacts()
        contacts = [_to_raw_contact(r) for r in records]
        logger.debug("Read %d contacts from the native store", len(contacts))
        return contacts

    def is_supported(self) -> bool:
        return True
