"""Browser contact access through the Contact Picker API."""

import logging
from typing import Any

from contact_discovery.domain import ContactPermissionStatus, NotSupportedError, RawContact

logger = logging.getLogger(__name__)

PICKER_PROPERTIES = ["name", "email", "tel"]


def _first(values: Any) -> str | None:
    if isinstance(values, (list, tuple)) and values:
        return values[0] or None
    return None


class WebContactsProvider:
    """
    Wraps a navigator-like object whose contacts.select(properties, multiple=True)
    coroutine returns entries like {"name": [...], "email": [...], "tel": [...]}.
    Support is detected at call time from the navigator, not from the platform name.
    The picker asks the user on every selection, so there is no upfront prompt.
    """

    def __init__(self, navigator: Any = None) -> None:
        self._navigator = navigator

    def _picker(self) -> Any:
        contacts = getattr(self._navigator, "contacts", None)
        if contacts is None or not callable(getattr(contacts, "select", None)):
            return None
        return contacts

    def is_supported(self) -> bool:
        return self._picker() is not None

    async def request_permission(self) -> ContactPermissionStatus:
        return await self.get_permission_status()

    async def get_permission_status(self) -> ContactPermissionStatus:
        if self.is_supported():
            return ContactPermissionStatus.GRANTED
        return ContactPermissionStatus.DENIED

    async def get_all_contacts(self) -> list[RawContact]:
        picker = self._picker()
        if picker is None:
            raise NotSupportedError("Contact Picker API not supported on this browser")
        selected = await picker.select(PICKER_PROPERTIES, multiple=True)
        contacts = [
            RawContact(
                id=f"web-contact-{index}",
                name=_first(entry.get("name")),
                phone_numbers=tuple(entry.get("tel") or ()),
                emails=tuple(entry.get("email") or ()),
            )
            for index, entry in enumerate(selected or ())
        ]
        logger.debug("Picker returned %d contacts", len(contacts))
        return contacts
