"""Build sms: and mailto: URIs that carry an invite link."""

from urllib.parse import quote

from contact_discovery.domain import IdentifierType, UnmatchedContact
from contact_discovery.infrastructure.phone import sms_recipient

INVITE_SUBJECT = "Join me on TravalPass!"


def invite_message(invite_link: str, name: str | None = None) -> str:
    greeting = f"Hey {name.strip()}!" if name and name.strip() else "Hey!"
    return f"{greeting} Join me on TravalPass to find travel buddies: {invite_link}"


def compose_invite_uri(
    contact: UnmatchedContact,
    invite_link: str,
    *,
    default_region: str | None = None,
) -> str:
    """sms: for phone contacts, mailto: for email contacts."""
    body = quote(invite_message(invite_link, contact.name), safe="")
    if contact.identifier_type == IdentifierType.PHONE:
        return f"sms:{sms_recipient(contact.identifier, default_region)}?body={body}"
    subject = quote(INVITE_SUBJECT, safe="")
    return f"mailto:{contact.identifier.strip()}?subject={subject}&body={body}"


def compose_group_sms_uri(
    contacts: list[UnmatchedContact] | tuple[UnmatchedContact, ...],
    invite_link: str,
    *,
    default_region: str | None = None,
) -> str | None:
    """One sms: URI addressed to every phone contact, or None if there are none."""
    recipients = [
        sms_recipient(c.identifier, default_region)
        for c in contacts
        if c.identifier_type == IdentifierType.PHONE
    ]
    if not recipients:
        return None
    body = quote(invite_message(invite_link), safe="")
    return f"sms:{','.join(recipients)}?body={body}"
