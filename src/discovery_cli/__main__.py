"""
Command line: sync an exported address book and create invites.
Run: python -m discovery_cli sync contacts.json [--match]
     python -m discovery_cli invite contacts.json CONTACT_ID [--method sms]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from contact_discovery.config import Settings, load_env_file

load_env_file()

from contact_discovery.application import ContactsService
from contact_discovery.domain import ContactDiscoveryError, ContactSyncResult, InviteMethod
from contact_discovery.factory import build_contacts_service
from contact_discovery.infrastructure import JsonContactStore, compose_invite_uri

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, level, logging.INFO),
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _service(settings: Settings, contacts_file: Path, with_gateway: bool) -> ContactsService:
    # A file export stands in for the device address book; platform "web" ignores it.
    return build_contacts_service(settings, store=JsonContactStore(contacts_file), with_gateway=with_gateway)


def _format_summary(result: ContactSyncResult) -> str:
    lines = [
        f"Scanned: {result.total_contacts_scanned}",
        f"Hashed contacts: {result.total_hashes_generated}",
        f"Matched: {len(result.matched)}",
        f"To invite: {len(result.unmatched)}",
    ]
    for match in result.matched:
        handle = f" (@{match.username})" if match.username else ""
        lines.append(f"  + {match.display_name}{handle}")
    for contact in result.unmatched:
        lines.append(f"  - {contact.name or contact.contact_id} [{contact.identifier_type.value}]")
    for error in result.errors or ():
        lines.append(f"  ! {error}")
    return "\n".join(lines)


async def _run_sync(settings: Settings, args: argparse.Namespace) -> int:
    service = _service(settings, args.contacts_file, with_gateway=args.match)
    result = await service.sync_contacts()
    if args.match:
        result = await service.match_contacts(result)
    print(_format_summary(result))
    return 0


async def _run_invite(settings: Settings, args: argparse.Namespace) -> int:
    service = _service(settings, args.contacts_file, with_gateway=True)
    result = await service.sync_contacts()
    contact = next((c for c in result.unmatched if c.contact_id == args.contact_id), None)
    if contact is None:
        print(f"No invitable contact with id {args.contact_id!r}", file=sys.stderr)
        return 1
    outcome = await service.invite_contact(contact, InviteMethod(args.method))
    print(f"Referral code: {outcome.referral_code}")
    print(f"Invite link: {outcome.invite_link}")
    print(compose_invite_uri(contact, outcome.invite_link, default_region=settings.phone_region))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="discovery_cli", description=__doc__.splitlines()[1])
    sub = parser.add_subparsers(dest="command", required=True)

    sync = sub.add_parser("sync", help="hash contacts and list invite candidates")
    sync.add_argument("contacts_file", type=Path)
    sync.add_argument("--match", action="store_true", help="also match hashes on the server")

    invite = sub.add_parser("invite", help="create an invite for one contact")
    invite.add_argument("contacts_file", type=Path)
    invite.add_argument("contact_id")
    invite.add_argument("--method", choices=[m.value for m in InviteMethod], default=InviteMethod.SMS.value)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    _setup_logging(settings.log_level)

    runner = _run_sync if args.command == "sync" else _run_invite
    try:
        return asyncio.run(runner(settings, args))
    except ContactDiscoveryError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except ValueError as exc:
        # Missing functions URL or an unknown platform. Contacts file errors surface as sync failures.
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
