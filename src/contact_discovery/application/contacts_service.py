"""Contact discovery: permission check -> fetch -> hash -> partition. Matching and invites on request."""

import logging
from collections.abc import Callable
from dataclasses import replace
from enum import Enum

from contact_discovery.application.dto import GroupInvite, InviteOutcome, MatchedContactResult
from contact_discovery.application.ports import (
    ContactDiscoveryGateway,
    ContactHasher,
    ContactsPlatformProvider,
)
from contact_discovery.domain import (
    ContactPermissionError,
    ContactPermissionStatus,
    ContactSyncFailedError,
    ContactSyncResult,
    HashedContact,
    IdentifierType,
    InviteMethod,
    MatchedContact,
    RawContact,
    UnmatchedContact,
    is_sha256_hex,
)

logger = logging.getLogger(__name__)

# Server rejects match requests above this size.
MATCH_BATCH_SIZE = 1000


class SyncState(str, Enum):
    IDLE = "idle"
    CHECKING_PERMISSION = "checking_permission"
    DENIED = "denied"
    FETCHING = "fetching"
    HASHING = "hashing"
    PARTITIONING_RESULTS = "partitioning_results"
    COMPLETE = "complete"


_TRANSITIONS: dict[SyncState, frozenset[SyncState]] = {
    SyncState.IDLE: frozenset({SyncState.CHECKING_PERMISSION}),
    SyncState.CHECKING_PERMISSION: frozenset({SyncState.DENIED, SyncState.FETCHING}),
    # An empty address book completes straight from fetching.
    SyncState.FETCHING: frozenset({SyncState.HASHING, SyncState.COMPLETE}),
    SyncState.HASHING: frozenset({SyncState.PARTITIONING_RESULTS}),
    SyncState.PARTITIONING_RESULTS: frozenset({SyncState.COMPLETE}),
    SyncState.DENIED: frozenset(),
    SyncState.COMPLETE: frozenset(),
}


class _SyncRun:
    """State and non-fatal errors of a single sync_contacts call."""

    def __init__(self, on_state_change: Callable[[SyncState], None] | None) -> None:
        self.state = SyncState.IDLE
        self.errors: list[str] = []
        self._on_state_change = on_state_change

    def advance(self, state: SyncState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal sync transition: {self.state.value} -> {state.value}"
            )
        logger.debug("Sync state %s -> %s", self.state.value, state.value)
        self.state = state
        if self._on_state_change is not None:
            self._on_state_change(state)


def _invite_candidate(contact: RawContact) -> UnmatchedContact | None:
    """First phone number wins; email only when the contact has no phone."""
    phones = contact.usable_phone_numbers
    if phones:
        return UnmatchedContact(
            contact_id=contact.id,
            name=contact.name,
            identifier=phones[0],
            identifier_type=IdentifierType.PHONE,
        )
    emails = contact.usable_emails
    if emails:
        return UnmatchedContact(
            contact_id=contact.id,
            name=contact.name,
            identifier=emails[0],
            identifier_type=IdentifierType.EMAIL,
        )
    return None


def _to_matched(result: MatchedContactResult) -> MatchedContact:
    return MatchedContact(
        user_id=result.user_id,
        display_name=result.display_name,
        username=result.username,
        profile_photo_url=result.profile_photo_url,
        mutual_friends=result.mutual_friends,
    )


class ContactsService:
    """
    Orchestrates contact discovery on top of a platform provider, a hasher and
    the remote discovery gateway. Each call is independent; nothing is cached.
    """

    def __init__(
        self,
        provider: ContactsPlatformProvider,
        hasher: ContactHasher,
        gateway: ContactDiscoveryGateway | None = None,
        *,
        on_state_change: Callable[[SyncState], None] | None = None,
    ) -> None:
        self._provider = provider
        self._hasher = hasher
        self._gateway = gateway
        self._on_state_change = on_state_change

    async def request_permission(self) -> ContactPermissionStatus:
        return await self._provider.request_permission()

    async def get_permission_status(self) -> ContactPermissionStatus:
        return await self._provider.get_permission_status()

    def is_supported(self) -> bool:
        return self._provider.is_supported()

    async def sync_contacts(self, force_refresh: bool = False) -> ContactSyncResult:
        """
        Read the address book, hash every phone number and email, and split
        contacts into invite candidates. matched is always empty here; call
        match_contacts with the result to query the server.

        force_refresh is kept for callers that pass it; there is no cache.
        Raises ContactPermissionError without access and ContactSyncFailedError
        when reading contacts fails. Per-identifier hashing failures end up in
        result.errors instead.
        """
        run = _SyncRun(self._on_state_change)
        run.advance(SyncState.CHECKING_PERMISSION)
        try:
            status = await self._provider.get_permission_status()
            if status != ContactPermissionStatus.GRANTED:
                run.advance(SyncState.DENIED)
                raise ContactPermissionError()
            run.advance(SyncState.FETCHING)
            raw_contacts = list(await self._provider.get_all_contacts())
        except ContactPermissionError:
            logger.info("Contact sync stopped: permission not granted")
            raise
        except Exception as exc:
            logger.error("Contact sync failed while fetching: %s", type(exc).__name__)
            raise ContactSyncFailedError(f"Contact sync failed: {exc}") from exc

        if not raw_contacts:
            run.advance(SyncState.COMPLETE)
            logger.info("Contact sync found no contacts")
            return ContactSyncResult(total_contacts_scanned=0, total_hashes_generated=0)

        run.advance(SyncState.HASHING)
        hashed = self._hash_contacts(raw_contacts, run.errors)

        run.advance(SyncState.PARTITIONING_RESULTS)
        unmatched = tuple(
            candidate
            for candidate in (_invite_candidate(c) for c in raw_contacts)
            if candidate is not None
        )

        run.advance(SyncState.COMPLETE)
        logger.info(
            "Contact sync complete: scanned=%d hashed=%d unmatched=%d errors=%d",
            len(raw_contacts),
            len(hashed),
            len(unmatched),
            len(run.errors),
        )
        return ContactSyncResult(
            total_contacts_scanned=len(raw_contacts),
            total_hashes_generated=len(hashed),
            matched=(),
            unmatched=unmatched,
            errors=tuple(run.errors) if run.errors else None,
            hashed_contacts=tuple(hashed),
        )

    def _hash_contacts(self, contacts: list[RawContact], errors: list[str]) -> list[HashedContact]:
        hashed: list[HashedContact] = []
        filtered = 0
        for contact in contacts:
            digests: list[str] = []
            for phone in contact.usable_phone_numbers:
                digest = self._hash_one(self._hasher.hash_phone_number, phone, "phone", contact, errors)
                if digest is not None:
                    digests.append(digest)
            for email in contact.usable_emails:
                digest = self._hash_one(self._hasher.hash_email, email, "email", contact, errors)
                if digest is not None:
                    digests.append(digest)

            valid = [d for d in digests if is_sha256_hex(d)]
            filtered += len(digests) - len(valid)
            if valid:
                hashed.append(
                    HashedContact(
                        original_id=contact.id,
                        name=contact.name,
                        hashed_identifiers=tuple(valid),
                    )
                )
        if filtered:
            logger.warning("Filtered %d hashes with an invalid format", filtered)
            errors.append(f"Filtered {filtered} invalid hashes")
        return hashed

    @staticmethod
    def _hash_one(
        hash_fn: Callable[[str], str],
        value: str,
        kind: str,
        contact: RawContact,
        errors: list[str],
    ) -> str | None:
        try:
            return hash_fn(value)
        except Exception as exc:
            logger.warning("Failed to hash %s for contact %s: %s", kind, contact.id, type(exc).__name__)
            errors.append(f"Failed to hash {kind} for {contact.label}: {exc}")
            return None

    async def clear_cache(self) -> None:
        """Reserved; there is no cache yet. Safe to call any number of times."""
        logger.debug("clear_cache called; nothing cached")

    def _require_gateway(self) -> ContactDiscoveryGateway:
        if self._gateway is None:
            raise RuntimeError("ContactsService was built without a discovery gateway")
        return self._gateway

    async def match_contacts(self, result: ContactSyncResult) -> ContactSyncResult:
        """
        Submit the hashes of a sync result to the server and return a copy with
        matched filled in and matched contacts removed from unmatched.

        Hashes go out in batches of MATCH_BATCH_SIZE. With a single batch its
        error propagates; with several, a failed batch is recorded in errors.
        """
        gateway = self._require_gateway()
        hashes = result.all_hashes
        if not hashes:
            return result

        errors = list(result.errors or ())
        matches: list[MatchedContactResult] = []
        batches = [hashes[i : i + MATCH_BATCH_SIZE] for i in range(0, len(hashes), MATCH_BATCH_SIZE)]
        if len(batches) == 1:
            matches.extend(await gateway.match_contacts(batches[0]))
        else:
            logger.info("Matching %d hashes in %d batches", len(hashes), len(batches))
            for number, batch in enumerate(batches, start=1):
                try:
                    matches.extend(await gateway.match_contacts(batch))
                except Exception as exc:
                    logger.warning("Match batch %d/%d failed", number, len(batches))
                    errors.append(f"Batch {number} failed: {exc}")

        matched_hashes = {m.hash for m in matches}
        matched_contact_ids = {
            hc.original_id
            for hc in result.hashed_contacts
            if any(h in matched_hashes for h in hc.hashed_identifiers)
        }

        matched: list[MatchedContact] = list(result.matched)
        seen_users = {m.user_id for m in matched}
        for match in matches:
            if match.user_id in seen_users:
                continue
            seen_users.add(match.user_id)
            matched.append(_to_matched(match))

        unmatched = tuple(u for u in result.unmatched if u.contact_id not in matched_contact_ids)
        logger.info("Matched %d users from %d hashes", len(matched), len(hashes))
        return replace(
            result,
            matched=tuple(matched),
            unmatched=unmatched,
            errors=tuple(errors) if errors else None,
        )

    def _hash_identifier(self, contact: UnmatchedContact) -> str:
        if contact.identifier_type == IdentifierType.PHONE:
            return self._hasher.hash_phone_number(contact.identifier)
        return self._hasher.hash_email(contact.identifier)

    async def invite_contact(
        self,
        contact: UnmatchedContact,
        method: InviteMethod | str = InviteMethod.SMS,
    ) -> InviteOutcome:
        """Create an invite for one contact. Only the identifier's hash is sent."""
        gateway = self._require_gateway()
        digest = self._hash_identifier(contact)
        invite = await gateway.send_invite(digest, method, contact.name)
        return InviteOutcome(
            contact=contact,
            method=method,
            referral_code=invite.referral_code,
            invite_link=invite.invite_link,
        )

    async def invite_all(
        self,
        contacts: list[UnmatchedContact],
        method: InviteMethod | str = InviteMethod.SMS,
    ) -> GroupInvite | None:
        """
        One invite record for a group SMS to every phone contact. Emails are
        skipped since they cannot share one message. None when no phone contact.
        """
        gateway = self._require_gateway()
        phone_contacts = tuple(c for c in contacts if c.identifier_type == IdentifierType.PHONE)
        if not phone_contacts:
            return None
        digest = self._hash_identifier(phone_contacts[0])
        invite = await gateway.send_invite(digest, method, "multiple contacts")
        return GroupInvite(
            recipients=phone_contacts,
            referral_code=invite.referral_code,
            invite_link=invite.invite_link,
        )
