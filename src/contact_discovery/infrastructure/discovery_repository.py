"""
Remote contact discovery: hash matching and invites through callable functions.

Server contract (enforced server side, not here):
- at most 1000 hashes per match request
- the caller's own account is never returned as a match
- 100 invites per user per day
- a repeat invite to the same contact within 7 days returns the same referral code
"""

import logging
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from contact_discovery.application.dto import InviteResult, MatchedContactResult
from contact_discovery.domain import (
    DiscoveryRequestError,
    InvalidInputError,
    InviteMethod,
    is_sha256_hex,
)
from contact_discovery.infrastructure.functions_client import FunctionsError

logger = logging.getLogger(__name__)

MATCH_FUNCTION = "matchContactsWithUsers"
INVITE_FUNCTION = "sendContactInvite"

MATCH_TIMEOUT = 30.0  # seconds
INVITE_TIMEOUT = 20.0  # seconds

REFERRAL_CODE_LENGTH = 8

NETWORK_ERROR_MESSAGE = "Network error. Please check your internet connection and try again."

# Same code, different wording per call site.
_MATCH_ERROR_MESSAGES = {
    "unauthenticated": "You must be signed in to match contacts",
    "resource-exhausted": "Rate limit exceeded. Please try again later.",
    "unavailable": NETWORK_ERROR_MESSAGE,
    "deadline-exceeded": NETWORK_ERROR_MESSAGE,
}
_MATCH_FALLBACK_MESSAGE = "Failed to match contacts"

_INVITE_ERROR_MESSAGES = {
    "unauthenticated": "You must be signed in to send invites",
    "resource-exhausted": "Daily invite limit reached (100/day). Try again tomorrow.",
    "unavailable": NETWORK_ERROR_MESSAGE,
    "deadline-exceeded": NETWORK_ERROR_MESSAGE,
}
_INVITE_FALLBACK_MESSAGE = "Failed to send invite"

_INVALID_ARGUMENT_FALLBACK = "Invalid contact data format"


class CallableFunctions(Protocol):
    async def call(self, name: str, payload: dict[str, Any], *, timeout: float | None = None) -> Any: ...


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MatchedContactPayload(_WireModel):
    hash: str
    user_id: str = Field(alias="userId")
    display_name: str = Field(alias="displayName")
    username: str | None = None
    profile_photo_url: str | None = Field(default=None, alias="profilePhotoUrl")
    mutual_friends: int | None = Field(default=None, alias="mutualFriends")


class MatchContactsResponse(_WireModel):
    success: bool
    matches: list[MatchedContactPayload] = Field(default_factory=list)
    total_hashes: int = Field(default=0, alias="totalHashes")
    total_matches: int = Field(default=0, alias="totalMatches")
    error: str | None = None


class SendInviteResponse(_WireModel):
    success: bool
    referral_code: str | None = Field(default=None, alias="referralCode")
    invite_link: str | None = Field(default=None, alias="inviteLink")
    error: str | None = None


def _translate(error: FunctionsError, table: dict[str, str], fallback: str) -> DiscoveryRequestError:
    if error.code in table:
        return DiscoveryRequestError(table[error.code], code=error.code)
    if error.code == "invalid-argument":
        return DiscoveryRequestError(error.message or _INVALID_ARGUMENT_FALLBACK, code=error.code)
    return DiscoveryRequestError(error.message or fallback, code=error.code)


class ContactDiscoveryRepository:
    """Implements the discovery gateway on top of a callable-functions transport."""

    def __init__(
        self,
        functions: CallableFunctions,
        *,
        match_timeout: float = MATCH_TIMEOUT,
        invite_timeout: float = INVITE_TIMEOUT,
    ) -> None:
        self._functions = functions
        self._match_timeout = match_timeout
        self._invite_timeout = invite_timeout

    async def match_contacts(self, hashes: list[str]) -> list[MatchedContactResult]:
        """
        Match hashed identifiers against existing users.

        Returns [] for an empty list without calling the server. Every entry
        must be a 64-character hex SHA-256 digest; raw identifiers are refused.
        """
        if not hashes:
            return []
        invalid = [h for h in hashes if not is_sha256_hex(h)]
        if invalid:
            raise InvalidInputError(f"Invalid hash format: Found {len(invalid)} invalid hashes")

        logger.info("Matching %d hashes", len(hashes))
        try:
            data = await self._functions.call(
                MATCH_FUNCTION,
                {"hashedIdentifiers": list(hashes)},
                timeout=self._match_timeout,
            )
        except FunctionsError as exc:
            logger.error("match_contacts failed: code=%s", exc.code)
            raise _translate(exc, _MATCH_ERROR_MESSAGES, _MATCH_FALLBACK_MESSAGE) from exc

        try:
            response = MatchContactsResponse.model_validate(data)
        except ValidationError as exc:
            raise DiscoveryRequestError(f"Malformed response from {MATCH_FUNCTION}") from exc

        if not response.success:
            logger.error("match_contacts rejected by server")
            raise DiscoveryRequestError(response.error or _MATCH_FALLBACK_MESSAGE)

        logger.info("Found %d matches", len(response.matches))
        return [
            MatchedContactResult(
                hash=m.hash,
                user_id=m.user_id,
                display_name=m.display_name,
                username=m.username,
                profile_photo_url=m.profile_photo_url,
                mutual_friends=m.mutual_friends,
            )
            for m in response.matches
        ]

    async def send_invite(
        self,
        contact_identifier: str,
        method: InviteMethod | str,
        contact_name: str | None = None,
    ) -> InviteResult:
        """
        Create an invite for a hashed contact identifier.

        A repeat invite within the server's dedup window returns the earlier
        referral code; that is a normal success. method is passed through
        unvalidated; the server rejects unknown methods.
        """
        if not contact_identifier:
            raise InvalidInputError("Contact identifier is required")

        payload: dict[str, Any] = {
            "contactIdentifier": contact_identifier,
            "inviteMethod": method.value if isinstance(method, InviteMethod) else method,
        }
        if contact_name:
            payload["contactName"] = contact_name

        try:
            data = await self._functions.call(INVITE_FUNCTION, payload, timeout=self._invite_timeout)
        except FunctionsError as exc:
            logger.error("send_invite failed: code=%s", exc.code)
            raise _translate(exc, _INVITE_ERROR_MESSAGES, _INVITE_FALLBACK_MESSAGE) from exc

        try:
            response = SendInviteResponse.model_validate(data)
        except ValidationError as exc:
            raise DiscoveryRequestError(f"Malformed response from {INVITE_FUNCTION}") from exc

        if not response.success:
            raise DiscoveryRequestError(response.error or _INVITE_FALLBACK_MESSAGE)
        if len(response.referral_code or "") != REFERRAL_CODE_LENGTH or not response.invite_link:
            raise DiscoveryRequestError(f"Malformed response from {INVITE_FUNCTION}")

        return InviteResult(referral_code=response.referral_code, invite_link=response.invite_link)
