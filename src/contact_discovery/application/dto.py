"""Data transfer objects returned by the discovery gateway and the invite flow."""

from dataclasses import dataclass

from contact_discovery.domain import InviteMethod, UnmatchedContact


@dataclass(frozen=True)
class MatchedContactResult:
    """One server match. hash correlates the match with the submitted identifier."""

    hash: str
    user_id: str
    display_name: str
    username: str | None = None
    profile_photo_url: str | None = None
    mutual_friends: int | None = None


@dataclass(frozen=True)
class InviteResult:
    referral_code: str
    invite_link: str


@dataclass(frozen=True)
class InviteOutcome:
    """An invite created for one unmatched contact."""

    contact: UnmatchedContact
    method: InviteMethod | str
    referral_code: str
    invite_link: str


@dataclass(frozen=True)
class GroupInvite:
    """One invite link shared by every phone recipient of a group SMS."""

    recipients: tuple[UnmatchedContact, ...]
    referral_code: str
    invite_link: str
