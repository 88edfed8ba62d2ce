import hashlib

import pytest

from contact_discovery.domain import ContactPermissionStatus, RawContact
from contact_discovery.infrastructure import HashingService
from contact_discovery.infrastructure.functions_client import FunctionsError


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


class FakeProvider:
    """In-memory platform provider."""

    def __init__(self, contacts=None, status=ContactPermissionStatus.GRANTED, fetch_error=None):
        self.contacts = list(contacts or [])
        self.status = status
        self.fetch_error = fetch_error
        self.fetch_calls = 0

    async def request_permission(self):
        return self.status

    async def get_permission_status(self):
        return self.status

    async def get_all_contacts(self):
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.contacts)

    def is_supported(self):
        return True


class FakeFunctions:
    """
    Stands in for the callable-functions backend. Records calls; invites are
    deduplicated per identifier like the real server.
    """

    def __init__(self, match_response=None, error=None):
        self.calls = []
        self.match_response = match_response or {
            "success": True,
            "matches": [],
            "totalHashes": 0,
            "totalMatches": 0,
        }
        self.error = error
        self._codes: dict[str, str] = {}

    async def call(self, name, payload, *, timeout=None):
        self.calls.append((name, payload, timeout))
        if self.error is not None:
            raise self.error
        if name == "matchContactsWithUsers":
            return self.match_response
        code = self._codes.setdefault(
            payload["contactIdentifier"], f"REF{len(self._codes):05d}"
        )
        return {
            "success": True,
            "referralCode": code,
            "inviteLink": f"https://travalpass.com/invite?ref={code}",
        }


@pytest.fixture
def hasher():
    return HashingService()


@pytest.fixture
def four_contacts():
    return [
        RawContact(id="c1", name="Ann", phone_numbers=("(123) 456-7890", "555-0101"), emails=("ann@example.com",)),
        RawContact(id="c2", name="Ben", emails=("Ben@Example.com",)),
        RawContact(id="c3", name="Cat", phone_numbers=("+44 20 7946 0958",)),
        RawContact(id="c4", name="Dan"),
    ]


@pytest.fixture
def functions_error():
    def _make(code, message=""):
        return FunctionsError(code, message)

    return _make
