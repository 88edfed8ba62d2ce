"""Unit tests for ContactsService. Fake provider and fake functions backend, real hashing."""

import pytest

from conftest import FakeFunctions, FakeProvider, sha256_hex
from contact_discovery.application import ContactsService, SyncState
from contact_discovery.domain import (
    ContactPermissionError,
    ContactPermissionStatus,
    ContactSyncFailedError,
    DiscoveryRequestError,
    IdentifierType,
    RawContact,
    UnmatchedContact,
)
from contact_discovery.infrastructure import ContactDiscoveryRepository, HashingService
from contact_discovery.infrastructure.functions_client import FunctionsError


class FlakyHasher(HashingService):
    """Fails on one specific phone number."""

    def __init__(self, bad_phone):
        super().__init__()
        self.bad_phone = bad_phone

    def hash_phone_number(self, raw):
        if raw == self.bad_phone:
            raise RuntimeError("crypto unavailable")
        return super().hash_phone_number(raw)


def _service(provider, hasher=None, functions=None, **kwargs) -> ContactsService:
    gateway = ContactDiscoveryRepository(functions) if functions is not None else None
    return ContactsService(provider, hasher or HashingService(), gateway, **kwargs)


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [ContactPermissionStatus.DENIED, ContactPermissionStatus.UNDETERMINED])
async def test_sync_without_permission_raises(status):
    provider = FakeProvider([RawContact(id="c1", phone_numbers=("123",))], status=status)
    with pytest.raises(ContactPermissionError, match="Contact permission not granted"):
        await _service(provider).sync_contacts()
    assert provider.fetch_calls == 0


@pytest.mark.asyncio
async def test_empty_address_book_returns_zeroed_result():
    result = await _service(FakeProvider([])).sync_contacts()
    assert result.total_contacts_scanned == 0
    assert result.total_hashes_generated == 0
    assert result.matched == ()
    assert result.unmatched == ()
    assert result.errors is None
    assert result.synced_at is not None


@pytest.mark.asyncio
async def test_four_contact_scenario(four_contacts):
    result = await _service(FakeProvider(four_contacts)).sync_contacts()

    assert result.total_contacts_scanned == 4
    assert result.total_hashes_generated == 3
    assert result.matched == ()
    by_id = {u.contact_id: u for u in result.unmatched}
    assert set(by_id) == {"c1", "c2", "c3"}
    assert by_id["c1"].identifier == "(123) 456-7890"
    assert by_id["c1"].identifier_type == IdentifierType.PHONE
    assert by_id["c2"].identifier_type == IdentifierType.EMAIL
    assert by_id["c3"].identifier_type == IdentifierType.PHONE
    assert result.errors is None


@pytest.mark.asyncio
async def test_every_identifier_hashed_into_one_entry_per_contact(four_contacts):
    result = await _service(FakeProvider(four_contacts)).sync_contacts()
    first = next(hc for hc in result.hashed_contacts if hc.original_id == "c1")
    assert first.hashed_identifiers == (
        sha256_hex("1234567890"),
        sha256_hex("5550101"),
        sha256_hex("ann@example.com"),
    )
    assert len(result.hashed_contacts) == 3


@pytest.mark.asyncio
async def test_raw_identifiers_never_in_hashed_payload(four_contacts):
    result = await _service(FakeProvider(four_contacts)).sync_contacts()
    raw_values = [v for c in four_contacts for v in (*c.phone_numbers, *c.emails)]
    for digest in result.all_hashes:
        assert all(raw not in digest for raw in raw_values)


@pytest.mark.asyncio
async def test_partition_counts_contacts_without_identifiers():
    contacts = [RawContact(id=f"n{i}") for i in range(3)] + [
        RawContact(id=f"p{i}", phone_numbers=(f"555-000{i}",)) for i in range(5)
    ]
    result = await _service(FakeProvider(contacts)).sync_contacts()
    assert result.total_contacts_scanned == 8
    assert len(result.unmatched) == 5


@pytest.mark.asyncio
async def test_hashing_error_is_recorded_and_contact_still_invitable():
    contacts = [
        RawContact(id="c1", name="Ann", phone_numbers=("111",)),
        RawContact(id="c2", name="Ben", phone_numbers=("222",)),
    ]
    service = _service(FakeProvider(contacts), hasher=FlakyHasher("111"))
    result = await service.sync_contacts()

    assert [u.contact_id for u in result.unmatched] == ["c1", "c2"]
    assert result.errors is not None
    assert any("Failed to hash phone" in e for e in result.errors)
    assert result.total_hashes_generated == 1


@pytest.mark.asyncio
async def test_invalid_email_is_non_fatal():
    contacts = [RawContact(id="c1", name="Ann", emails=("not-an-email",))]
    result = await _service(FakeProvider(contacts)).sync_contacts()
    assert result.errors == ("Failed to hash email for Ann: Invalid email format",)
    assert result.unmatched[0].identifier_type == IdentifierType.EMAIL


@pytest.mark.asyncio
async def test_malformed_hashes_are_filtered_and_reported():
    class ShortHasher(HashingService):
        def hash_phone_number(self, raw):
            return "abc"

    contacts = [RawContact(id="c1", phone_numbers=("123",))]
    result = await _service(FakeProvider(contacts), hasher=ShortHasher()).sync_contacts()
    assert result.total_hashes_generated == 0
    assert result.errors == ("Filtered 1 invalid hashes",)


@pytest.mark.asyncio
async def test_fetch_failure_wrapped_as_sync_failed():
    provider = FakeProvider(fetch_error=OSError("store offline"))
    with pytest.raises(ContactSyncFailedError, match="Contact sync failed: store offline") as info:
        await _service(provider).sync_contacts()
    assert isinstance(info.value.__cause__, OSError)


@pytest.mark.asyncio
async def test_force_refresh_does_not_change_result(four_contacts):
    service = _service(FakeProvider(four_contacts))
    a = await service.sync_contacts(force_refresh=True)
    b = await service.sync_contacts(force_refresh=False)
    assert a.unmatched == b.unmatched
    assert a.all_hashes == b.all_hashes


@pytest.mark.asyncio
async def test_each_sync_refetches(four_contacts):
    provider = FakeProvider(four_contacts)
    service = _service(provider)
    await service.sync_contacts()
    await service.sync_contacts()
    assert provider.fetch_calls == 2


@pytest.mark.asyncio
async def test_clear_cache_is_repeatable():
    service = _service(FakeProvider([]))
    await service.clear_cache()
    await service.clear_cache()


@pytest.mark.asyncio
async def test_state_transitions_for_successful_sync(four_contacts):
    states = []
    await _service(FakeProvider(four_contacts), on_state_change=states.append).sync_contacts()
    assert states == [
        SyncState.CHECKING_PERMISSION,
        SyncState.FETCHING,
        SyncState.HASHING,
        SyncState.PARTITIONING_RESULTS,
        SyncState.COMPLETE,
    ]


@pytest.mark.asyncio
async def test_state_transitions_for_denied_and_empty():
    states = []
    provider = FakeProvider([], status=ContactPermissionStatus.DENIED)
    with pytest.raises(ContactPermissionError):
        await _service(provider, on_state_change=states.append).sync_contacts()
    assert states == [SyncState.CHECKING_PERMISSION, SyncState.DENIED]

    states.clear()
    await _service(FakeProvider([]), on_state_change=states.append).sync_contacts()
    assert states == [SyncState.CHECKING_PERMISSION, SyncState.FETCHING, SyncState.COMPLETE]


@pytest.mark.asyncio
async def test_permission_passthroughs():
    service = _service(FakeProvider(status=ContactPermissionStatus.DENIED))
    assert await service.request_permission() == ContactPermissionStatus.DENIED
    assert await service.get_permission_status() == ContactPermissionStatus.DENIED
    assert service.is_supported() is True


@pytest.mark.asyncio
async def test_match_contacts_moves_matched_out_of_unmatched(four_contacts):
    ben_hash = sha256_hex("ben@example.com")
    functions = FakeFunctions(
        match_response={
            "success": True,
            "matches": [{"hash": ben_hash, "userId": "u-ben", "displayName": "Ben B", "username": "benb"}],
            "totalHashes": 5,
            "totalMatches": 1,
        }
    )
    service = _service(FakeProvider(four_contacts), functions=functions)
    synced = await service.sync_contacts()
    result = await service.match_contacts(synced)

    assert [m.user_id for m in result.matched] == ["u-ben"]
    assert result.matched[0].username == "benb"
    assert {u.contact_id for u in result.unmatched} == {"c1", "c3"}
    name, payload, timeout = functions.calls[0]
    assert name == "matchContactsWithUsers"
    assert payload == {"hashedIdentifiers": synced.all_hashes}
    assert timeout == 30.0


@pytest.mark.asyncio
async def test_match_contacts_without_hashes_skips_network():
    functions = FakeFunctions()
    service = _service(FakeProvider([RawContact(id="x")]), functions=functions)
    synced = await service.sync_contacts()
    assert await service.match_contacts(synced) is synced
    assert functions.calls == []


@pytest.mark.asyncio
async def test_single_batch_failure_propagates(four_contacts, functions_error):
    functions = FakeFunctions(error=functions_error("unauthenticated"))
    service = _service(FakeProvider(four_contacts), functions=functions)
    synced = await service.sync_contacts()
    with pytest.raises(DiscoveryRequestError, match="signed in to match"):
        await service.match_contacts(synced)


@pytest.mark.asyncio
async def test_large_address_book_is_batched_and_failed_batches_recorded():
    contacts = [RawContact(id=f"c{i}", phone_numbers=(f"1555{i:07d}",)) for i in range(2500)]

    class SecondBatchFails(FakeFunctions):
        async def call(self, name, payload, *, timeout=None):
            self.calls.append((name, payload, timeout))
            if len(self.calls) == 2:
                raise self.failure
            return self.match_response

    functions = SecondBatchFails()
    functions.failure = FunctionsError("resource-exhausted", "slow down")
    service = _service(FakeProvider(contacts), functions=functions)
    synced = await service.sync_contacts()
    result = await service.match_contacts(synced)

    assert [len(p["hashedIdentifiers"]) for _, p, _ in functions.calls] == [1000, 1000, 500]
    assert result.errors == ("Batch 2 failed: Rate limit exceeded. Please try again later.",)
    assert len(result.unmatched) == 2500


@pytest.mark.asyncio
async def test_any_gateway_exception_in_a_batch_is_recorded():
    contacts = [RawContact(id=f"c{i}", phone_numbers=(f"1555{i:07d}",)) for i in range(1500)]

    class FlakyGateway:
        def __init__(self):
            self.batches = 0

        async def match_contacts(self, hashed_identifiers):
            self.batches += 1
            if self.batches == 1:
                raise RuntimeError("socket closed")
            return []

        async def send_invite(self, contact_identifier, invite_method, contact_name=None):
            raise AssertionError("not used")

    gateway = FlakyGateway()
    service = ContactsService(FakeProvider(contacts), HashingService(), gateway)
    result = await service.match_contacts(await service.sync_contacts())

    assert gateway.batches == 2
    assert result.errors == ("Batch 1 failed: socket closed",)
    assert result.matched == ()


@pytest.mark.asyncio
async def test_invite_contact_sends_hash_not_plaintext():
    functions = FakeFunctions()
    service = _service(FakeProvider(), functions=functions)
    contact = UnmatchedContact(
        contact_id="c1", name="Ann", identifier="(123) 456-7890", identifier_type=IdentifierType.PHONE
    )
    outcome = await service.invite_contact(contact)

    name, payload, timeout = functions.calls[0]
    assert name == "sendContactInvite"
    assert payload == {
        "contactIdentifier": sha256_hex("1234567890"),
        "inviteMethod": "sms",
        "contactName": "Ann",
    }
    assert timeout == 20.0
    assert len(outcome.referral_code) == 8
    assert outcome.invite_link.endswith(f"ref={outcome.referral_code}")


@pytest.mark.asyncio
async def test_repeat_invite_returns_same_referral_code():
    service = _service(FakeProvider(), functions=FakeFunctions())
    contact = UnmatchedContact(
        contact_id="c2", identifier="Ben@Example.com", identifier_type=IdentifierType.EMAIL
    )
    first = await service.invite_contact(contact, "email")
    second = await service.invite_contact(contact, "email")
    assert first.referral_code == second.referral_code


@pytest.mark.asyncio
async def test_invite_all_uses_phone_contacts_only():
    functions = FakeFunctions()
    service = _service(FakeProvider(), functions=functions)
    contacts = [
        UnmatchedContact(contact_id="e", identifier="e@example.com", identifier_type=IdentifierType.EMAIL),
        UnmatchedContact(contact_id="p1", identifier="555-0101", identifier_type=IdentifierType.PHONE),
        UnmatchedContact(contact_id="p2", identifier="555-0102", identifier_type=IdentifierType.PHONE),
    ]
    group = await service.invite_all(contacts)
    assert [c.contact_id for c in group.recipients] == ["p1", "p2"]
    assert len(functions.calls) == 1
    assert functions.calls[0][1]["contactIdentifier"] == sha256_hex("5550101")

    assert await service.invite_all(contacts[:1]) is None


@pytest.mark.asyncio
async def test_invites_without_gateway_raise():
    service = _service(FakeProvider())
    with pytest.raises(RuntimeError):
        await service.invite_all([])
