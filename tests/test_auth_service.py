"""
Unit tests for the authentication service facade and credential store.
"""

from unittest.mock import AsyncMock

import pytest

from recipebox.exceptions import (
    AuthenticationError,
    ConflictError,
    DependencyError,
    PasswordHashingError,
)
from recipebox.modules.auth import (
    AuthenticationService,
    CredentialStore,
    IdentityRecord,
    PasswordHasher,
    SignedTokenStrategy,
)

from conftest import JWT_SECRET


@pytest.fixture
def credential_store(fake_redis):
    return CredentialStore(fake_redis)


@pytest.fixture
def auth_service(credential_store, clock):
    return AuthenticationService(
        credential_store=credential_store,
        hasher=PasswordHasher(rounds=4),
        strategy=SignedTokenStrategy(JWT_SECRET, clock=clock),
    )


@pytest.mark.asyncio
async def test_insert_rejects_duplicate_username(credential_store):
    await credential_store.insert(IdentityRecord(username="alice", password_hash="h1"))

    with pytest.raises(ConflictError):
        await credential_store.insert(IdentityRecord(username="alice", password_hash="h2"))

    assert (await credential_store.find("alice")).password_hash == "h1"


@pytest.mark.asyncio
async def test_find_unknown_username(credential_store):
    assert await credential_store.find("nobody") is None


@pytest.mark.asyncio
async def test_corrupt_identity_record_is_dependency_error(fake_redis, credential_store):
    await fake_redis.set("identity:alice", '{"username": "alice"}')

    with pytest.raises(DependencyError):
        await credential_store.find("alice")


@pytest.mark.asyncio
async def test_signup_stores_hash_and_issues_credential(auth_service, credential_store):
    credential = await auth_service.signup("alice", "pw1")

    assert credential.username == "alice"
    assert (await auth_service.authenticate(credential.token)).username == "alice"

    record = await credential_store.find("alice")
    assert record.password_hash != "pw1"
    assert await auth_service.hasher.verify(record.password_hash, "pw1")


@pytest.mark.asyncio
async def test_signup_duplicate_is_conflict(auth_service):
    await auth_service.signup("alice", "pw1")

    with pytest.raises(ConflictError):
        await auth_service.signup("alice", "pw2")


@pytest.mark.asyncio
async def test_signup_hash_failure_writes_nothing(clock):
    """A hashing failure aborts signup before the credential store is touched."""
    store = AsyncMock()
    hasher = AsyncMock()
    hasher.hash.side_effect = PasswordHashingError("Could not process password")
    strategy = AsyncMock()
    service = AuthenticationService(credential_store=store, hasher=hasher, strategy=strategy)

    with pytest.raises(PasswordHashingError):
        await service.signup("alice", "pw1")

    store.insert.assert_not_called()
    strategy.issue.assert_not_called()


@pytest.mark.asyncio
async def test_signin_success(auth_service):
    await auth_service.signup("alice", "pw1")

    credential = await auth_service.signin("alice", "pw1")

    assert credential.username == "alice"


@pytest.mark.asyncio
async def test_signin_failures_are_indistinguishable(auth_service):
    """Unknown user and wrong password produce the same error."""
    await auth_service.signup("alice", "pw1")

    with pytest.raises(AuthenticationError) as unknown:
        await auth_service.signin("bob", "pw1")
    with pytest.raises(AuthenticationError) as wrong:
        await auth_service.signin("alice", "wrong")

    assert type(unknown.value) is type(wrong.value)
    assert unknown.value.message == wrong.value.message == "Invalid username or password"


@pytest.mark.asyncio
async def test_signin_unknown_user_still_spends_hash_work(credential_store, clock):
    hasher = AsyncMock()
    service = AuthenticationService(
        credential_store=credential_store,
        hasher=hasher,
        strategy=SignedTokenStrategy(JWT_SECRET, clock=clock),
    )

    with pytest.raises(AuthenticationError):
        await service.signin("bob", "pw1")

    hasher.burn.assert_awaited_once_with("pw1")


@pytest.mark.asyncio
async def test_refresh_and_signout_delegate_to_strategy():
    strategy = AsyncMock()
    service = AuthenticationService(credential_store=AsyncMock(), hasher=AsyncMock(), strategy=strategy)

    await service.refresh("token")
    await service.signout("token")

    strategy.refresh.assert_awaited_once_with("token")
    strategy.revoke.assert_awaited_once_with("token")
