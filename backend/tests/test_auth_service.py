import pytest

from certhub.core.security import PasswordHasher, looks_hashed, verify_credential
from certhub.utils.exceptions import AuthError, NotFoundError, ValidationError


def test_verify_credential_handles_hashed_and_plain_values():
    hasher = PasswordHasher()
    digest = hasher.hash("secret")

    assert looks_hashed(digest)
    assert verify_credential(hasher, "secret", digest)
    assert not verify_credential(hasher, "other", digest)
    assert verify_credential(hasher, "1234", "1234")
    assert not verify_credential(hasher, "1234", "12345")
    assert not verify_credential(hasher, "1234", None)


@pytest.mark.asyncio
async def test_login_with_legacy_plain_password(auth_service):
    user = await auth_service.login("admin", "admin123")

    assert user == {"username": "admin", "role": "ADMIN", "companyId": "FARES"}


@pytest.mark.asyncio
@pytest.mark.parametrize("username,password", [(None, "1234"), ("surgas", None), ("", "")])
async def test_login_requires_both_fields(auth_service, username, password):
    with pytest.raises(ValidationError):
        await auth_service.login(username, password)


@pytest.mark.asyncio
async def test_login_unknown_user(auth_service):
    with pytest.raises(NotFoundError):
        await auth_service.login("ghost", "1234")


@pytest.mark.asyncio
async def test_login_wrong_password(auth_service):
    with pytest.raises(AuthError):
        await auth_service.login("surgas", "wrong")


@pytest.mark.asyncio
async def test_change_password_stores_bcrypt_hash(auth_service, store):
    await auth_service.change_password("surgas", "new-secret", min_length=4)

    stored = await store.users.find_one({"username": "surgas"})
    assert stored["password"].startswith("$2b$")
    assert "updatedAt" in stored

    user = await auth_service.login("surgas", "new-secret")
    assert user["companyId"] == "SURGAS"
    with pytest.raises(AuthError):
        await auth_service.login("surgas", "1234")


@pytest.mark.asyncio
async def test_change_password_enforces_min_length(auth_service):
    with pytest.raises(ValidationError):
        await auth_service.change_password("surgas", "abc", min_length=4)


@pytest.mark.asyncio
async def test_change_password_without_min_length(auth_service):
    await auth_service.change_password("chilco", "x")

    assert (await auth_service.login("chilco", "x"))["username"] == "chilco"


@pytest.mark.asyncio
async def test_change_password_unknown_user(auth_service):
    with pytest.raises(NotFoundError):
        await auth_service.change_password("ghost", "secret")


@pytest.mark.asyncio
async def test_list_users_hides_password(auth_service):
    users = await auth_service.list_users()

    assert len(users) == 5
    assert all("password" not in user and "_id" not in user for user in users)
    assert {user["companyId"] for user in users} == {"FARES", "SURGAS", "CHILCO"}


@pytest.mark.asyncio
async def test_seed_users_only_when_empty(auth_service):
    assert await auth_service.seed_users_if_empty() == 0
