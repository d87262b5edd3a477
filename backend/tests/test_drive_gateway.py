import io
import threading
from unittest.mock import MagicMock

import pytest
from google.auth.exceptions import RefreshError

from certhub.services.credentials import CredentialStore
from certhub.services.drive import GoogleDriveProvider, StorageGateway, is_auth_error
from certhub.utils.exceptions import NotFoundError, UploadError

from conftest import FakeCredentialStore, make_http_error

METADATA = {"users": "surgas,surgas.compras", "numCert": "2001", "serial": "S-1"}


async def _upload(gateway, content=b"%PDF-1.4 report", folder_id="report-folder"):
    return await gateway.upload(
        io.BytesIO(content),
        file_name="SURGAS_2001_S-1_1714566600123.pdf",
        mime_type="application/pdf",
        metadata=METADATA,
        folder_id=folder_id,
    )


@pytest.mark.asyncio
async def test_upload_creates_file_and_grants_permission(gateway, provider, credential_store):
    result = await _upload(gateway)

    assert result == {
        "id": "file-1",
        "viewUrl": "https://drive.test/file-1/view",
        "downloadUrl": "https://drive.test/file-1/download",
    }
    created = provider.created[0]
    assert created["metadata"]["parents"] == ["report-folder"]
    assert created["metadata"]["appProperties"] == METADATA
    assert created["metadata"]["description"] == "Users: surgas,surgas.compras | NumCert: 2001 | Serial: S-1"
    assert provider.permissions == [("file-1", {"type": "anyone", "role": "reader"})]
    assert credential_store.refresh_count == 0


@pytest.mark.asyncio
async def test_upload_falls_back_to_default_folder(gateway, provider):
    await _upload(gateway, folder_id=None)

    assert provider.created[0]["metadata"]["parents"] == ["parent-folder"]


@pytest.mark.asyncio
async def test_upload_without_any_folder_fails(provider, credential_store):
    gateway = StorageGateway(provider, credential_store, default_folder_id="")

    with pytest.raises(UploadError):
        await _upload(gateway, folder_id=None)
    assert provider.calls["get_file"] == 0


@pytest.mark.asyncio
async def test_auth_error_refreshes_once_and_retries_with_full_content(gateway, provider, credential_store):
    provider.failures["create_file"].append(make_http_error(401))

    result = await _upload(gateway, content=b"full content")

    assert result["id"] == "file-1"
    assert credential_store.refresh_count == 1
    assert provider.calls["create_file"] == 2
    assert provider.created[0]["content"] == b"full content"


@pytest.mark.asyncio
async def test_invalid_grant_refresh_error_is_retried(gateway, provider, credential_store):
    provider.failures["get_file"].append(RefreshError("invalid_grant: Token has been expired or revoked."))

    await _upload(gateway)

    assert credential_store.refresh_count == 1
    assert provider.calls["get_file"] == 2


@pytest.mark.asyncio
async def test_second_auth_error_is_not_retried_again(gateway, provider, credential_store):
    provider.failures["create_file"].extend([make_http_error(401), make_http_error(401)])

    with pytest.raises(UploadError):
        await _upload(gateway)

    assert credential_store.refresh_count == 1
    assert provider.calls["create_file"] == 2
    assert provider.created == []


@pytest.mark.asyncio
async def test_non_auth_error_fails_without_refresh(gateway, provider, credential_store):
    provider.failures["create_file"].append(make_http_error(500))

    with pytest.raises(UploadError):
        await _upload(gateway)

    assert credential_store.refresh_count == 0
    assert provider.calls["create_file"] == 1


@pytest.mark.asyncio
async def test_failed_refresh_still_retries_once(provider):
    credential_store = FakeCredentialStore(refresh_error=RefreshError("invalid_grant"))
    gateway = StorageGateway(provider, credential_store, default_folder_id="parent-folder")
    provider.failures["create_file"].append(make_http_error(401))

    result = await _upload(gateway)

    assert result["id"] == "file-1"
    assert credential_store.refresh_count == 1


@pytest.mark.asyncio
async def test_inaccessible_folder_fails_before_create(gateway, provider):
    with pytest.raises(UploadError) as exc_info:
        await _upload(gateway, folder_id="missing-folder")

    assert "폴더" in exc_info.value.message
    assert provider.calls["create_file"] == 0


@pytest.mark.asyncio
async def test_permission_failure_is_upload_failure(gateway, provider):
    provider.failures["create_permission"].append(make_http_error(403))

    with pytest.raises(UploadError):
        await _upload(gateway)


@pytest.mark.asyncio
async def test_get_file_info_and_is_folder(gateway):
    info = await gateway.get_file_info("report-folder")

    assert info["driveId"] == "shared-drive"
    assert await gateway.is_folder("report-folder") is True
    assert await gateway.is_folder("plain-file") is False


@pytest.mark.asyncio
async def test_get_file_info_missing_file(gateway):
    with pytest.raises(NotFoundError):
        await gateway.get_file_info("missing-file")


def test_is_auth_error_classification():
    assert is_auth_error(make_http_error(401))
    assert is_auth_error(make_http_error(400, error="invalid_grant"))
    assert is_auth_error(make_http_error(400, error={"errors": [{"reason": "invalid_grant"}]}))
    assert not is_auth_error(make_http_error(403))
    assert not is_auth_error(make_http_error(404))
    assert is_auth_error(RefreshError("invalid_grant: Bad Request"))
    assert not is_auth_error(RefreshError("unauthorized_client"))
    assert not is_auth_error(ValueError("boom"))


def _credential_store():
    store = CredentialStore("client-id", "client-secret", "refresh-token", "https://oauth2.googleapis.com/token")
    store.credentials = MagicMock()
    return store


def test_credential_store_refreshes_only_when_invalid():
    store = _credential_store()
    store.credentials.valid = True
    store.credentials.token = "cached"

    assert store.get_access_token() == "cached"
    store.credentials.refresh.assert_not_called()

    store.credentials.valid = False
    store.get_access_token()
    store.credentials.refresh.assert_called_once()


def test_credential_store_force_refresh_ignores_cache():
    store = _credential_store()
    store.credentials.valid = True

    store.force_refresh()

    store.credentials.refresh.assert_called_once()


def test_credential_store_warm_up_failure_is_reported():
    store = _credential_store()
    store.credentials.valid = False
    store.credentials.refresh.side_effect = RefreshError("invalid_grant")

    assert store.warm_up() is False


def _lock_free_in_other_thread(lock):
    acquired = []

    def try_acquire():
        got = lock.acquire(blocking=False)
        if got:
            lock.release()
        acquired.append(got)

    worker = threading.Thread(target=try_acquire)
    worker.start()
    worker.join()
    return acquired[0]


def test_drive_calls_hold_credential_lock():
    store = _credential_store()
    provider = GoogleDriveProvider(store)
    provider._service = MagicMock()
    observed = []

    def execute():
        observed.append(_lock_free_in_other_thread(store.lock))
        return {"id": "file-1"}

    provider._service.files.return_value.get.return_value.execute.side_effect = execute
    provider._service.files.return_value.create.return_value.execute.side_effect = execute
    provider._service.permissions.return_value.create.return_value.execute.side_effect = execute

    provider.get_file("folder-1", "id")
    provider.create_file({"name": "a.pdf"}, io.BytesIO(b"data"), "application/pdf", "id")
    provider.create_permission("file-1", {"type": "anyone", "role": "reader"})

    assert observed == [False, False, False]
    assert _lock_free_in_other_thread(store.lock)
