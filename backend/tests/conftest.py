import asyncio
import json
from datetime import datetime, timezone

import httplib2
import pytest
from fastapi.testclient import TestClient
from googleapiclient.errors import HttpError

from certhub.config import Settings
from certhub.database.memory import MemoryRecordStore
from certhub.main import create_app
from certhub.models.folder_config import DRIVE_FOLDER_MIME_TYPE
from certhub.services.auth_service import AuthService
from certhub.services.certificate_service import CertificateService
from certhub.services.drive import StorageGateway, StorageProvider
from certhub.services.folder_routing import FolderRoutingService

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 0, 123000, tzinfo=timezone.utc)

FOLDER_IDS = ["parent-folder", "report-folder", "format-folder", "certificate-folder"]
PLAIN_FILE_ID = "plain-file"


def make_http_error(status: int, error=None) -> HttpError:
    payload = {"error": error if error is not None else {"code": status, "errors": []}}
    return HttpError(httplib2.Response({"status": status}), json.dumps(payload).encode("utf-8"))


class FakeDriveProvider(StorageProvider):
    """Drive API 대체 (메모리 파일 목록, 호출별 실패 주입)"""

    def __init__(self):
        self.files = {
            folder_id: {"id": folder_id, "name": folder_id, "mimeType": DRIVE_FOLDER_MIME_TYPE,
                        "parents": [], "driveId": "shared-drive"}
            for folder_id in FOLDER_IDS
        }
        self.files[PLAIN_FILE_ID] = {"id": PLAIN_FILE_ID, "name": "plain.pdf", "mimeType": "application/pdf",
                                     "parents": ["parent-folder"], "driveId": "shared-drive"}
        self.failures = {"get_file": [], "create_file": [], "create_permission": []}
        self.created = []
        self.permissions = []
        self.calls = {"get_file": 0, "create_file": 0, "create_permission": 0}

    def _maybe_fail(self, operation):
        self.calls[operation] += 1
        if self.failures[operation]:
            raise self.failures[operation].pop(0)

    def get_file(self, file_id, fields):
        self._maybe_fail("get_file")
        if file_id not in self.files:
            raise make_http_error(404)
        return dict(self.files[file_id])

    def create_file(self, metadata, stream, mime_type, fields):
        content = stream.read()
        self._maybe_fail("create_file")
        file_id = f"file-{len(self.created) + 1}"
        self.created.append({"id": file_id, "metadata": metadata, "mime_type": mime_type, "content": content})
        self.files[file_id] = {"id": file_id, "name": metadata["name"], "mimeType": mime_type,
                               "parents": metadata["parents"]}
        return {
            "id": file_id,
            "webViewLink": f"https://drive.test/{file_id}/view",
            "webContentLink": f"https://drive.test/{file_id}/download",
        }

    def create_permission(self, file_id, permission):
        self._maybe_fail("create_permission")
        self.permissions.append((file_id, permission))
        return {"id": f"perm-{file_id}"}


class FakeCredentialStore:
    def __init__(self, refresh_error=None):
        self.refresh_count = 0
        self.refresh_error = refresh_error
        self.warmed_up = False

    def get_access_token(self):
        return "access-token"

    def force_refresh(self):
        self.refresh_count += 1
        if self.refresh_error:
            raise self.refresh_error
        return f"access-token-{self.refresh_count}"

    def warm_up(self):
        self.warmed_up = True
        return True


@pytest.fixture
def settings():
    return Settings(
        USE_MEMORY_STORE=True,
        SEED_ON_STARTUP=False,
        DRIVE_PARENT_FOLDER_ID="parent-folder",
        DRIVE_FOLDER_REPORT="",
        DRIVE_FOLDER_FORMAT="",
        DRIVE_FOLDER_CERTIFICATE="",
        DRIVE_SHARE_TYPE="anyone",
        DRIVE_SHARE_ROLE="reader",
        CORS_ORIGINS="*",
    )


@pytest.fixture
def store():
    record_store = MemoryRecordStore()

    async def prepare():
        await record_store.connect()
        await AuthService(record_store).seed_users_if_empty()

    asyncio.run(prepare())
    return record_store


@pytest.fixture
def provider():
    return FakeDriveProvider()


@pytest.fixture
def credential_store():
    return FakeCredentialStore()


@pytest.fixture
def gateway(provider, credential_store, settings):
    return StorageGateway(
        provider=provider,
        credential_store=credential_store,
        share_permission=settings.share_permission,
        default_folder_id=settings.DRIVE_PARENT_FOLDER_ID,
    )


@pytest.fixture
def folder_routing(store, gateway, settings):
    return FolderRoutingService(store, gateway, settings)


@pytest.fixture
def certificate_service(store, gateway, folder_routing):
    return CertificateService(store, gateway, folder_routing, clock=lambda: FIXED_NOW)


@pytest.fixture
def auth_service(store):
    return AuthService(store)


@pytest.fixture
def client(settings, store, gateway):
    app = create_app(settings=settings, record_store=store, storage_gateway=gateway)
    with TestClient(app) as test_client:
        yield test_client


ADMIN_HEADERS = {"X-Role": "ADMIN"}
