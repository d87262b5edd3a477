"""
Google Drive 스토리지 게이트웨이

- 업로드 전에 대상 폴더 접근 여부를 먼저 확인합니다.
- 인증 오류(401 또는 invalid_grant)가 나면 access_token을 강제로 한 번 갱신하고
  같은 호출을 한 번만 재시도합니다. 두 번째 실패는 그대로 전파됩니다.
- 파일 생성 후 공유 권한을 부여하며, 권한 부여 실패도 업로드 실패로 취급합니다.
"""

import json
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, BinaryIO, Callable, Dict, Optional, TypeVar

import anyio.to_thread
from google.auth.exceptions import GoogleAuthError, RefreshError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from certhub.config import Settings
from certhub.models.folder_config import DRIVE_FOLDER_MIME_TYPE
from certhub.services.credentials import CredentialStore
from certhub.utils.exceptions import NotFoundError, UploadError
from certhub.utils.logger import drive_logger

T = TypeVar("T")

FOLDER_FIELDS = "id,name,driveId,mimeType"
FILE_INFO_FIELDS = "id,name,parents,mimeType,driveId"
CREATED_FILE_FIELDS = "id, webViewLink, webContentLink"


def _error_reasons(exc: HttpError) -> set:
    try:
        payload = json.loads(exc.content.decode("utf-8"))
    except (AttributeError, UnicodeDecodeError, ValueError):
        return set()
    if not isinstance(payload, dict):
        return set()
    error = payload.get("error")
    if isinstance(error, str):
        return {error}
    if isinstance(error, dict):
        return {item.get("reason") for item in error.get("errors", []) if isinstance(item, dict)}
    return set()


def is_auth_error(exc: BaseException) -> bool:
    """재시도 대상 인증 오류인지 판단 (HTTP 401 또는 invalid_grant)"""
    if isinstance(exc, RefreshError):
        return "invalid_grant" in str(exc)
    if isinstance(exc, HttpError):
        if exc.resp.status == 401:
            return True
        return "invalid_grant" in _error_reasons(exc)
    return False


class StorageProvider(ABC):
    """외부 스토리지 API (동기 호출)"""

    @abstractmethod
    def get_file(self, file_id: str, fields: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def create_file(self, metadata: Dict[str, Any], stream: BinaryIO, mime_type: str, fields: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def create_permission(self, file_id: str, permission: Dict[str, Any]) -> Dict[str, Any]:
        ...


class GoogleDriveProvider(StorageProvider):
    """google-api-python-client 기반 Drive v3 어댑터"""

    def __init__(self, credential_store: CredentialStore):
        self.credential_store = credential_store
        self._service = None

    @contextmanager
    def locked_drive(self):
        """Drive 서비스 사용 구간을 자격 증명 락으로 직렬화"""
        with self.credential_store.lock:
            if self._service is None:
                self._service = build(
                    "drive", "v3",
                    credentials=self.credential_store.credentials,
                    cache_discovery=False,
                )
            yield self._service

    def get_file(self, file_id: str, fields: str) -> Dict[str, Any]:
        with self.locked_drive() as drive:
            return drive.files().get(
                fileId=file_id,
                fields=fields,
                supportsAllDrives=True,
            ).execute()

    def create_file(self, metadata: Dict[str, Any], stream: BinaryIO, mime_type: str, fields: str) -> Dict[str, Any]:
        media = MediaIoBaseUpload(stream, mimetype=mime_type, resumable=False)
        with self.locked_drive() as drive:
            return drive.files().create(
                body=metadata,
                media_body=media,
                fields=fields,
                supportsAllDrives=True,
            ).execute()

    def create_permission(self, file_id: str, permission: Dict[str, Any]) -> Dict[str, Any]:
        with self.locked_drive() as drive:
            return drive.permissions().create(
                fileId=file_id,
                body=permission,
                supportsAllDrives=True,
            ).execute()


class StorageGateway:
    def __init__(
        self,
        provider: StorageProvider,
        credential_store: CredentialStore,
        share_permission: Optional[Dict[str, Any]] = None,
        default_folder_id: str = "",
    ):
        self.provider = provider
        self.credential_store = credential_store
        self.share_permission = share_permission or {"type": "anyone", "role": "reader"}
        self.default_folder_id = default_folder_id

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageGateway":
        credential_store = CredentialStore.from_settings(settings)
        return cls(
            provider=GoogleDriveProvider(credential_store),
            credential_store=credential_store,
            share_permission=settings.share_permission,
            default_folder_id=settings.DRIVE_PARENT_FOLDER_ID,
        )

    def _force_refresh(self) -> None:
        try:
            self.credential_store.force_refresh()
        except GoogleAuthError as e:
            # 갱신 실패 시에도 재시도는 한 번 수행 (재시도가 실패하면 호출자에게 전파)
            drive_logger.error(f"access_token 강제 갱신 실패: {str(e)}")

    async def _call_with_retry(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return await anyio.to_thread.run_sync(func)
        except Exception as e:
            if not is_auth_error(e):
                raise
            drive_logger.warning(f"Drive {operation} 인증 오류, 토큰 갱신 후 재시도: {str(e)}")
        await anyio.to_thread.run_sync(self._force_refresh)
        return await anyio.to_thread.run_sync(func)

    async def upload(
        self,
        stream: BinaryIO,
        file_name: str,
        mime_type: str,
        metadata: Optional[Dict[str, str]] = None,
        folder_id: Optional[str] = None,
    ) -> Dict[str, Optional[str]]:
        """파일을 업로드하고 {id, viewUrl, downloadUrl}을 반환"""
        metadata = metadata or {}
        target_folder = folder_id or self.default_folder_id
        if not target_folder:
            raise UploadError("업로드 대상 폴더가 설정되지 않았습니다. (DRIVE_PARENT_FOLDER_ID 또는 DRIVE_FOLDER_*)")

        try:
            await self._call_with_retry(
                "폴더 확인",
                lambda: self.provider.get_file(target_folder, FOLDER_FIELDS),
            )
        except Exception as e:
            drive_logger.error(f"대상 폴더 접근 실패: folder={target_folder}, error={str(e)}")
            raise UploadError("대상 폴더에 접근할 수 없습니다. (OAuth 설정과 폴더 ID를 확인하세요)") from e

        body = {
            "name": file_name,
            "parents": [target_folder],
            "mimeType": mime_type,
            "appProperties": metadata,
            "description": " | ".join([
                f"Users: {metadata.get('users', '')}",
                f"NumCert: {metadata.get('numCert', '')}",
                f"Serial: {metadata.get('serial', '')}",
            ]),
        }

        def create():
            # 재시도 시 스트림을 처음부터 다시 읽음
            stream.seek(0)
            return self.provider.create_file(body, stream, mime_type, CREATED_FILE_FIELDS)

        try:
            created = await self._call_with_retry("파일 생성", create)
            await self._call_with_retry(
                "권한 부여",
                lambda: self.provider.create_permission(created["id"], self.share_permission),
            )
        except Exception as e:
            drive_logger.error(f"Drive 업로드 실패: file={file_name}, error={str(e)}")
            raise UploadError() from e

        drive_logger.info(f"Drive 업로드 완료: file={file_name}, id={created['id']}")
        return {
            "id": created["id"],
            "viewUrl": created.get("webViewLink"),
            "downloadUrl": created.get("webContentLink"),
        }

    async def get_file_info(self, file_id: str) -> Dict[str, Any]:
        try:
            return await self._call_with_retry(
                "메타데이터 조회",
                lambda: self.provider.get_file(file_id, FILE_INFO_FIELDS),
            )
        except Exception as e:
            drive_logger.warning(f"Drive 파일 조회 실패: id={file_id}, error={str(e)}")
            raise NotFoundError("폴더를 찾을 수 없습니다.") from e

    async def is_folder(self, file_id: str) -> bool:
        info = await self.get_file_info(file_id)
        return info.get("mimeType") == DRIVE_FOLDER_MIME_TYPE
