from typing import Any, Dict, Optional

from certhub.config import Settings
from certhub.database.base import RecordStore
from certhub.models.certificate import DocumentCategory, utc_now
from certhub.models.folder_config import FOLDER_CONFIG_KEY
from certhub.services.drive import StorageGateway
from certhub.utils.exceptions import NotFoundError, ValidationError
from certhub.utils.logger import drive_logger


class FolderRoutingService:
    """문서 분류별 Drive 업로드 폴더 설정 (config 컬렉션의 단일 문서)"""

    def __init__(self, store: RecordStore, gateway: StorageGateway, settings: Settings):
        self.store = store
        self.gateway = gateway
        self.settings = settings

    async def _stored(self) -> Optional[Dict[str, str]]:
        document = await self.store.config.find_one({"key": FOLDER_CONFIG_KEY})
        if document and document.get("value"):
            return document["value"]
        return None

    async def get(self) -> Dict[str, str]:
        return await self._stored() or dict(self.settings.default_drive_folders)

    async def update(self, changes: Dict[str, Any]) -> Dict[str, str]:
        """문자열로 전달된 분류만 덮어쓰고, 비어 있지 않은 ID는 모두 폴더인지 확인"""
        current = await self.get()
        wanted = {}
        for category in DocumentCategory:
            value = changes.get(category.value)
            wanted[category.value] = value if isinstance(value, str) else current.get(category.value, "")

        for category, folder_id in wanted.items():
            if not folder_id:
                continue
            try:
                is_folder = await self.gateway.is_folder(folder_id)
            except NotFoundError as e:
                raise ValidationError(f"{category} 폴더 ID가 올바르지 않습니다.") from e
            if not is_folder:
                raise ValidationError(f"{category}는 폴더가 아닙니다.")

        await self.store.config.update_one(
            {"key": FOLDER_CONFIG_KEY},
            {"key": FOLDER_CONFIG_KEY, "value": wanted, "updatedAt": utc_now()},
            upsert=True,
        )
        drive_logger.info(f"Drive 폴더 설정 변경: {wanted}")
        return wanted

    async def resolve(self, overrides: Optional[Dict[str, Optional[str]]] = None) -> Dict[DocumentCategory, str]:
        """
        분류별 업로드 폴더 결정.

        우선순위: 요청에서 지정한 폴더 → 저장된 설정 → 분류별 기본 폴더 → DRIVE_PARENT_FOLDER_ID
        """
        overrides = overrides or {}
        stored = await self._stored() or {}
        defaults = self.settings.default_drive_folders
        return {
            category: (
                overrides.get(category.value)
                or stored.get(category.value)
                or defaults.get(category.value)
                or self.settings.DRIVE_PARENT_FOLDER_ID
            )
            for category in DocumentCategory
        }
