from fastapi import Request

from certhub.config import Settings
from certhub.database.base import RecordStore, RecordStoreError, DuplicateRecordError
from certhub.database.memory import MemoryRecordStore
from certhub.database.mongo import MongoRecordStore

# 설정에 따라 저장소 구현 선택 (USE_MEMORY_STORE=1 이면 메모리 저장소)
def create_record_store(settings: Settings) -> RecordStore:
    if settings.USE_MEMORY_STORE:
        return MemoryRecordStore()
    return MongoRecordStore(
        settings.MONGO_URI,
        settings.MONGO_DB_NAME,
        server_selection_timeout_ms=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
    )

# 앱에 등록된 저장소를 제공하는 의존성 함수
def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store
