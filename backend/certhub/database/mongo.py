from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from certhub.database.base import (
    Collection,
    DuplicateRecordError,
    Filter,
    RecordStore,
    RecordStoreError,
    SortSpec,
)
from certhub.utils.logger import app_logger


class MongoCollection(Collection):
    def __init__(self, collection: AsyncIOMotorCollection):
        self._collection = collection
        self.name = collection.name

    async def find(
        self,
        query: Optional[Filter] = None,
        sort: Optional[SortSpec] = None,
        projection: Optional[Dict[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        try:
            cursor = self._collection.find(query or {}, projection)
            if sort:
                cursor = cursor.sort(list(sort))
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            raise RecordStoreError(f"{self.name} 조회 실패: {e}") from e

    async def find_one(self, query: Filter) -> Optional[Dict[str, Any]]:
        try:
            return await self._collection.find_one(query)
        except PyMongoError as e:
            raise RecordStoreError(f"{self.name} 단건 조회 실패: {e}") from e

    async def insert_one(self, document: Dict[str, Any]) -> Any:
        try:
            result = await self._collection.insert_one(document)
            return result.inserted_id
        except DuplicateKeyError as e:
            raise DuplicateRecordError(f"{self.name} 중복 키: {e}") from e
        except PyMongoError as e:
            raise RecordStoreError(f"{self.name} 저장 실패: {e}") from e

    async def insert_many(self, documents: List[Dict[str, Any]]) -> int:
        try:
            result = await self._collection.insert_many(documents)
            return len(result.inserted_ids)
        except DuplicateKeyError as e:
            raise DuplicateRecordError(f"{self.name} 중복 키: {e}") from e
        except PyMongoError as e:
            raise RecordStoreError(f"{self.name} 저장 실패: {e}") from e

    async def update_one(self, query: Filter, values: Dict[str, Any], upsert: bool = False) -> int:
        try:
            result = await self._collection.update_one(query, {"$set": values}, upsert=upsert)
            return result.matched_count
        except DuplicateKeyError as e:
            raise DuplicateRecordError(f"{self.name} 중복 키: {e}") from e
        except PyMongoError as e:
            raise RecordStoreError(f"{self.name} 수정 실패: {e}") from e

    async def delete_many(self, query: Filter) -> int:
        try:
            result = await self._collection.delete_many(query)
            return result.deleted_count
        except PyMongoError as e:
            raise RecordStoreError(f"{self.name} 삭제 실패: {e}") from e

    async def count(self, query: Optional[Filter] = None) -> int:
        try:
            return await self._collection.count_documents(query or {})
        except PyMongoError as e:
            raise RecordStoreError(f"{self.name} 개수 조회 실패: {e}") from e

    async def create_index(self, keys: SortSpec, unique: bool = False) -> None:
        try:
            await self._collection.create_index(list(keys), unique=unique)
        except PyMongoError as e:
            raise RecordStoreError(f"{self.name} 인덱스 생성 실패: {e}") from e


class MongoRecordStore(RecordStore):
    """Motor 기반 MongoDB 저장소"""

    def __init__(self, uri: str, db_name: str, server_selection_timeout_ms: int = 8000):
        self.uri = uri
        self.db_name = db_name
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.motor_client: Optional[AsyncIOMotorClient] = None
        self._db = None

    async def connect(self) -> None:
        if self._db is not None:
            return
        self.motor_client = AsyncIOMotorClient(
            self.uri,
            serverSelectionTimeoutMS=self.server_selection_timeout_ms,
        )
        self._db = self.motor_client[self.db_name]
        await self.ensure_indexes()
        app_logger.info(f"MongoDB 연결 완료: db={self.db_name}")

    async def close(self) -> None:
        """MongoDB 연결을 안전하게 종료합니다."""
        if self.motor_client:
            self.motor_client.close()
        self.motor_client = None
        self._db = None

    def collection(self, name: str) -> Collection:
        if self._db is None:
            raise RecordStoreError("MongoDB에 연결되지 않았습니다.")
        return MongoCollection(self._db[name])

    async def ping(self) -> bool:
        if self.motor_client is None:
            return False
        try:
            await self.motor_client.admin.command("ping")
            return True
        except PyMongoError as e:
            app_logger.error(f"MongoDB ping 실패: {str(e)}")
            return False
