"""
문서 저장소 인터페이스.

서비스 계층은 이 인터페이스에만 의존하며, 실제 구현은 MongoDB(Motor)와
테스트/로컬 개발용 메모리 저장소 두 가지가 있습니다.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from certhub.models.certificate import CERTIFICATES
from certhub.models.folder_config import CONFIG
from certhub.models.user import USERS

Filter = Dict[str, Any]
SortSpec = Sequence[Tuple[str, int]]

ASCENDING = 1
DESCENDING = -1


class RecordStoreError(Exception):
    """저장소 읽기/쓰기 실패"""


class DuplicateRecordError(RecordStoreError):
    """유니크 인덱스 위반"""


class Collection(ABC):
    """필터 기반 단일 문서 연산만 제공하는 컬렉션"""

    name: str

    @abstractmethod
    async def find(
        self,
        query: Optional[Filter] = None,
        sort: Optional[SortSpec] = None,
        projection: Optional[Dict[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def find_one(self, query: Filter) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def insert_one(self, document: Dict[str, Any]) -> Any:
        """문서를 저장하고 저장소가 부여한 _id를 반환합니다."""

    @abstractmethod
    async def insert_many(self, documents: List[Dict[str, Any]]) -> int:
        ...

    @abstractmethod
    async def update_one(self, query: Filter, values: Dict[str, Any], upsert: bool = False) -> int:
        """`$set` 의미로 필드를 갱신하고 매칭된 문서 수를 반환합니다."""

    @abstractmethod
    async def delete_many(self, query: Filter) -> int:
        ...

    @abstractmethod
    async def count(self, query: Optional[Filter] = None) -> int:
        ...

    @abstractmethod
    async def create_index(self, keys: SortSpec, unique: bool = False) -> None:
        ...


class RecordStore(ABC):
    """certificates / users / config 컬렉션을 제공하는 저장소"""

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @abstractmethod
    def collection(self, name: str) -> Collection:
        ...

    @abstractmethod
    async def ping(self) -> bool:
        ...

    @property
    def certificates(self) -> Collection:
        return self.collection(CERTIFICATES)

    @property
    def users(self) -> Collection:
        return self.collection(USERS)

    @property
    def config(self) -> Collection:
        return self.collection(CONFIG)

    async def ensure_indexes(self) -> None:
        await self.users.create_index([("username", ASCENDING)], unique=True)
        await self.users.create_index([("companyId", ASCENDING), ("role", ASCENDING)])
        await self.certificates.create_index([("companyId", ASCENDING), ("numCert", ASCENDING)], unique=True)
        await self.certificates.create_index([("serial", ASCENDING)])
