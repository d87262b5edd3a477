"""
프로세스 메모리 저장소 (USE_MEMORY_STORE=1 또는 테스트용)
"""

import copy
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId

from certhub.database.base import (
    Collection,
    DuplicateRecordError,
    Filter,
    RecordStore,
    SortSpec,
)


def _matches_condition(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and any(key.startswith("$") for key in condition):
        for operator, operand in condition.items():
            if operator == "$in":
                if value not in operand:
                    return False
            elif operator == "$ne":
                if value == operand:
                    return False
            else:
                raise ValueError(f"지원하지 않는 연산자: {operator}")
        return True
    return value == condition


def matches(document: Dict[str, Any], query: Optional[Filter]) -> bool:
    """MongoDB 필터의 부분 집합(동등, $in, $ne, $or)을 평가합니다."""
    for key, condition in (query or {}).items():
        if key == "$or":
            if not any(matches(document, sub_query) for sub_query in condition):
                return False
        elif not _matches_condition(document.get(key), condition):
            return False
    return True


def _project(document: Dict[str, Any], projection: Optional[Dict[str, int]]) -> Dict[str, Any]:
    if not projection:
        return document
    excluded = {key for key, flag in projection.items() if not flag}
    included = {key for key, flag in projection.items() if flag}
    if included:
        keep = included | ({"_id"} - excluded)
        return {key: value for key, value in document.items() if key in keep}
    return {key: value for key, value in document.items() if key not in excluded}


class MemoryCollection(Collection):
    def __init__(self, name: str):
        self.name = name
        self._documents: List[Dict[str, Any]] = []
        self._unique_keys: List[Tuple[str, ...]] = []

    def _check_unique(self, candidate: Dict[str, Any], ignore: Optional[Dict[str, Any]] = None) -> None:
        for keys in self._unique_keys:
            candidate_key = tuple(candidate.get(key) for key in keys)
            for document in self._documents:
                if document is ignore:
                    continue
                if tuple(document.get(key) for key in keys) == candidate_key:
                    raise DuplicateRecordError(f"{self.name} 중복 키: {dict(zip(keys, candidate_key))}")

    async def find(
        self,
        query: Optional[Filter] = None,
        sort: Optional[SortSpec] = None,
        projection: Optional[Dict[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        found = [copy.deepcopy(doc) for doc in self._documents if matches(doc, query)]
        for key, direction in reversed(list(sort or [])):
            found.sort(key=lambda doc: (doc.get(key) is None, doc.get(key)), reverse=direction < 0)
        return [_project(doc, projection) for doc in found]

    async def find_one(self, query: Filter) -> Optional[Dict[str, Any]]:
        for document in self._documents:
            if matches(document, query):
                return copy.deepcopy(document)
        return None

    async def insert_one(self, document: Dict[str, Any]) -> Any:
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self._check_unique(stored)
        self._documents.append(stored)
        return stored["_id"]

    async def insert_many(self, documents: List[Dict[str, Any]]) -> int:
        for document in documents:
            await self.insert_one(document)
        return len(documents)

    async def update_one(self, query: Filter, values: Dict[str, Any], upsert: bool = False) -> int:
        for document in self._documents:
            if matches(document, query):
                updated = {**document, **copy.deepcopy(values)}
                self._check_unique(updated, ignore=document)
                document.update(copy.deepcopy(values))
                return 1
        if upsert:
            seed = {key: value for key, value in query.items() if not key.startswith("$")}
            await self.insert_one({**seed, **values})
        return 0

    async def delete_many(self, query: Filter) -> int:
        kept = [doc for doc in self._documents if not matches(doc, query)]
        deleted = len(self._documents) - len(kept)
        self._documents = kept
        return deleted

    async def count(self, query: Optional[Filter] = None) -> int:
        return sum(1 for doc in self._documents if matches(doc, query))

    async def create_index(self, keys: SortSpec, unique: bool = False) -> None:
        if unique:
            key_names = tuple(key for key, _ in keys)
            if key_names not in self._unique_keys:
                self._unique_keys.append(key_names)


class MemoryRecordStore(RecordStore):
    def __init__(self):
        self._collections: Dict[str, MemoryCollection] = {}
        self._connected = False

    async def connect(self) -> None:
        if self._connected:
            return
        await self.ensure_indexes()
        self._connected = True

    async def close(self) -> None:
        self._connected = False

    def collection(self, name: str) -> Collection:
        if name not in self._collections:
            self._collections[name] = MemoryCollection(name)
        return self._collections[name]

    async def ping(self) -> bool:
        return True
