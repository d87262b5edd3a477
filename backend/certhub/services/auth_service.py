from typing import Any, Dict, List, Optional

from certhub.core.security import PasswordHasher, verify_credential
from certhub.database.base import ASCENDING, RecordStore
from certhub.models.certificate import utc_now
from certhub.models.user import SEED_USERS
from certhub.utils.exceptions import AuthError, NotFoundError, ValidationError
from certhub.utils.logger import auth_logger

# 사용자 응답에서 제외할 필드
USER_PROJECTION = {"_id": 0, "password": 0}


class AuthService:
    """로그인, 사용자 목록, 관리자 비밀번호 변경"""

    def __init__(self, store: RecordStore, hasher: Optional[PasswordHasher] = None):
        self.store = store
        self.hasher = hasher or PasswordHasher()

    async def login(self, username: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        if not username or not password:
            raise ValidationError("username과 password는 필수입니다.")

        user = await self.store.users.find_one({"username": username})
        if not user:
            auth_logger.warning(f"로그인 실패 (존재하지 않는 사용자): {username}")
            raise NotFoundError("사용자를 찾을 수 없습니다.")

        if not verify_credential(self.hasher, password, user.get("password")):
            auth_logger.warning(f"로그인 실패 (비밀번호 불일치): {username}")
            raise AuthError("비밀번호가 올바르지 않습니다.")

        auth_logger.info(f"로그인 성공: {username}")
        return {
            "username": user["username"],
            "role": user.get("role"),
            "companyId": user.get("companyId"),
        }

    async def list_users(self) -> List[Dict[str, Any]]:
        return await self.store.users.find({}, sort=[("username", ASCENDING)], projection=USER_PROJECTION)

    async def change_password(self, username: Optional[str], new_password: Optional[str], min_length: int = 0) -> None:
        if not username or not new_password:
            raise ValidationError("username과 newPassword는 필수입니다.")
        if len(new_password) < min_length:
            raise ValidationError(f"비밀번호는 최소 {min_length}자 이상이어야 합니다.")

        matched = await self.store.users.update_one(
            {"username": username},
            {"password": self.hasher.hash(new_password), "updatedAt": utc_now()},
        )
        if not matched:
            raise NotFoundError("사용자를 찾을 수 없습니다.")
        auth_logger.info(f"비밀번호 변경 완료: {username}")

    async def seed_users_if_empty(self) -> int:
        """사용자 컬렉션이 비어 있을 때만 초기 계정 생성"""
        if await self.store.users.count():
            return 0
        inserted = await self.store.users.insert_many([dict(user) for user in SEED_USERS])
        auth_logger.info(f"초기 사용자 {inserted}명 생성")
        return inserted
