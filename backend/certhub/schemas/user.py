from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional

# 로그인 요청 (필수값 검증은 서비스에서 400으로 처리)
class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None

# 사용자 응답용 (비밀번호 제외)
class UserResponse(BaseModel):
    username: str
    role: str
    company_id: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class LoginResponse(UserResponse):
    pass

# 관리자 비밀번호 변경 (/admin/users/{username}/password)
class PasswordChangeRequest(BaseModel):
    new_password: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

# 관리자 비밀번호 변경 (구버전 /admin/users/password)
class LegacyPasswordChangeRequest(BaseModel):
    username: Optional[str] = None
    new_password: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class OkResponse(BaseModel):
    ok: bool = True
