from fastapi import APIRouter, Depends, HTTPException
from typing import List

from certhub.schemas.user import LoginRequest, LoginResponse, UserResponse
from certhub.services.auth_service import AuthService
from certhub.utils.dependencies import get_auth_service
from certhub.utils.exceptions import InternalError
from certhub.utils.logger import auth_logger

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get(
    "/users",
    response_model=List[UserResponse],
    summary="사용자 목록",
    description="전체 사용자 목록을 조회합니다. (비밀번호 제외)",
)
async def list_users(service: AuthService = Depends(get_auth_service)):
    try:
        return await service.list_users()
    except HTTPException:
        raise
    except Exception as e:
        auth_logger.error(f"사용자 목록 조회 실패: {str(e)}")
        raise InternalError("사용자 목록 조회 중 오류가 발생했습니다.")


# 아이디/비밀번호 로그인 (토큰 발급 없음, 사용자 정보만 반환)
@router.post(
    "/login",
    response_model=LoginResponse,
    summary="로그인",
    operation_id="login",
    description="username과 password를 받아 사용자 역할과 회사를 반환합니다.",
)
async def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    try:
        return await service.login(data.username, data.password)
    except HTTPException:
        raise
    except Exception as e:
        auth_logger.error(f"로그인 처리 실패: {str(e)}")
        raise InternalError("로그인 처리 중 오류가 발생했습니다.")
