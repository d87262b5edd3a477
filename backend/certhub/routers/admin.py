from fastapi import APIRouter, Depends, HTTPException

from certhub.schemas.drive import FolderRouting, FolderRoutingUpdate
from certhub.schemas.user import LegacyPasswordChangeRequest, OkResponse, PasswordChangeRequest
from certhub.services.auth_service import AuthService
from certhub.services.folder_routing import FolderRoutingService
from certhub.utils.dependencies import get_auth_service, get_folder_routing_service, require_admin
from certhub.utils.exceptions import InternalError
from certhub.utils.logger import app_logger

# 모든 경로는 ADMIN 전용
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

# 새 비밀번호 최소 길이
MIN_PASSWORD_LENGTH = 4


# 고정 경로(/users/password)를 먼저 등록해야 {username}에 매칭되지 않음
@router.put(
    "/users/password",
    response_model=OkResponse,
    summary="비밀번호 변경 (구버전)",
    description="본문의 username 사용자의 비밀번호를 변경합니다. 길이 제한은 없습니다.",
)
async def change_password_legacy(
    data: LegacyPasswordChangeRequest,
    service: AuthService = Depends(get_auth_service),
):
    try:
        await service.change_password(data.username, data.new_password)
        return OkResponse()
    except HTTPException:
        raise
    except Exception as e:
        app_logger.error(f"비밀번호 변경 실패: user={data.username}, error={str(e)}")
        raise InternalError("비밀번호 변경 중 오류가 발생했습니다.")


@router.put(
    "/users/{username}/password",
    response_model=OkResponse,
    summary="비밀번호 변경",
    description=f"사용자의 비밀번호를 bcrypt 해시로 저장합니다. (최소 {MIN_PASSWORD_LENGTH}자)",
)
async def change_password(
    username: str,
    data: PasswordChangeRequest,
    service: AuthService = Depends(get_auth_service),
):
    try:
        await service.change_password(username, data.new_password, min_length=MIN_PASSWORD_LENGTH)
        return OkResponse()
    except HTTPException:
        raise
    except Exception as e:
        app_logger.error(f"비밀번호 변경 실패: user={username}, error={str(e)}")
        raise InternalError("비밀번호 변경 중 오류가 발생했습니다.")


@router.get(
    "/drive-folders",
    response_model=FolderRouting,
    summary="Drive 폴더 설정 조회",
    description="문서 분류별 업로드 폴더를 조회합니다. 저장된 설정이 없으면 환경 변수 기본값을 반환합니다.",
)
async def get_drive_folders(service: FolderRoutingService = Depends(get_folder_routing_service)):
    try:
        return await service.get()
    except HTTPException:
        raise
    except Exception as e:
        app_logger.error(f"Drive 폴더 설정 조회 실패: {str(e)}")
        raise InternalError("Drive 폴더 설정 조회 중 오류가 발생했습니다.")


@router.put(
    "/drive-folders",
    response_model=FolderRouting,
    summary="Drive 폴더 설정 변경",
    description="문자열로 전달된 분류만 변경합니다. 비어 있지 않은 ID는 접근 가능한 폴더여야 합니다.",
)
async def update_drive_folders(
    data: FolderRoutingUpdate,
    service: FolderRoutingService = Depends(get_folder_routing_service),
):
    try:
        return await service.update(data.model_dump())
    except HTTPException:
        raise
    except Exception as e:
        app_logger.error(f"Drive 폴더 설정 변경 실패: {str(e)}")
        raise InternalError("Drive 폴더 설정 변경 중 오류가 발생했습니다.")
