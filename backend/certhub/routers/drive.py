from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from certhub.schemas.drive import DriveFileInfo
from certhub.services.drive import StorageGateway
from certhub.utils.dependencies import get_storage_gateway, require_admin
from certhub.utils.exceptions import InternalError, ValidationError
from certhub.utils.logger import drive_logger

router = APIRouter(prefix="/drive", tags=["drive"], dependencies=[Depends(require_admin)])


@router.get(
    "/fileinfo",
    response_model=DriveFileInfo,
    summary="Drive 파일 정보 조회 (ADMIN)",
    description="폴더 ID 확인용으로 Drive 파일/폴더의 이름, 상위 폴더, 드라이브 ID를 조회합니다.",
)
async def get_file_info(
    file_id: Optional[str] = Query(None, alias="id", description="Drive 파일 또는 폴더 ID"),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    if not file_id:
        raise ValidationError("id는 필수입니다.")
    try:
        return await gateway.get_file_info(file_id)
    except HTTPException:
        raise
    except Exception as e:
        drive_logger.error(f"Drive 파일 정보 조회 실패: id={file_id}, error={str(e)}")
        raise InternalError("Drive 파일 정보 조회 중 오류가 발생했습니다.")
