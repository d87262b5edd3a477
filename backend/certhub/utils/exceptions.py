from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional

class AppException(HTTPException):
    """애플리케이션 전용 예외 클래스"""
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code_default = "INTERNAL_ERROR"
    message_default = "서버 내부 오류가 발생했습니다."

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        extra_data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=self.status_code_default, detail=message or self.message_default)
        self.error_code = error_code or self.error_code_default
        self.extra_data = extra_data or {}

    @property
    def message(self) -> str:
        return self.detail

def create_error_response(
    status_code: int,
    message: str,
    error_code: Optional[str] = None,
    extra_data: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """일관된 에러 응답 포맷 생성"""
    response = {
        "success": False,
        "message": message,
        "error": {
            "code": error_code or f"ERR_{status_code}",
            "message": message
        }
    }

    if extra_data:
        response["error"]["details"] = extra_data

    return response

# 요청 값 누락/형식 오류, 사용자-회사 불일치
class ValidationError(AppException):
    status_code_default = status.HTTP_400_BAD_REQUEST
    error_code_default = "BAD_REQUEST"
    message_default = "잘못된 요청입니다."

class NotFoundError(AppException):
    status_code_default = status.HTTP_404_NOT_FOUND
    error_code_default = "NOT_FOUND"
    message_default = "리소스를 찾을 수 없습니다."

# 비밀번호 불일치
class AuthError(AppException):
    status_code_default = status.HTTP_401_UNAUTHORIZED
    error_code_default = "UNAUTHORIZED"
    message_default = "인증이 필요합니다."

# ADMIN 전용 경로에 대한 권한 부족
class AuthorizationError(AppException):
    status_code_default = status.HTTP_403_FORBIDDEN
    error_code_default = "FORBIDDEN"
    message_default = "ADMIN만 접근할 수 있습니다."

# 재시도 이후에도 실패한 스토리지 업로드
class UploadError(AppException):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code_default = "UPLOAD_FAILED"
    message_default = "Google Drive 파일 업로드 중 오류가 발생했습니다."

class InternalError(AppException):
    pass

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.status_code, exc.message, exc.error_code, exc.extra_data),
    )

# 요청 본문 파싱/형식 오류도 400 BAD_REQUEST로 통일
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=create_error_response(
            status.HTTP_400_BAD_REQUEST,
            ValidationError.message_default,
            ValidationError.error_code_default,
            {"errors": errors},
        ),
    )

def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
