from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from typing import Dict, List, Optional

from certhub.models.certificate import DocumentCategory
from certhub.schemas.certificate import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    CertificateForm,
    CertificateResponse,
)
from certhub.services.certificate_service import CertificateService, FileUpload
from certhub.utils.dependencies import get_certificate_service, require_admin
from certhub.utils.exceptions import InternalError
from certhub.utils.logger import certificate_logger

router = APIRouter(prefix="/certificates", tags=["certificates"])

# multipart form 값을 요청 스키마로 변환
def certificate_form(
    num_cert: Optional[str] = Form(None, alias="numCert"),
    serial: Optional[str] = Form(None),
    upload_date: Optional[str] = Form(None, alias="uploadDate"),
    result: Optional[str] = Form(None),
    company_id: Optional[str] = Form(None, alias="companyId"),
    assigned_usernames: Optional[List[str]] = Form(None, alias="assignedUsernames"),
    report_folder: Optional[str] = Form(None, alias="reportFolder"),
    format_folder: Optional[str] = Form(None, alias="formatFolder"),
    certificate_folder: Optional[str] = Form(None, alias="certificateFolder"),
) -> CertificateForm:
    return CertificateForm(
        num_cert=num_cert,
        serial=serial,
        upload_date=upload_date,
        result=result,
        company_id=company_id,
        assigned_usernames=assigned_usernames,
        report_folder=report_folder,
        format_folder=format_folder,
        certificate_folder=certificate_folder,
    )

# 첨부 파일 (report, format, certificate 각 최대 1개)
def certificate_files(
    report: Optional[UploadFile] = File(None),
    format_file: Optional[UploadFile] = File(None, alias="format"),
    certificate: Optional[UploadFile] = File(None),
) -> Dict[DocumentCategory, FileUpload]:
    received = {
        DocumentCategory.REPORT: report,
        DocumentCategory.FORMAT: format_file,
        DocumentCategory.CERTIFICATE: certificate,
    }
    return {
        category: FileUpload(filename=upload.filename, content_type=upload.content_type, stream=upload.file)
        for category, upload in received.items()
        # 빈 파일 입력(파일명 없음)은 미첨부로 취급
        if upload is not None and upload.filename
    }

@router.get(
    "",
    response_model=List[CertificateResponse],
    summary="전체 인증서 조회",
    description="등록된 모든 인증서를 numCert 오름차순으로 조회합니다."
)
async def list_certificates(service: CertificateService = Depends(get_certificate_service)):
    try:
        certificates = await service.list_certificates()
        certificate_logger.info(f"인증서 조회 완료: {len(certificates)}건")
        return certificates
    except HTTPException:
        raise
    except Exception as e:
        certificate_logger.error(f"인증서 조회 실패: {str(e)}")
        raise InternalError("인증서 조회 중 오류가 발생했습니다.")

@router.post(
    "",
    response_model=CertificateResponse,
    summary="인증서 등록",
    description="""
인증서를 등록하고 첨부 파일을 Google Drive에 업로드합니다.

- 필수: `numCert`, `serial`, `companyId`, `assignedUsernames` (여러 번 전달 또는 콤마 구분)
- 첨부: `report`, `format`, `certificate` (선택)
- 폴더 지정: `reportFolder`, `formatFolder`, `certificateFolder` (선택)
"""
)
async def create_certificate(
    form: CertificateForm = Depends(certificate_form),
    files: Dict[DocumentCategory, FileUpload] = Depends(certificate_files),
    service: CertificateService = Depends(get_certificate_service),
):
    try:
        return await service.create_certificate(form, files)
    except HTTPException:
        raise
    except Exception as e:
        certificate_logger.error(f"인증서 등록 실패: {str(e)}")
        raise InternalError("인증서 등록 중 오류가 발생했습니다.")

@router.put(
    "/{certificate_id}",
    response_model=CertificateResponse,
    summary="인증서 수정 (ADMIN)",
    description="전달된 필드와 파일만 반영합니다. 새 파일이 있는 분류의 링크만 교체됩니다."
)
async def update_certificate(
    certificate_id: str,
    form: CertificateForm = Depends(certificate_form),
    files: Dict[DocumentCategory, FileUpload] = Depends(certificate_files),
    _: str = Depends(require_admin),
    service: CertificateService = Depends(get_certificate_service),
):
    try:
        return await service.update_certificate(certificate_id, form, files)
    except HTTPException:
        raise
    except Exception as e:
        certificate_logger.error(f"인증서 수정 실패: id={certificate_id}, error={str(e)}")
        raise InternalError("인증서 수정 중 오류가 발생했습니다.")

@router.delete(
    "/bulk",
    response_model=BulkDeleteResponse,
    summary="인증서 일괄 삭제",
    description="(companyId, numCert, serial)이 모두 일치하는 인증서를 삭제하고 삭제 건수를 반환합니다."
)
async def bulk_delete_certificates(
    data: BulkDeleteRequest,
    service: CertificateService = Depends(get_certificate_service),
):
    try:
        deleted = await service.bulk_delete(data.items)
        return BulkDeleteResponse(ok=True, deleted=deleted)
    except HTTPException:
        raise
    except Exception as e:
        certificate_logger.error(f"인증서 일괄 삭제 실패: {str(e)}")
        raise InternalError("인증서 삭제 중 오류가 발생했습니다.")
