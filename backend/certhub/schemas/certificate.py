from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional

from certhub.models.certificate import PLACEHOLDER_LINK

# 첨부 문서 링크 (업로드 전에는 "#")
class CertificateLinks(BaseModel):
    report_url: str = Field(PLACEHOLDER_LINK, description="보고서(Report) 링크")
    format_url: str = Field(PLACEHOLDER_LINK, description="양식(Format) 링크")
    certificate_url: str = Field(PLACEHOLDER_LINK, description="인증서(Certificate) 링크")

    class Config:
        alias_generator = to_camel
        populate_by_name = True

# 인증서 등록/수정 요청 (multipart form 값 그대로, 검증은 서비스에서 수행)
class CertificateForm(BaseModel):
    num_cert: Optional[str] = None
    serial: Optional[str] = None
    upload_date: Optional[str] = None
    result: Optional[str] = None
    company_id: Optional[str] = None
    assigned_usernames: Optional[List[str]] = None
    report_folder: Optional[str] = None
    format_folder: Optional[str] = None
    certificate_folder: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

# 인증서 응답용
class CertificateResponse(BaseModel):
    id: str
    num_cert: int
    serial: str
    upload_date: Optional[str] = None
    result: Optional[str] = None
    company_id: str
    assigned_usernames: List[str] = []
    links: CertificateLinks = Field(default_factory=CertificateLinks)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

# 일괄 삭제 대상 (companyId, numCert, serial 완전 일치)
class BulkDeleteItem(BaseModel):
    company_id: str
    num_cert: int
    serial: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class BulkDeleteRequest(BaseModel):
    items: List[BulkDeleteItem] = []

class BulkDeleteResponse(BaseModel):
    ok: bool = True
    deleted: int
