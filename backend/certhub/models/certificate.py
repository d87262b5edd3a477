from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

# 컬렉션 이름
CERTIFICATES = "certificates"

# 업로드되지 않은 문서의 링크 자리표시자
PLACEHOLDER_LINK = "#"

DEFAULT_MIME_TYPE = "application/pdf"
DEFAULT_EXTENSION = ".pdf"


class CertificateResult(str, Enum):
    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"


class DocumentCategory(str, Enum):
    """인증서에 첨부되는 세 가지 문서 분류"""
    REPORT = "report"
    FORMAT = "format"
    CERTIFICATE = "certificate"

    @property
    def link_field(self) -> str:
        return f"{self.value}Url"


def default_links() -> Dict[str, str]:
    return {category.link_field: PLACEHOLDER_LINK for category in DocumentCategory}


def normalize_links(links: Optional[Dict[str, Any]]) -> Dict[str, str]:
    normalized = default_links()
    for field, value in (links or {}).items():
        if field in normalized and value:
            normalized[field] = value
    return normalized


def format_timestamp(value: Any) -> Optional[str]:
    """uploadDate를 밀리초 단위 UTC ISO-8601 문자열(`...Z`)로 변환"""
    if value is None:
        return None
    if isinstance(value, str):
        value = parse_timestamp(value)
    if value.tzinfo is None:
        # MongoDB는 naive UTC datetime을 돌려줌
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def sample_certificates(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """초기 샘플 인증서 (seed 스크립트, 메모리 저장소 모드)"""
    now = now or utc_now()
    return [
        {
            "numCert": 1001, "serial": "A1B2C3", "uploadDate": now,
            "result": CertificateResult.COMPLIANT.value, "companyId": "SURGAS",
            "assignedUsernames": ["surgas", "surgas.compras"], "links": default_links(),
        },
        {
            "numCert": 1002, "serial": "Z9Y8X7", "uploadDate": now - timedelta(days=2),
            "result": CertificateResult.NON_COMPLIANT.value, "companyId": "SURGAS",
            "assignedUsernames": ["surgas.logistica"], "links": default_links(),
        },
        {
            "numCert": 1003, "serial": "QW12ER", "uploadDate": now - timedelta(days=4),
            "result": CertificateResult.COMPLIANT.value, "companyId": "CHILCO",
            "assignedUsernames": ["chilco"], "links": default_links(),
        },
    ]
