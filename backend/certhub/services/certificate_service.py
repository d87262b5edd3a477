"""
인증서 등록/수정/삭제/조회 비즈니스 로직

업로드는 모두 성공해야 저장 단계로 넘어갑니다. 업로드 도중 실패하면 저장하지 않고
중단하지만, 이미 Drive에 올라간 파일은 삭제하지 않습니다.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, BinaryIO, Callable, Dict, List, Optional

from bson import ObjectId

from certhub.database.base import ASCENDING, RecordStore
from certhub.models.certificate import (
    DEFAULT_EXTENSION,
    DEFAULT_MIME_TYPE,
    PLACEHOLDER_LINK,
    CertificateResult,
    DocumentCategory,
    default_links,
    format_timestamp,
    normalize_links,
    parse_timestamp,
    sample_certificates,
    utc_now,
)
from certhub.schemas.certificate import BulkDeleteItem, CertificateForm, CertificateResponse
from certhub.services.drive import StorageGateway
from certhub.services.folder_routing import FolderRoutingService
from certhub.utils.exceptions import NotFoundError, ValidationError
from certhub.utils.logger import certificate_logger

ASSIGNMENT_ERROR = "배정된 사용자는 모두 존재해야 하며 선택한 회사에 소속되어야 합니다."


@dataclass
class FileUpload:
    """요청으로 받은 첨부 파일"""
    filename: Optional[str]
    content_type: Optional[str]
    stream: BinaryIO


def parse_usernames(values: Optional[List[str]]) -> Optional[List[str]]:
    """배열 또는 콤마 구분 문자열을 사용자 목록으로 변환 (미전달 시 None)"""
    if values is None:
        return None
    if isinstance(values, str):
        values = [values]
    usernames = []
    for value in values:
        usernames.extend(part.strip() for part in str(value).split(",") if part.strip())
    return usernames


def parse_num_cert(value: Any) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("numCert는 정수여야 합니다.")


def parse_upload_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        raise ValidationError("uploadDate 형식이 올바르지 않습니다.")


def serialize_certificate(document: Dict[str, Any]) -> CertificateResponse:
    """저장 문서를 응답 형태로 변환 (id 문자열화, 날짜 정규화, 링크 기본값)"""
    return CertificateResponse(
        id=str(document.get("_id") or document.get("id")),
        num_cert=document["numCert"],
        serial=document["serial"],
        upload_date=format_timestamp(document.get("uploadDate")),
        result=document.get("result"),
        company_id=document["companyId"],
        assigned_usernames=document.get("assignedUsernames") or [],
        links=normalize_links(document.get("links")),
    )


class CertificateService:
    def __init__(
        self,
        store: RecordStore,
        gateway: StorageGateway,
        folder_routing: FolderRoutingService,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.gateway = gateway
        self.folder_routing = folder_routing
        self.clock = clock

    async def list_certificates(self) -> List[CertificateResponse]:
        documents = await self.store.certificates.find({}, sort=[("numCert", ASCENDING)])
        return [serialize_certificate(document) for document in documents]

    async def validate_assignment(self, usernames: List[str], company_id: str) -> None:
        """배정 사용자가 모두 존재하고 같은 회사 소속인지 확인"""
        users = await self.store.users.find({"username": {"$in": usernames}})
        if len(users) != len(usernames) or any(user.get("companyId") != company_id for user in users):
            certificate_logger.warning(f"배정 사용자 검증 실패: company={company_id}, users={usernames}")
            raise ValidationError(ASSIGNMENT_ERROR)

    async def _upload_files(
        self,
        files: Dict[DocumentCategory, FileUpload],
        folder_overrides: Dict[str, Optional[str]],
        company_id: str,
        num_cert: int,
        serial: str,
        usernames: List[str],
    ) -> Dict[DocumentCategory, str]:
        """분류 순서대로 업로드하고 분류별 링크를 반환 (첫 실패에서 중단)"""
        if not files:
            return {}

        folders = await self.folder_routing.resolve(folder_overrides)
        metadata = {"users": ",".join(usernames), "numCert": str(num_cert), "serial": str(serial)}
        stamp = int(self.clock().timestamp() * 1000)

        uploaded = {}
        for category in DocumentCategory:
            upload = files.get(category)
            if upload is None:
                continue
            extension = os.path.splitext(upload.filename or "")[1] or DEFAULT_EXTENSION
            result = await self.gateway.upload(
                upload.stream,
                file_name=f"{company_id}_{num_cert}_{serial}_{stamp}{extension}",
                mime_type=upload.content_type or DEFAULT_MIME_TYPE,
                metadata=metadata,
                folder_id=folders[category],
            )
            uploaded[category] = result.get("viewUrl")
        return uploaded

    @staticmethod
    def _folder_overrides(form: CertificateForm) -> Dict[str, Optional[str]]:
        return {
            DocumentCategory.REPORT.value: form.report_folder,
            DocumentCategory.FORMAT.value: form.format_folder,
            DocumentCategory.CERTIFICATE.value: form.certificate_folder,
        }

    async def create_certificate(
        self,
        form: CertificateForm,
        files: Optional[Dict[DocumentCategory, FileUpload]] = None,
    ) -> CertificateResponse:
        usernames = parse_usernames(form.assigned_usernames) or []
        if not form.num_cert or not form.serial or not form.company_id or not usernames:
            raise ValidationError("필수 항목: numCert, serial, companyId, assignedUsernames")

        num_cert = parse_num_cert(form.num_cert)
        upload_date = parse_upload_date(form.upload_date) or self.clock()
        await self.validate_assignment(usernames, form.company_id)

        uploaded = await self._upload_files(
            files or {},
            self._folder_overrides(form),
            form.company_id,
            num_cert,
            form.serial,
            usernames,
        )
        links = default_links()
        for category, link in uploaded.items():
            links[category.link_field] = link or PLACEHOLDER_LINK

        document = {
            "numCert": num_cert,
            "serial": form.serial,
            "uploadDate": upload_date,
            "result": form.result or CertificateResult.COMPLIANT.value,
            "companyId": form.company_id,
            "assignedUsernames": usernames,
            "links": links,
        }
        inserted_id = await self.store.certificates.insert_one(document)
        document["_id"] = inserted_id

        certificate_logger.info(
            f"인증서 등록 완료: id={inserted_id}, company={form.company_id}, numCert={num_cert}, "
            f"files={[category.value for category in uploaded]}"
        )
        return serialize_certificate(document)

    async def update_certificate(
        self,
        certificate_id: str,
        form: CertificateForm,
        files: Optional[Dict[DocumentCategory, FileUpload]] = None,
    ) -> CertificateResponse:
        if not ObjectId.is_valid(certificate_id):
            raise ValidationError("ID가 올바르지 않습니다.")
        object_id = ObjectId(certificate_id)

        existing = await self.store.certificates.find_one({"_id": object_id})
        if not existing:
            raise NotFoundError("인증서를 찾을 수 없습니다.")

        # 전달된 필드만 반영
        updates: Dict[str, Any] = {}
        if form.num_cert is not None:
            updates["numCert"] = parse_num_cert(form.num_cert)
        if form.serial is not None:
            if not form.serial:
                raise ValidationError("serial은 비워둘 수 없습니다.")
            updates["serial"] = str(form.serial)
        if form.result is not None:
            updates["result"] = form.result
        if form.upload_date is not None:
            updates["uploadDate"] = parse_upload_date(form.upload_date) or existing.get("uploadDate")
        if form.company_id is not None:
            if not form.company_id:
                raise ValidationError("companyId는 비워둘 수 없습니다.")
            updates["companyId"] = form.company_id
        usernames = parse_usernames(form.assigned_usernames)
        if usernames is not None:
            if not usernames:
                raise ValidationError("assignedUsernames는 비워둘 수 없습니다.")
            updates["assignedUsernames"] = usernames

        effective_company = updates.get("companyId", existing.get("companyId"))
        effective_users = updates.get("assignedUsernames", existing.get("assignedUsernames") or [])
        if "companyId" in updates or "assignedUsernames" in updates:
            await self.validate_assignment(effective_users, effective_company)

        uploaded = await self._upload_files(
            files or {},
            self._folder_overrides(form),
            effective_company,
            updates.get("numCert", existing.get("numCert")),
            updates.get("serial", existing.get("serial")),
            effective_users,
        )
        links = normalize_links(existing.get("links"))
        for category, link in uploaded.items():
            links[category.link_field] = link or links[category.link_field]
        updates["links"] = links

        await self.store.certificates.update_one({"_id": object_id}, updates)
        updated = await self.store.certificates.find_one({"_id": object_id})

        certificate_logger.info(
            f"인증서 수정 완료: id={certificate_id}, fields={sorted(updates)}, "
            f"files={[category.value for category in uploaded]}"
        )
        return serialize_certificate(updated)

    async def bulk_delete(self, items: List[BulkDeleteItem]) -> int:
        """(companyId, numCert, serial)이 일치하는 인증서를 한 번에 삭제"""
        if not items:
            raise ValidationError("삭제할 인증서 목록이 비어 있습니다.")

        deleted = await self.store.certificates.delete_many({
            "$or": [
                {"companyId": item.company_id, "numCert": int(item.num_cert), "serial": item.serial}
                for item in items
            ]
        })
        certificate_logger.info(f"인증서 일괄 삭제 완료: 요청 {len(items)}건, 삭제 {deleted}건")
        return deleted

    async def seed_samples_if_empty(self) -> int:
        """인증서 컬렉션이 비어 있을 때만 샘플 인증서 생성 (메모리 저장소 모드)"""
        if await self.store.certificates.count():
            return 0
        inserted = await self.store.certificates.insert_many(sample_certificates(self.clock()))
        certificate_logger.info(f"샘플 인증서 {inserted}건 생성")
        return inserted
