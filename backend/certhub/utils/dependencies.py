from typing import Optional

from fastapi import Depends, Header, Request

from certhub.database import get_record_store
from certhub.database.base import RecordStore
from certhub.models.user import Role
from certhub.services.auth_service import AuthService
from certhub.services.certificate_service import CertificateService
from certhub.services.drive import StorageGateway
from certhub.services.folder_routing import FolderRoutingService
from certhub.utils.exceptions import AuthorizationError
from certhub.utils.logger import auth_logger

# ADMIN 전용 경로 확인 (X-Role 헤더, 서명 없는 신뢰 헤더)
def require_admin(x_role: Optional[str] = Header(None, alias="X-Role")) -> str:
    if (x_role or "").upper() != Role.ADMIN.value:
        auth_logger.warning(f"ADMIN 전용 경로 접근 거부: X-Role={x_role}")
        raise AuthorizationError()
    return Role.ADMIN.value

def get_storage_gateway(request: Request) -> StorageGateway:
    return request.app.state.storage_gateway

def get_auth_service(store: RecordStore = Depends(get_record_store)) -> AuthService:
    return AuthService(store)

def get_folder_routing_service(
    request: Request,
    store: RecordStore = Depends(get_record_store),
    gateway: StorageGateway = Depends(get_storage_gateway),
) -> FolderRoutingService:
    return FolderRoutingService(store, gateway, request.app.state.settings)

def get_certificate_service(
    store: RecordStore = Depends(get_record_store),
    gateway: StorageGateway = Depends(get_storage_gateway),
    folder_routing: FolderRoutingService = Depends(get_folder_routing_service),
) -> CertificateService:
    return CertificateService(store, gateway, folder_routing)
