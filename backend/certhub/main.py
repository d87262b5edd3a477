from contextlib import asynccontextmanager
from typing import Optional

import anyio.to_thread
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from certhub.config import Settings, settings as default_settings
from certhub.database import create_record_store
from certhub.database.base import RecordStore
from certhub.routers import admin, auth, certificate, drive
from certhub.services.auth_service import AuthService
from certhub.services.certificate_service import CertificateService
from certhub.services.drive import StorageGateway
from certhub.services.folder_routing import FolderRoutingService
from certhub.utils.exceptions import register_exception_handlers
from certhub.utils.logger import app_logger

API_PREFIX = "/api"


def create_app(
    settings: Optional[Settings] = None,
    record_store: Optional[RecordStore] = None,
    storage_gateway: Optional[StorageGateway] = None,
) -> FastAPI:
    """설정과 저장소/게이트웨이를 주입받아 앱 생성 (테스트에서는 메모리 저장소와 가짜 게이트웨이 사용)"""
    settings = settings or default_settings
    record_store = record_store or create_record_store(settings)
    storage_gateway = storage_gateway or StorageGateway.from_settings(settings)

    # 시작 시 저장소 연결 및 초기 계정 생성, 종료 시 연결 정리
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await record_store.connect()
        if settings.SEED_ON_STARTUP:
            await AuthService(record_store).seed_users_if_empty()
            if settings.USE_MEMORY_STORE:
                folder_routing = FolderRoutingService(record_store, storage_gateway, settings)
                await CertificateService(record_store, storage_gateway, folder_routing).seed_samples_if_empty()
        # Google OAuth 사전 토큰 발급 (실패해도 서버는 계속 실행)
        await anyio.to_thread.run_sync(storage_gateway.credential_store.warm_up)
        app_logger.info(f"서버 시작: store={type(record_store).__name__}, port={settings.PORT}")
        yield
        await record_store.close()
        app_logger.info("서버 종료")

    app = FastAPI(
        title="Certificate Tracking API",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.record_store = record_store
    app.state.storage_gateway = storage_gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/health", tags=["health"], summary="헬스 체크")
    async def health():
        """서버 상태와 저장소 연결 여부"""
        return {"ok": True, "store": await record_store.ping()}

    # 라우터 등록
    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(admin.router, prefix=API_PREFIX)
    app.include_router(certificate.router, prefix=API_PREFIX)
    app.include_router(drive.router, prefix=API_PREFIX)

    return app


app = create_app()
