import os
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()

class Settings(BaseSettings):
    # MongoDB 설정 (인증서/사용자/설정 문서 저장)
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB_NAME: str = os.getenv("MONGO_DB_NAME", "fares")
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "8000"))

    # 메모리 저장소 모드 (로컬 개발/테스트용)
    USE_MEMORY_STORE: bool = os.getenv("USE_MEMORY_STORE", "0") == "1"
    # 사용자 컬렉션이 비어 있으면 기본 계정 생성
    SEED_ON_STARTUP: bool = os.getenv("SEED_ON_STARTUP", "1") == "1"

    # Google OAuth 설정 (refresh_token 기반)
    GOOGLE_OAUTH_CLIENT_ID: str = os.getenv("GOOGLE_OAUTH_CLIENT_ID", "")
    GOOGLE_OAUTH_CLIENT_SECRET: str = os.getenv("GOOGLE_OAUTH_CLIENT_SECRET", "")
    GOOGLE_OAUTH_REFRESH_TOKEN: str = os.getenv("GOOGLE_OAUTH_REFRESH_TOKEN", "")
    GOOGLE_TOKEN_URI: str = os.getenv("GOOGLE_TOKEN_URI", "https://oauth2.googleapis.com/token")

    # Google Drive 업로드 폴더
    DRIVE_PARENT_FOLDER_ID: str = os.getenv("DRIVE_PARENT_FOLDER_ID", "")
    DRIVE_FOLDER_REPORT: str = os.getenv("DRIVE_FOLDER_REPORT", "")
    DRIVE_FOLDER_FORMAT: str = os.getenv("DRIVE_FOLDER_FORMAT", "")
    DRIVE_FOLDER_CERTIFICATE: str = os.getenv("DRIVE_FOLDER_CERTIFICATE", "")

    # 업로드 파일 공유 권한
    DRIVE_SHARE_TYPE: str = os.getenv("DRIVE_SHARE_TYPE", "anyone")
    DRIVE_SHARE_ROLE: str = os.getenv("DRIVE_SHARE_ROLE", "reader")
    DRIVE_DOMAIN: str = os.getenv("DRIVE_DOMAIN", "")

    # 서버 설정
    PORT: int = int(os.getenv("PORT", "4000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS 설정
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def cors_origins(self) -> list:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def default_drive_folders(self) -> dict:
        """설정 문서가 없을 때 사용하는 카테고리별 기본 폴더"""
        return {
            "report": self.DRIVE_FOLDER_REPORT,
            "format": self.DRIVE_FOLDER_FORMAT,
            "certificate": self.DRIVE_FOLDER_CERTIFICATE,
        }

    @property
    def share_permission(self) -> dict:
        permission = {"type": self.DRIVE_SHARE_TYPE, "role": self.DRIVE_SHARE_ROLE}
        if self.DRIVE_SHARE_TYPE == "domain" and self.DRIVE_DOMAIN:
            permission["domain"] = self.DRIVE_DOMAIN
        return permission

settings = Settings()
