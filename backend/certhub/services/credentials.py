"""
Google OAuth 자격 증명 저장소

장기 refresh_token을 보관하고 필요할 때 단기 access_token으로 교환합니다.
Drive 호출은 워커 스레드에서 실행되므로 갱신은 락으로 직렬화합니다.
"""

import threading
from typing import Optional

import google.auth.transport.requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials

from certhub.config import Settings
from certhub.utils.logger import drive_logger

# 업로드 권한
SCOPES = ["https://www.googleapis.com/auth/drive"]


class CredentialStore:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        token_uri: str,
        scopes: Optional[list] = None,
    ):
        self.credentials = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=token_uri,
            client_id=client_id,
            client_secret=client_secret,
            scopes=scopes or SCOPES,
        )
        # 토큰 갱신과 Drive 호출이 함께 사용 (공유 httplib2 클라이언트는 스레드 안전하지 않음)
        self.lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialStore":
        return cls(
            client_id=settings.GOOGLE_OAUTH_CLIENT_ID,
            client_secret=settings.GOOGLE_OAUTH_CLIENT_SECRET,
            refresh_token=settings.GOOGLE_OAUTH_REFRESH_TOKEN,
            token_uri=settings.GOOGLE_TOKEN_URI,
        )

    def _refresh(self) -> None:
        self.credentials.refresh(google.auth.transport.requests.Request())

    def get_access_token(self) -> str:
        """캐시된 토큰이 유효하면 그대로, 아니면 갱신 후 반환"""
        with self.lock:
            if not self.credentials.valid:
                self._refresh()
            return self.credentials.token

    def force_refresh(self) -> str:
        """캐시 상태와 무관하게 access_token을 다시 발급"""
        with self.lock:
            self._refresh()
            drive_logger.info("Google OAuth access_token 강제 갱신 완료")
            return self.credentials.token

    def warm_up(self) -> bool:
        """서버 시작 시 첫 요청 실패를 피하기 위한 사전 토큰 발급"""
        try:
            self.get_access_token()
            drive_logger.info("[Google OAuth] warm-up OK")
            return True
        except GoogleAuthError as e:
            drive_logger.error(f"[Google OAuth] warm-up 실패 (계속 진행): {str(e)}")
            return False
