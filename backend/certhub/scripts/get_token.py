"""
Google Drive 업로드용 refresh_token 발급 스크립트

GOOGLE_OAUTH_CLIENT_ID / GOOGLE_OAUTH_CLIENT_SECRET을 .env에 넣고 실행한 뒤
출력된 URL에서 동의하고, 받은 코드를 입력하면 refresh_token을 출력합니다.
"""

from google_auth_oauthlib.flow import Flow

from certhub.config import settings
from certhub.services.credentials import SCOPES

# 웹 서버 없이 코드를 직접 붙여넣는 방식
REDIRECT_URI = "urn:ietf:wg:oauth:2.0:oob"

def build_flow() -> Flow:
    client_config = {
        "installed": {
            "client_id": settings.GOOGLE_OAUTH_CLIENT_ID,
            "client_secret": settings.GOOGLE_OAUTH_CLIENT_SECRET,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": settings.GOOGLE_TOKEN_URI,
            "redirect_uris": [REDIRECT_URI],
        }
    }
    return Flow.from_client_config(client_config, scopes=SCOPES, redirect_uri=REDIRECT_URI)

def main():
    if not settings.GOOGLE_OAUTH_CLIENT_ID or not settings.GOOGLE_OAUTH_CLIENT_SECRET:
        print("GOOGLE_OAUTH_CLIENT_ID / GOOGLE_OAUTH_CLIENT_SECRET 설정이 필요합니다.")
        raise SystemExit(1)

    flow = build_flow()
    # refresh_token을 받기 위해 offline + 동의 화면 강제
    auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")
    print("\n아래 링크에서 앱을 승인하세요:\n")
    print(auth_url)

    code = input("\n발급된 코드: ").strip()
    flow.fetch_token(code=code)

    print("\n.env에 다음 값을 저장하세요:")
    print(f"GOOGLE_OAUTH_REFRESH_TOKEN={flow.credentials.refresh_token}")

if __name__ == "__main__":
    main()
