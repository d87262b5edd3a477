from passlib.context import CryptContext

# 비밀번호 해싱에 사용할 bcrypt 설정
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt 해시 접두사 ($2a$, $2b$, $2y$)
HASHED_PREFIXES = ("$2a$", "$2b$", "$2y$")


class PasswordHasher:
    """단방향 해시/검증 기능 (서비스에 주입해서 사용)"""

    def __init__(self, context: CryptContext = pwd_context):
        self.context = context

    # 비밀번호 해싱
    def hash(self, secret: str) -> str:
        return self.context.hash(secret)

    # 평문 비밀번호와 해시된 비밀번호 검증
    def verify(self, secret: str, digest: str) -> bool:
        return self.context.verify(secret, digest)


def looks_hashed(stored: str) -> bool:
    return stored.startswith(HASHED_PREFIXES)


def verify_credential(hasher: PasswordHasher, secret: str, stored: str) -> bool:
    """
    저장된 비밀번호와 입력값 비교.

    해시 형식이면 hasher로 검증하고, 아니면 평문 비교(마이그레이션 전 계정).
    모든 계정이 해시로 전환되면 평문 분기를 제거할 것.
    """
    stored = stored or ""
    if looks_hashed(stored):
        return hasher.verify(secret, stored)
    return stored == secret
