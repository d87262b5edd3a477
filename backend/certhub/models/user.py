from enum import Enum

# 컬렉션 이름
USERS = "users"


class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


# 초기 계정 (비밀번호는 마이그레이션 전 평문 계정)
SEED_USERS = [
    {"username": "admin", "password": "admin123", "role": Role.ADMIN.value, "companyId": "FARES"},
    {"username": "surgas", "password": "1234", "role": Role.USER.value, "companyId": "SURGAS"},
    {"username": "surgas.compras", "password": "1234", "role": Role.USER.value, "companyId": "SURGAS"},
    {"username": "surgas.logistica", "password": "1234", "role": Role.USER.value, "companyId": "SURGAS"},
    {"username": "chilco", "password": "1234", "role": Role.USER.value, "companyId": "CHILCO"},
]
