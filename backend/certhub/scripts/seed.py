import asyncio

from certhub.config import settings
from certhub.database import create_record_store
from certhub.database.base import RecordStore
from certhub.models.certificate import sample_certificates
from certhub.models.user import SEED_USERS
from certhub.utils.logger import app_logger

# 사용자 upsert (username 기준, 여러 번 실행해도 안전)
async def upsert_users(store: RecordStore):
    for user in SEED_USERS:
        await store.users.update_one({"username": user["username"]}, dict(user), upsert=True)
    print(f"초기 사용자 {len(SEED_USERS)}명 반영 완료")

# 샘플 인증서 upsert ((companyId, numCert) 기준)
async def upsert_certificates(store: RecordStore):
    certificates = sample_certificates()
    for certificate in certificates:
        await store.certificates.update_one(
            {"companyId": certificate["companyId"], "numCert": certificate["numCert"]},
            certificate,
            upsert=True,
        )
    print(f"샘플 인증서 {len(certificates)}건 반영 완료")

async def seed(store: RecordStore):
    # connect 시 인덱스도 함께 생성
    await store.connect()
    try:
        await upsert_users(store)
        await upsert_certificates(store)
    finally:
        await store.close()

def main():
    store = create_record_store(settings)
    try:
        asyncio.run(seed(store))
    except Exception as e:
        app_logger.error(f"seed 실패: {str(e)}")
        raise SystemExit(1)
    print("seed 완료")

if __name__ == "__main__":
    main()
