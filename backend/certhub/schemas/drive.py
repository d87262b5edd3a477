from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional

# 문서 분류별 Drive 업로드 폴더
class FolderRouting(BaseModel):
    report: str = ""
    format: str = ""
    certificate: str = ""

# 부분 수정 요청: 문자열 값만 반영
class FolderRoutingUpdate(BaseModel):
    report: Any = None
    format: Any = None
    certificate: Any = None

# Drive 파일/폴더 메타데이터
class DriveFileInfo(BaseModel):
    id: str
    name: Optional[str] = None
    mime_type: Optional[str] = None
    parents: Optional[List[str]] = None
    drive_id: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
