# Certificate schemas
from .certificate import (
    CertificateLinks,
    CertificateForm,
    CertificateResponse,
    BulkDeleteItem,
    BulkDeleteRequest,
    BulkDeleteResponse,
)

# User schemas
from .user import (
    LoginRequest,
    LoginResponse,
    UserResponse,
    PasswordChangeRequest,
    LegacyPasswordChangeRequest,
    OkResponse,
)

# Drive schemas
from .drive import FolderRouting, FolderRoutingUpdate, DriveFileInfo

__all__ = [
    # Certificate
    "CertificateLinks", "CertificateForm", "CertificateResponse",
    "BulkDeleteItem", "BulkDeleteRequest", "BulkDeleteResponse",
    # User
    "LoginRequest", "LoginResponse", "UserResponse",
    "PasswordChangeRequest", "LegacyPasswordChangeRequest", "OkResponse",
    # Drive
    "FolderRouting", "FolderRoutingUpdate", "DriveFileInfo",
]
