# Certificate models
from .certificate import (
    CERTIFICATES,
    PLACEHOLDER_LINK,
    CertificateResult,
    DocumentCategory,
    default_links,
    normalize_links,
    format_timestamp,
    sample_certificates,
)

# User models
from .user import USERS, Role, SEED_USERS

# Config models
from .folder_config import CONFIG, FOLDER_CONFIG_KEY, DRIVE_FOLDER_MIME_TYPE

__all__ = [
    # Certificate
    "CERTIFICATES", "PLACEHOLDER_LINK", "CertificateResult", "DocumentCategory",
    "default_links", "normalize_links", "format_timestamp", "sample_certificates",
    # User
    "USERS", "Role", "SEED_USERS",
    # Config
    "CONFIG", "FOLDER_CONFIG_KEY", "DRIVE_FOLDER_MIME_TYPE",
]
