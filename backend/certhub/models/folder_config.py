# 단일 설정 문서 {key: "driveFolders", value: {report, format, certificate}}
CONFIG = "config"
FOLDER_CONFIG_KEY = "driveFolders"

# Drive 폴더 mimeType
DRIVE_FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
