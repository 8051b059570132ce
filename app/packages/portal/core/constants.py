"""常量定义：后端名称、默认 MIME 类型与提示文案。"""

STORAGE_BACKEND_MEMORY = "memory"
STORAGE_BACKEND_DATABASE = "database"

SESSION_BACKEND_REDIS = "redis"

DEFAULT_MIME_TYPE = "application/octet-stream"

MSG_INVALID_CREDENTIALS = "Invalid credentials"
MSG_UNAUTHORIZED = "Unauthorized"
MSG_INVALID_INPUT = "Invalid input"
MSG_INTERNAL_ERROR = "Internal server error"
