import os
from dotenv import load_dotenv

# Carrega o .env da raiz do projeto
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./orderdesk.db")
DATABASE_ECHO = _env_flag("DATABASE_ECHO", "0")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}

# Tabela unica compartilhada pelas tres entidades
RECORDS_TABLE = os.getenv("TABLE_NAME", "records").strip() or "records"

# Identity claims (issued upstream)
ADMIN_GROUP = os.getenv("ADMIN_GROUP", "admin").strip() or "admin"
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_SUPER_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "60"))

# Listing / scans
LIST_DEFAULT_LIMIT = int(os.getenv("LIST_DEFAULT_LIMIT", "50"))
LIST_MAX_LIMIT = int(os.getenv("LIST_MAX_LIMIT", "100"))
PRODUCT_SCAN_PAGE_SIZE = int(os.getenv("PRODUCT_SCAN_PAGE_SIZE", "100"))

# CORS
_cors_env = os.getenv("ORIGENS_CORS", os.getenv("CORS_ORIGINS", ""))
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
