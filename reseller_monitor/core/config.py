import os
from dotenv import load_dotenv

# Cargar variables de entorno
load_dotenv()

# Directorio base y datos
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = os.path.join(BASE_DIR, os.getenv("DATA_DIR", "data"))

APP_ENV = os.getenv("APP_ENV", "development")


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    try:
        return int(value) if value else default
    except ValueError:
        return default


# Polling
ROUTER_POLL_TIMEOUT = _int_env("ROUTER_POLL_TIMEOUT", 15)
POLL_MAX_WORKERS = _int_env("POLL_MAX_WORKERS", 10)
# Los routers suelen usar certificados autofirmados
ROUTER_VERIFY_SSL = os.getenv("ROUTER_VERIFY_SSL", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
