import os

from dotenv import load_dotenv

from fleetlog.errors import ConfigError

load_dotenv()

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DB_PATH = os.getenv("FLEET_DB_PATH", os.path.join(ROOT_DIR, "db.sqlite3"))
REPORTS_DIR = os.getenv("FLEET_REPORTS_DIR", os.path.join(ROOT_DIR, "reports"))
CORS_ORIGIN = os.getenv("FLEET_CORS_ORIGIN", "")
HTTP_TIMEOUT = float(os.getenv("FLEET_HTTP_TIMEOUT", "10"))
REPORT_BASE_NAME = "Relatorio_Frota"


def env_flag(name, default=True):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def api_base_url():
    url = (os.getenv("FLEET_API_URL") or "").strip()
    if not url:
        raise ConfigError("FLEET_API_URL is not set; point it at the record store, e.g. in a .env file.")
    return url.rstrip("/")


def dashboard_uses_filters():
    return env_flag("FLEET_DASHBOARD_USES_FILTERS", True)
