from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

_ROOT_DIR = Path(__file__).resolve().parents[2]

def _require_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise RuntimeError(f"Environment variable {key} is required but unset.")
    return value

def _resolve_path(key: str, default: str) -> Path:
    path = Path(os.getenv(key) or default)
    if not path.is_absolute():
        path = _ROOT_DIR / path
    return path

GRAPH_PATH = _resolve_path("GRAPH_PATH", "data/drive.graphml")
CONFIGS_DIR = _resolve_path("CONFIGS_DIR", "configs")
GRAPH_PLACE_NAME = os.getenv("GRAPH_PLACE_NAME", "San Luis Obispo County, California, USA")
ROUTING_PROVIDER = os.getenv("ROUTING_PROVIDER", "graph").lower()
MAPBOX_BASE_URL = os.getenv("MAPBOX_BASE_URL", "https://api.mapbox.com")
ROUTING_TIMEOUT = float(os.getenv("ROUTING_TIMEOUT", "10"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

def mapbox_access_token() -> str:
    return _require_env("MAPBOX_ACCESS_TOKEN")

def ensure_directories() -> None:
    for path in (GRAPH_PATH.parent, CONFIGS_DIR):
        path.mkdir(parents=True, exist_ok=True)
