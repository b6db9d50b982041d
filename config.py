import tomllib
import shutil
import os
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

CONFIG_DIR = Path(os.getenv("FLIPDECK_HOME", Path.home() / ".flipdeck"))
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def _as_bool(value: Any) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def load_config() -> Dict[str, Any]:
    """Load config from ~/.flipdeck/config.toml, copy example if missing, apply .env overrides."""
    load_dotenv()
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        if PROJECT_CONFIG_EXAMPLE.exists():
            shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
        else:
            CONFIG_PATH.write_text("", encoding="utf-8")
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    server_cfg = config.get("server", {})
    config["server"] = {
        "host": os.getenv("FLIPDECK_HOST", server_cfg.get("host", DEFAULT_HOST)),
        "port": int(os.getenv("FLIPDECK_PORT", server_cfg.get("port", DEFAULT_PORT))),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
        "json": _as_bool(os.getenv("LOG_JSON", logging_cfg.get("json", False))),
    }
    study_cfg = config.get("study", {})
    config["study"] = {
        "due_limit": max(0, int(os.getenv("FLIPDECK_DUE_LIMIT", study_cfg.get("due_limit", 0)))),
    }
    return config


def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('server', 'port')."""
    config = load_config()
    return config.get(section, {}).get(key, default)
