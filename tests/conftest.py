from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import config
from db import database


def _write_test_config(config_path: Path) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[server]",
                "host = \"127.0.0.1\"",
                "port = 8000",
                "",
                "[logging]",
                "level = \"WARNING\"",
                "",
                "[study]",
                "due_limit = 0",
            ]
        ),
        encoding="utf-8",
    )


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    config_dir = tmp_path / ".flipdeck"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    _write_test_config(config_path)

    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "flipdeck.db")
    for name in ("FLIPDECK_HOST", "FLIPDECK_PORT", "LOG_LEVEL", "LOG_JSON", "FLIPDECK_DUE_LIMIT"):
        monkeypatch.delenv(name, raising=False)
    return config_dir


@pytest.fixture
def conn(config_dir):
    database.init_db()
    with database.get_conn() as conn:
        yield conn


@pytest.fixture
def client(config_dir):
    from main import app

    database.init_db()
    return TestClient(app)
