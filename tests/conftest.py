from collections.abc import Iterator
from pathlib import Path

import pytest

import sillon.cli.commands as cli_commands
from sillon.config import settings
from sillon.log import setup_logger


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep every test away from the real ~/.config and ~/.local/share directories."""
    monkeypatch.setattr(settings, "SILLON_DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(settings, "SILLON_CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr(settings, "COUCHDB_URL", None)
    monkeypatch.setattr(settings, "SILLON_RUNTIME", None)
    monkeypatch.delenv("COUCHDB_URL", raising=False)


@pytest.fixture(autouse=True)
def fresh_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Every test starts with CLI logging unconfigured and ends with the default setup restored."""
    monkeypatch.setattr(cli_commands, "_cli_logging_configured", False)
    yield
    setup_logger()
