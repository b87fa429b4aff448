import json
import os
from pathlib import Path
from typing import Literal

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from sillon.config import settings
from sillon.constants import COUCHDB_DEFAULT_PORT
from sillon.exceptions import ConnectionNotConfiguredError, UnknownConnectionError

LOG = structlog.get_logger()

LOCAL_URL = f"http://localhost:{COUCHDB_DEFAULT_PORT}"


class SillonConfig(BaseModel):
    default_connection: str | None = None
    connections: dict[str, str] = Field(default_factory=dict)
    current_db: str | None = None
    editor: str = Field(default_factory=lambda: os.environ.get("EDITOR", "nano"))
    output: Literal["auto", "json", "table"] = "auto"


class ConnectionInfo(BaseModel):
    url: str
    name: str | None = None
    is_default: bool = False


class ConfigManager:
    """Named connections, the default connection and the current database.

    ``default_connection`` holds either the name of a saved connection or a raw URL.
    """

    def __init__(self, path: Path | None = None):
        self.path = path or settings.config_file
        self._config: SillonConfig | None = None

    def load(self) -> SillonConfig:
        if self._config is not None:
            return self._config
        try:
            self._config = SillonConfig.model_validate_json(self.path.read_bytes())
        except FileNotFoundError:
            self._config = SillonConfig()
        except (OSError, ValidationError) as e:
            LOG.warning("Ignoring unreadable config file", path=str(self.path), error=str(e))
            self._config = SillonConfig()
        return self._config

    def save(self, config: SillonConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(config.model_dump(exclude_none=True), indent=2))
        # connection URLs carry credentials
        self.path.chmod(0o600)
        self._config = config

    def save_connection(self, name: str, url: str) -> None:
        config = self.load()
        config.connections[name] = url
        self.save(config)

    def remove_connection(self, name: str) -> None:
        config = self.load()
        if name not in config.connections:
            raise UnknownConnectionError(name)
        del config.connections[name]
        if config.default_connection == name:
            config.default_connection = None
        self.save(config)

    def get_connection(self, name: str) -> ConnectionInfo | None:
        config = self.load()
        url = config.connections.get(name)
        if url is None:
            return None
        return ConnectionInfo(url=url, name=name, is_default=config.default_connection == name)

    def list_connections(self) -> list[ConnectionInfo]:
        config = self.load()
        return [
            ConnectionInfo(url=url, name=name, is_default=config.default_connection == name)
            for name, url in config.connections.items()
        ]

    def set_default(self, name: str) -> None:
        config = self.load()
        if name not in config.connections:
            raise UnknownConnectionError(name)
        config.default_connection = name
        self.save(config)

    def set_default_connection(self, url: str) -> None:
        config = self.load()
        config.default_connection = url
        self.save(config)

    def get_current_db(self) -> str | None:
        return self.load().current_db

    def set_current_db(self, name: str) -> None:
        config = self.load()
        config.current_db = name
        self.save(config)

    def get_active_connection(self, *, probe: bool = True) -> ConnectionInfo:
        """Resolve the connection to use: the default, then COUCHDB_URL, then a local server."""
        config = self.load()
        default = config.default_connection
        if default:
            if default in config.connections:
                return ConnectionInfo(url=config.connections[default], name=default, is_default=True)
            return ConnectionInfo(url=default, is_default=True)

        env_url = os.environ.get("COUCHDB_URL") or settings.COUCHDB_URL
        if env_url:
            return ConnectionInfo(url=env_url)

        if probe:
            try:
                if httpx.get(f"{LOCAL_URL}/", timeout=2.0).is_success:
                    return ConnectionInfo(url=LOCAL_URL)
            except httpx.TransportError:
                LOG.debug("No CouchDB answering locally", url=LOCAL_URL)

        raise ConnectionNotConfiguredError()
