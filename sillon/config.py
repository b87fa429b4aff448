from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from sillon import constants


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    LOG_LEVEL: str = "WARNING"
    JSON_LOGGING: bool = False

    SILLON_DATA_DIR: Path = constants.DEFAULT_DATA_DIR
    SILLON_CONFIG_DIR: Path = constants.DEFAULT_CONFIG_DIR
    SILLON_INSTANCE: str = constants.DEFAULT_INSTANCE
    # force a runtime kind instead of probing PATH, e.g. "container-daemon"
    SILLON_RUNTIME: str | None = None

    COUCHDB_URL: str | None = None
    COUCHDB_IMAGE: str = constants.COUCHDB_DEFAULT_IMAGE
    COUCHDB_VERSION: str = constants.COUCHDB_DEFAULT_VERSION
    COUCHDB_PORT: int = constants.COUCHDB_DEFAULT_PORT
    COUCHDB_ADMIN_USER: str = constants.COUCHDB_DEFAULT_ADMIN_USER
    COUCHDB_ADMIN_PASSWORD: str = constants.COUCHDB_DEFAULT_ADMIN_PASSWORD

    HEALTH_TIMEOUT_SECONDS: int = constants.HEALTH_DEFAULT_TIMEOUT_SECONDS
    HTTP_TIMEOUT_SECONDS: float = 30.0

    @property
    def instances_dir(self) -> Path:
        return self.SILLON_DATA_DIR / "instances"

    def couchdb_data_dir(self, version: str) -> Path:
        """
        :return: the per-version directory holding the server's data and generated config
        """
        return self.SILLON_DATA_DIR / "couchdb" / version

    @property
    def config_file(self) -> Path:
        return self.SILLON_CONFIG_DIR / "config.json"


settings = Settings()
