import configparser
import io
from pathlib import Path

import structlog

from sillon.local.password import PasswordHasher

LOG = structlog.get_logger()

LOCAL_INI_FILENAME = "local.ini"


class ConfigWriter:
    """Renders the minimal CouchDB ini needed to boot a single node with one admin."""

    def __init__(self, hasher: PasswordHasher | None = None):
        self.hasher = hasher

    def render(
        self,
        *,
        port: int,
        admin_user: str,
        admin_pass: str,
        bind_address: str = "0.0.0.0",
        database_dir: Path | None = None,
    ) -> str:
        parser = configparser.ConfigParser(interpolation=None)
        # keep option names as written, CouchDB admin names are case sensitive
        parser.optionxform = str  # type: ignore[assignment,method-assign]

        couchdb: dict[str, str] = {"single_node": "true"}
        if database_dir is not None:
            couchdb["database_dir"] = str(database_dir)
            couchdb["view_index_dir"] = str(database_dir)
        parser["couchdb"] = couchdb
        parser["chttpd"] = {"port": str(port), "bind_address": bind_address}

        credential = self.hasher.hash(admin_pass).render() if self.hasher else admin_pass
        parser["admins"] = {admin_user: credential}

        buffer = io.StringIO()
        parser.write(buffer)
        return buffer.getvalue()

    def write(
        self,
        path: Path,
        *,
        port: int,
        admin_user: str,
        admin_pass: str,
        bind_address: str = "0.0.0.0",
        database_dir: Path | None = None,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            self.render(
                port=port,
                admin_user=admin_user,
                admin_pass=admin_pass,
                bind_address=bind_address,
                database_dir=database_dir,
            )
        )
        # the file may carry a plaintext password
        path.chmod(0o600)
        LOG.debug("Wrote CouchDB config", path=str(path), hashed=self.hasher is not None)
        return path
