from pathlib import Path

DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "sillon"
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "sillon"
DEFAULT_INSTANCE = "default"

COUCHDB_DEFAULT_VERSION = "3.3.3"
COUCHDB_DEFAULT_PORT = 5984
COUCHDB_CONTAINER_PORT = 5984
COUCHDB_DEFAULT_IMAGE = "docker.io/apache/couchdb"
COUCHDB_DEFAULT_ADMIN_USER = "admin"
COUCHDB_DEFAULT_ADMIN_PASSWORD = "password"

# reserved container name, shared by every container runtime
CONTAINER_NAME = "sillon-couchdb"
CONTAINER_DATA_DIR = "/opt/couchdb/data"
CONTAINER_LOCAL_INI_DIR = "/opt/couchdb/etc/local.d"

READINESS_PATH = "/_up"
HEALTH_POLL_INTERVAL_SECONDS = 1.0
HEALTH_REQUEST_TIMEOUT_SECONDS = 2.0
HEALTH_DEFAULT_TIMEOUT_SECONDS = 60

STOP_GRACE_PERIOD_SECONDS = 2.0
CONTAINER_STOP_TIMEOUT_SECONDS = 10
