"""Bootstrap a local CouchDB through podman, docker, mise or a raw binary."""

from .controller import LifecycleController
from .detector import RuntimeDetector
from .health import HealthPoller
from .ini import ConfigWriter
from .models import InstanceState, LaunchConfig, LaunchHandle, LocalStatus, RuntimeKind
from .password import HashRecord, PasswordHasher
from .state import FileStateStore, MemoryStateStore, StateStore

__all__ = [
    "ConfigWriter",
    "FileStateStore",
    "HashRecord",
    "HealthPoller",
    "InstanceState",
    "LaunchConfig",
    "LaunchHandle",
    "LifecycleController",
    "LocalStatus",
    "MemoryStateStore",
    "PasswordHasher",
    "RuntimeDetector",
    "RuntimeKind",
    "StateStore",
]
