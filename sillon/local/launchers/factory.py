from sillon.local.models import RuntimeKind

from .base import BaseLauncher
from .container import DockerLauncher, PodmanLauncher
from .process import BinaryLauncher, MiseLauncher

LAUNCHER_TYPES: dict[RuntimeKind, type[BaseLauncher]] = {
    RuntimeKind.CONTAINER_DAEMONLESS: PodmanLauncher,
    RuntimeKind.CONTAINER_DAEMON: DockerLauncher,
    RuntimeKind.SOURCE_PACKAGE_MANAGER: MiseLauncher,
    RuntimeKind.RAW_BINARY: BinaryLauncher,
}


def create_launcher(kind: RuntimeKind) -> BaseLauncher:
    """Create the launcher for the given runtime kind.

    Raises:
        ValueError: If the runtime kind is not supported
    """
    launcher_type = LAUNCHER_TYPES.get(kind)
    if launcher_type is None:
        raise ValueError(f"Unsupported runtime kind: {kind}")
    return launcher_type()
