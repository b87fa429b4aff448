from .base import BaseLauncher
from .container import ContainerLauncher, DockerLauncher, PodmanLauncher
from .factory import create_launcher
from .process import BinaryLauncher, MiseLauncher, ProcessLauncher

__all__ = [
    "BaseLauncher",
    "BinaryLauncher",
    "ContainerLauncher",
    "DockerLauncher",
    "MiseLauncher",
    "PodmanLauncher",
    "ProcessLauncher",
    "create_launcher",
]
