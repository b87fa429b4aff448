from sillon.local.commands import ExecResult

from .base import BaseContainerRuntime
from .docker import DockerRuntime
from .podman import PodmanRuntime

__all__ = [
    "BaseContainerRuntime",
    "DockerRuntime",
    "ExecResult",
    "PodmanRuntime",
]
