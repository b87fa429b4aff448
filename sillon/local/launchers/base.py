from abc import ABC, abstractmethod

from sillon.local.models import InstanceState, LaunchConfig, LaunchHandle, RuntimeKind


class BaseLauncher(ABC):
    """Starts, probes and stops a local CouchDB through one runtime kind."""

    @property
    @abstractmethod
    def runtime_kind(self) -> RuntimeKind:
        """Return the runtime kind this launcher implements."""

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Return a human-readable name for the runtime."""

    @abstractmethod
    def launch(self, config: LaunchConfig) -> LaunchHandle:
        """Start the server and return the handle used to track it."""

    @abstractmethod
    def is_alive(self, state: InstanceState) -> bool:
        """Check whether the instance described by ``state`` still exists."""

    @abstractmethod
    def terminate(self, state: InstanceState) -> None:
        """Shut down the instance described by ``state``."""
