from collections.abc import Callable

import structlog

from sillon.exceptions import InvalidRuntimeError
from sillon.local.commands import command_exists
from sillon.local.models import RuntimeKind

LOG = structlog.get_logger()

# Probed in order; the first tool found on PATH wins.
RUNTIME_PROBES: tuple[tuple[RuntimeKind, str], ...] = (
    (RuntimeKind.CONTAINER_DAEMONLESS, "podman"),
    (RuntimeKind.CONTAINER_DAEMON, "docker"),
    (RuntimeKind.SOURCE_PACKAGE_MANAGER, "mise"),
)


class RuntimeDetector:
    """Pick how to run CouchDB on this host.

    Detection supports:
    1. An explicit runtime kind (e.g. from the SILLON_RUNTIME setting)
    2. Auto-detection based on available binaries
    3. Falling back to a raw CouchDB binary when nothing else is installed
    """

    def __init__(
        self,
        forced: RuntimeKind | str | None = None,
        exists: Callable[[str], bool] = command_exists,
    ):
        self.forced = self._parse(forced) if forced else None
        self.exists = exists

    @staticmethod
    def _parse(value: RuntimeKind | str) -> RuntimeKind:
        try:
            return RuntimeKind(value)
        except ValueError:
            raise InvalidRuntimeError(str(value)) from None

    def detect(self) -> RuntimeKind:
        if self.forced is not None:
            LOG.info("Using configured runtime", runtime_kind=str(self.forced))
            return self.forced

        for kind, executable in RUNTIME_PROBES:
            if self.exists(executable):
                LOG.info("Detected runtime", runtime_kind=str(kind), executable=executable)
                return kind

        LOG.info("No container runtime or version manager found, falling back to raw binary")
        return RuntimeKind.RAW_BINARY
