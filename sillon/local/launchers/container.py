import structlog

from sillon.config import settings
from sillon.constants import (
    CONTAINER_DATA_DIR,
    CONTAINER_LOCAL_INI_DIR,
    CONTAINER_NAME,
    CONTAINER_STOP_TIMEOUT_SECONDS,
    COUCHDB_CONTAINER_PORT,
)
from sillon.exceptions import LaunchFailedError, SillonException
from sillon.local.container import BaseContainerRuntime, DockerRuntime, PodmanRuntime
from sillon.local.ini import ConfigWriter
from sillon.local.models import InstanceState, LaunchConfig, LaunchHandle, RuntimeKind
from sillon.local.password import PasswordHasher

from .base import BaseLauncher

LOG = structlog.get_logger()

MOUNTED_INI_FILENAME = "sillon.ini"


class ContainerLauncher(BaseLauncher):
    """Runs the official CouchDB image under a docker-compatible container runtime.

    Liveness always comes from the container runtime. The PID recorded as the handle is
    informational only: on some hosts it belongs to a VM or user namespace.
    """

    # whether the admin can be passed as COUCHDB_USER/COUCHDB_PASSWORD env vars
    env_credentials: bool = True

    def __init__(
        self,
        runtime: BaseContainerRuntime,
        *,
        image: str | None = None,
        container_name: str = CONTAINER_NAME,
    ):
        self.runtime = runtime
        self.image = image or settings.COUCHDB_IMAGE
        self.container_name = container_name

    @property
    def display_name(self) -> str:
        return self.runtime.display_name

    def launch(self, config: LaunchConfig) -> LaunchHandle:
        # a leftover container from an earlier run would block the reserved name
        cleanup = self.runtime.remove_container(self.container_name, force=True)
        if not cleanup.success:
            LOG.debug("No previous container removed", container_name=self.container_name, stderr=cleanup.stderr)

        data_dir = config.data_dir / "data"
        data_dir.mkdir(parents=True, exist_ok=True)
        volumes = {str(data_dir): CONTAINER_DATA_DIR}
        environment: dict[str, str] = {}

        if self.env_credentials:
            environment["COUCHDB_USER"] = config.admin_user
            environment["COUCHDB_PASSWORD"] = config.admin_pass
        else:
            writer = ConfigWriter(hasher=PasswordHasher.for_version(config.version))
            ini_path = writer.write(
                config.data_dir / MOUNTED_INI_FILENAME,
                port=COUCHDB_CONTAINER_PORT,
                admin_user=config.admin_user,
                admin_pass=config.admin_pass,
            )
            volumes[str(ini_path)] = f"{CONTAINER_LOCAL_INI_DIR}/{MOUNTED_INI_FILENAME}"

        image = f"{self.image}:{config.version}"
        LOG.info("Starting CouchDB container", runtime=self.runtime.cli, image=image, port=config.port)
        result = self.runtime.run_container(
            image,
            self.container_name,
            ports={str(config.port): str(COUCHDB_CONTAINER_PORT)},
            environment=environment,
            volumes=volumes,
        )
        if not result.success:
            raise LaunchFailedError(self.display_name, result.stderr, result.exit_code)

        pid = self.runtime.inspect_pid(self.container_name)
        return LaunchHandle(handle=pid if pid is not None else self.container_name, container_name=self.container_name)

    def is_alive(self, state: InstanceState) -> bool:
        return self.runtime.is_container_running(state.container_name or str(state.handle))

    def terminate(self, state: InstanceState) -> None:
        name = state.container_name or str(state.handle)
        stopped = self.runtime.stop_container(name, timeout=CONTAINER_STOP_TIMEOUT_SECONDS)
        if not stopped.success:
            LOG.warning("Container did not stop cleanly", container_name=name, stderr=stopped.stderr)

        removed = self.runtime.remove_container(name, force=True)
        if not removed.success and self.runtime.is_container_running(name):
            raise SillonException(f"{self.display_name} failed to remove container {name}: {removed.stderr}")


class PodmanLauncher(ContainerLauncher):
    def __init__(self, runtime: BaseContainerRuntime | None = None, **kwargs: str):
        super().__init__(runtime or PodmanRuntime(), **kwargs)

    @property
    def runtime_kind(self) -> RuntimeKind:
        return RuntimeKind.CONTAINER_DAEMONLESS


class DockerLauncher(ContainerLauncher):
    """Docker launches get a pre-hashed admin mounted into ``local.d``.

    The plaintext password never reaches ``docker inspect`` or the daemon's env records.
    """

    env_credentials = False

    def __init__(self, runtime: BaseContainerRuntime | None = None, **kwargs: str):
        super().__init__(runtime or DockerRuntime(), **kwargs)

    @property
    def runtime_kind(self) -> RuntimeKind:
        return RuntimeKind.CONTAINER_DAEMON
