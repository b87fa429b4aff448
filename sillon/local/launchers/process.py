import os
import shutil
import subprocess
from abc import abstractmethod
from pathlib import Path

import psutil
import structlog

from sillon.constants import STOP_GRACE_PERIOD_SECONDS
from sillon.exceptions import LaunchFailedError, NoRuntimeAvailableError, SillonException
from sillon.local.commands import run_command
from sillon.local.ini import LOCAL_INI_FILENAME, ConfigWriter
from sillon.local.models import InstanceState, LaunchConfig, LaunchHandle, RuntimeKind

from .base import BaseLauncher

LOG = structlog.get_logger()

LOG_FILENAME = "couchdb.log"


def _couch_ini_files(binary: Path, extra: Path) -> list[str]:
    """The ini chain CouchDB reads: the release's own defaults, then our generated file."""
    etc_dir = binary.resolve().parent.parent / "etc"
    files = [etc_dir / "default.ini", etc_dir / "local.ini"]
    return [str(path) for path in files if path.exists()] + [str(extra)]


def _tail(path: Path, lines: int = 20) -> str:
    try:
        return "\n".join(path.read_text(errors="replace").splitlines()[-lines:])
    except OSError:
        return ""


class ProcessLauncher(BaseLauncher):
    """Spawns a CouchDB release directly as a detached child process."""

    def __init__(self, config_writer: ConfigWriter | None = None, grace_period: float = STOP_GRACE_PERIOD_SECONDS):
        self.config_writer = config_writer or ConfigWriter()
        self.grace_period = grace_period

    @abstractmethod
    def resolve_binary(self, config: LaunchConfig) -> Path:
        """Return the path of the ``couchdb`` start script to execute."""

    def launch(self, config: LaunchConfig) -> LaunchHandle:
        binary = self.resolve_binary(config)
        ini_path = self.config_writer.write(
            config.data_dir / LOCAL_INI_FILENAME,
            port=config.port,
            admin_user=config.admin_user,
            admin_pass=config.admin_pass,
            database_dir=config.data_dir / "data",
        )
        env = {**os.environ, "ERL_FLAGS": "-couch_ini " + " ".join(_couch_ini_files(binary, ini_path))}
        log_path = config.data_dir / LOG_FILENAME

        LOG.info("Starting CouchDB process", binary=str(binary), port=config.port, log=str(log_path))
        try:
            with log_path.open("ab") as log_file:
                # new session so the server survives the CLI and its terminal
                proc = subprocess.Popen(
                    [str(binary)],
                    cwd=config.data_dir,
                    env=env,
                    stdin=subprocess.DEVNULL,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    start_new_session=True,
                )
        except OSError as e:
            raise LaunchFailedError(self.display_name, str(e)) from e

        exit_code = proc.poll()
        if exit_code is not None and exit_code != 0:
            raise LaunchFailedError(self.display_name, _tail(log_path), exit_code)

        return LaunchHandle(handle=proc.pid)

    def is_alive(self, state: InstanceState) -> bool:
        try:
            process = psutil.Process(int(state.handle))
            return process.status() != psutil.STATUS_ZOMBIE
        except (ValueError, psutil.NoSuchProcess):
            return False
        except psutil.AccessDenied:
            # exists, owned by someone else
            return True

    def terminate(self, state: InstanceState) -> None:
        pid = int(state.handle)
        try:
            process = psutil.Process(pid)
            process.terminate()
            try:
                process.wait(timeout=self.grace_period)
            except psutil.TimeoutExpired:
                LOG.warning("CouchDB did not terminate gracefully, forcing kill", pid=pid)
                process.kill()
                process.wait(timeout=self.grace_period)
        except psutil.NoSuchProcess:
            LOG.info("CouchDB process was already stopped", pid=pid)
        except psutil.AccessDenied as e:
            raise SillonException(f"Access denied when trying to stop process {pid}") from e
        except psutil.TimeoutExpired as e:
            raise SillonException(f"Process {pid} remains unresponsive even after force kill") from e


class MiseLauncher(ProcessLauncher):
    """Installs the requested CouchDB release through mise and runs it."""

    @property
    def runtime_kind(self) -> RuntimeKind:
        return RuntimeKind.SOURCE_PACKAGE_MANAGER

    @property
    def display_name(self) -> str:
        return "Mise"

    def resolve_binary(self, config: LaunchConfig) -> Path:
        tool = f"couchdb@{config.version}"
        installed = run_command(["mise", "install", tool])
        if not installed.success:
            raise LaunchFailedError("mise install", installed.stderr, installed.exit_code)

        where = run_command(["mise", "where", tool])
        if not where.success:
            raise LaunchFailedError("mise where", where.stderr, where.exit_code)
        return Path(where.stdout.strip()) / "bin" / "couchdb"


class BinaryLauncher(ProcessLauncher):
    """Runs a CouchDB release unpacked under the data directory or found on PATH."""

    @property
    def runtime_kind(self) -> RuntimeKind:
        return RuntimeKind.RAW_BINARY

    @property
    def display_name(self) -> str:
        return "CouchDB binary"

    def resolve_binary(self, config: LaunchConfig) -> Path:
        bundled = config.data_dir / "apache-couchdb" / "bin" / "couchdb"
        if bundled.exists():
            return bundled
        on_path = shutil.which("couchdb")
        if on_path:
            return Path(on_path)
        raise NoRuntimeAvailableError()
