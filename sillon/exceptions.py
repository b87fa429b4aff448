class SillonException(Exception):
    def __init__(self, message: str | None = None):
        self.message = message
        super().__init__(message)


class AlreadyRunningError(SillonException):
    def __init__(self, url: str | None = None):
        self.url = url
        super().__init__(f"CouchDB already running at {url}" if url else "CouchDB already running")


class NotRunningError(SillonException):
    def __init__(self, message: str | None = None):
        super().__init__(message or "CouchDB is not running (no instance state found)")


class NoRuntimeAvailableError(SillonException):
    def __init__(self) -> None:
        super().__init__(
            "No runtime available to launch CouchDB. Please install Podman, Docker or Mise:\n"
            "  Podman: https://podman.io/getting-started/installation\n"
            "  Docker: https://www.docker.com/get-started\n"
            "  Mise:   https://mise.jdx.dev/getting-started.html"
        )


class InvalidRuntimeError(SillonException):
    def __init__(self, value: str):
        self.value = value
        super().__init__(
            f"Unknown runtime {value!r}. Expected one of: container-daemonless, container-daemon, "
            "source-package-manager, raw-binary"
        )


class LaunchFailedError(SillonException):
    def __init__(self, tool: str, stderr: str | None = None, exit_code: int | None = None):
        self.tool = tool
        self.stderr = stderr or ""
        self.exit_code = exit_code
        super().__init__(f"{tool} failed: {self.stderr}")


class HealthTimeoutError(SillonException):
    def __init__(self, elapsed_seconds: float, url: str | None = None):
        self.elapsed_seconds = elapsed_seconds
        self.url = url
        target = f" at {url}" if url else ""
        super().__init__(f"Timeout waiting for CouchDB to start{target} after {elapsed_seconds:g}s")


class StaleStateError(SillonException):
    """Instance state points at a process or container that no longer exists."""

    def __init__(self, handle: int | str | None = None):
        self.handle = handle
        super().__init__(f"Instance state is stale (handle {handle} is not alive)")


class InvalidHashError(SillonException):
    def __init__(self, value: str | None = None):
        super().__init__(f"Invalid password hash literal: {value!r}")


class CouchError(SillonException):
    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ConnectionNotConfiguredError(SillonException):
    def __init__(self) -> None:
        super().__init__(
            "No CouchDB connection configured.\nRun: sillon connect <url> or set COUCHDB_URL env var"
        )


class UnknownConnectionError(SillonException):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Connection "{name}" not found')
