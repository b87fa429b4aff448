import pytest

from sillon.exceptions import InvalidRuntimeError
from sillon.local.detector import RuntimeDetector
from sillon.local.models import RuntimeKind


def _exists(*available: str):
    return lambda executable: executable in available


class TestRuntimeDetector:
    def test_prefers_podman(self) -> None:
        assert RuntimeDetector(exists=_exists("podman", "docker", "mise")).detect() is RuntimeKind.CONTAINER_DAEMONLESS

    def test_docker_when_no_podman(self) -> None:
        assert RuntimeDetector(exists=_exists("docker", "mise")).detect() is RuntimeKind.CONTAINER_DAEMON

    def test_mise_when_no_container_runtime(self) -> None:
        assert RuntimeDetector(exists=_exists("mise")).detect() is RuntimeKind.SOURCE_PACKAGE_MANAGER

    def test_falls_back_to_raw_binary(self) -> None:
        assert RuntimeDetector(exists=_exists()).detect() is RuntimeKind.RAW_BINARY

    def test_forced_runtime_skips_probing(self) -> None:
        probed: list[str] = []

        def exists(executable: str) -> bool:
            probed.append(executable)
            return True

        detector = RuntimeDetector(forced="container-daemon", exists=exists)
        assert detector.detect() is RuntimeKind.CONTAINER_DAEMON
        assert probed == []

    def test_unknown_forced_runtime(self) -> None:
        with pytest.raises(InvalidRuntimeError, match="kubernetes"):
            RuntimeDetector(forced="kubernetes")
