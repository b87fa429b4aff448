import shutil
import subprocess
from dataclasses import dataclass

import structlog

LOG = structlog.get_logger()


@dataclass
class ExecResult:
    """Result of running an external command."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        """Return True if the command executed successfully."""
        return self.exit_code == 0


def command_exists(command: str) -> bool:
    return shutil.which(command) is not None


def run_command(command: list[str], *, timeout: float | None = None) -> ExecResult:
    """Run ``command`` to completion and capture its output. Never raises on non-zero exit."""
    LOG.debug("Running command", command=command)
    try:
        result = subprocess.run(command, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as e:
        return ExecResult(exit_code=127, stdout="", stderr=str(e))
    except subprocess.TimeoutExpired as e:
        return ExecResult(exit_code=124, stdout="", stderr=f"{command[0]} timed out after {e.timeout}s")
    return ExecResult(
        exit_code=result.returncode,
        stdout=result.stdout.strip() if result.stdout else "",
        stderr=result.stderr.strip() if result.stderr else "",
    )
