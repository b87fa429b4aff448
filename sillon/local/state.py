from pathlib import Path
from typing import Protocol

import structlog
from pydantic import ValidationError

from sillon.local.models import InstanceState

LOG = structlog.get_logger()


class StateStore(Protocol):
    """Where the record of the managed instance lives between CLI invocations."""

    def write(self, state: InstanceState) -> None: ...
    def read(self) -> InstanceState | None: ...
    def clear(self) -> None: ...


class FileStateStore:
    """One JSON file per instance identifier. No locking: single user, single host."""

    def __init__(self, path: Path):
        self.path = path

    @classmethod
    def for_instance(cls, state_dir: Path, instance: str) -> "FileStateStore":
        return cls(state_dir / f"{instance}.json")

    def write(self, state: InstanceState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(state.model_dump_json(indent=2))
        self.path.chmod(0o600)

    def read(self) -> InstanceState | None:
        if not self.path.exists():
            return None
        try:
            return InstanceState.model_validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            # corrupt state is the same as no state
            LOG.warning("Ignoring unreadable instance state", path=str(self.path), error=str(e))
            return None

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class MemoryStateStore:
    def __init__(self, state: InstanceState | None = None):
        self.state = state

    def write(self, state: InstanceState) -> None:
        self.state = state.model_copy()

    def read(self) -> InstanceState | None:
        return self.state.model_copy() if self.state else None

    def clear(self) -> None:
        self.state = None
