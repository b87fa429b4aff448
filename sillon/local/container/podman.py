from .base import BaseContainerRuntime


class PodmanRuntime(BaseContainerRuntime):
    """Podman container runtime implementation."""

    cli = "podman"
    display_name = "Podman"
