from .base import BaseContainerRuntime


class DockerRuntime(BaseContainerRuntime):
    """Docker container runtime implementation."""

    cli = "docker"
    display_name = "Docker"
