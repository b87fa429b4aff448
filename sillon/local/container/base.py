from sillon.local.commands import ExecResult, run_command


class BaseContainerRuntime:
    """Container operations shared by runtimes with a docker-compatible CLI."""

    cli: str = ""
    display_name: str = ""

    def run_container(
        self,
        image: str,
        name: str,
        *,
        ports: dict[str, str] | None = None,
        environment: dict[str, str] | None = None,
        volumes: dict[str, str] | None = None,
        detach: bool = True,
    ) -> ExecResult:
        """Run a new container."""
        cmd = [self.cli, "run", "--name", name]

        if detach:
            cmd.append("-d")

        for host_port, container_port in (ports or {}).items():
            cmd.extend(["-p", f"{host_port}:{container_port}"])

        for key, value in (environment or {}).items():
            cmd.extend(["-e", f"{key}={value}"])

        for host_path, container_path in (volumes or {}).items():
            cmd.extend(["-v", f"{host_path}:{container_path}"])

        cmd.append(image)
        return run_command(cmd)

    def stop_container(self, container_name: str, timeout: int = 10) -> ExecResult:
        """Stop a running container."""
        return run_command([self.cli, "stop", "-t", str(timeout), container_name])

    def remove_container(self, container_name: str, force: bool = False) -> ExecResult:
        """Remove a container."""
        cmd = [self.cli, "rm"]
        if force:
            cmd.append("-f")
        cmd.append(container_name)
        return run_command(cmd)

    def is_container_running(self, container_name: str) -> bool:
        """Check if a specific container is currently running."""
        result = run_command(
            [self.cli, "ps", "--filter", f"name=^{container_name}$", "--format", "{{.Names}}"]
        )
        return result.success and container_name in result.stdout.split("\n")

    def inspect_pid(self, container_name: str) -> int | None:
        """Return the host PID of the container's main process, when the runtime exposes one."""
        result = run_command([self.cli, "inspect", "-f", "{{.State.Pid}}", container_name])
        if not result.success:
            return None
        try:
            pid = int(result.stdout.strip())
        except ValueError:
            return None
        return pid if pid > 0 else None
