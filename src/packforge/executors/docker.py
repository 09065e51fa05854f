"""Docker executor implementation."""

from __future__ import annotations

import os
import shlex
import sys
from pathlib import Path

import docker
from docker.errors import DockerException
from docker.models.containers import Container

from packforge.console import console
from packforge.errors import ExecutorError
from packforge.executors.base import Executor

# Mount point of the temporary build directory inside the container
CONTAINER_WORKDIR = "/packforge/build"


class DockerExecutor(Executor):
    """Executor that runs packaging scripts inside a Docker container.

    The temporary build directory is bind-mounted read-write as the
    container's working directory, so the produced artifact ends up on the
    host exactly as it would with the shell executor.
    """

    name = "docker"

    def __init__(self, image_override: str | None = None, quiet: bool = False) -> None:
        self._image_override = image_override
        self.quiet = quiet
        self._client: docker.DockerClient | None = None
        self._container: Container | None = None
        self._command: str | None = None
        self._cwd: Path | None = None
        self._image: str | None = None
        self._exit_code: int | None = None

    def _get_client(self) -> docker.DockerClient:
        """Get or create Docker client."""
        if self._client is None:
            self._client = docker.from_env()
        return self._client

    def _resolve_image(self, image: str | None) -> str:
        """Resolve which Docker image to use."""
        if self._image_override:
            return self._image_override
        if image:
            return image
        raise ExecutorError(
            "No Docker image configured for this format. "
            "Pass --image or set docker_image in the config."
        )

    def _pull_image(self, client: docker.DockerClient, image: str) -> None:
        """Pull the Docker image if not available locally."""
        try:
            client.images.get(image)
        except docker.errors.ImageNotFound:
            if not self.quiet:
                console.print(f"[dim]Pulling image: {image}[/dim]")
            client.images.pull(image)

    @staticmethod
    def _get_user() -> str | None:
        """Run as the invoking user so artifacts are not owned by root."""
        if hasattr(os, "getuid"):
            return f"{os.getuid()}:{os.getgid()}"
        return None

    def setup(self, command: str, cwd: Path, image: str | None = None) -> None:
        """Create the container for the packaging command."""
        self._command = command
        self._cwd = cwd
        self._image = self._resolve_image(image)
        self._exit_code = None

        try:
            client = self._get_client()
            self._pull_image(client, self._image)
            self._container = client.containers.create(
                image=self._image,
                command=["bash", "-c", command],
                working_dir=CONTAINER_WORKDIR,
                detach=True,
                user=self._get_user(),
                volumes={str(cwd): {"bind": CONTAINER_WORKDIR, "mode": "rw"}},
            )
        except DockerException as e:
            raise ExecutorError(f"Cannot create Docker container: {e}") from e

        if not self.quiet:
            console.print(f"[dim]Created container: {self._container.short_id}[/dim]")

    def run(self) -> None:
        """Start the container and stream its output to stdout."""
        if self._container is None:
            raise RuntimeError("setup() must be called before run()")

        try:
            self._container.start()
            for chunk in self._container.logs(stream=True, follow=True):
                if not self.quiet:
                    sys.stdout.write(chunk.decode("utf-8", errors="replace"))
                    sys.stdout.flush()
            result = self._container.wait()
        except DockerException as e:
            raise ExecutorError(f"Docker container failed: {e}") from e
        self._exit_code = result.get("StatusCode", 1)

    def teardown(self) -> None:
        """Remove the container and close the client."""
        if self._container is not None:
            try:
                self._container.remove(force=True)
            except docker.errors.NotFound:
                pass  # Already removed
            self._container = None

        if self._client is not None:
            self._client.close()
            self._client = None

    @property
    def exit_code(self) -> int | None:
        """Return the exit code after run() completes, or None if still running."""
        return self._exit_code

    def describe(self) -> str:
        """Return an equivalent ``docker run`` command line."""
        parts = [
            "docker",
            "run",
            "--rm",
            "-v",
            f"{self._cwd}:{CONTAINER_WORKDIR}",
            "-w",
            CONTAINER_WORKDIR,
            self._image or "<image>",
            "bash",
            "-c",
            self._command or "",
        ]
        return " ".join(shlex.quote(part) for part in parts)
