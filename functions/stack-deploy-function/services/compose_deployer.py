"""Compose stack deployment through the docker compose CLI."""

import logging
import shutil
from pathlib import Path

from config import Settings
from services.process import run_command

logger = logging.getLogger(__name__)


class ComposeDeployer:
    """Runs ``docker compose up`` for an ordered set of compose files."""

    def __init__(self, bin_path: str, settings: Settings) -> None:
        self.bin_path = bin_path
        self.settings = settings

    @classmethod
    def create(cls, settings: Settings) -> "ComposeDeployer":
        """Create a deployer after checking the compose binary is available.

        Raises:
            FileNotFoundError: If the binary cannot be found
        """
        bin_path = shutil.which(settings.compose_binary_path)
        if bin_path is None:
            msg = f"Compose binary not found: {settings.compose_binary_path}"
            raise FileNotFoundError(msg)
        return cls(bin_path, settings)

    def build_deploy_command(
        self,
        working_directory: str | Path,
        project_name: str,
        file_paths: list[str],
        *,
        host: str = "",
        env_file_path: str = "",
        force_recreate: bool = False,
    ) -> list[str]:
        """Build the ``docker compose ... up`` argv.

        Files are passed in the given order; later files override earlier ones.
        """
        cmd = [self.bin_path]
        if host:
            cmd += ["-H", host]
        cmd += ["compose", "--project-directory", str(working_directory)]
        for file_path in file_paths:
            cmd += ["-f", file_path]
        if project_name:
            cmd += ["-p", project_name]
        if env_file_path:
            cmd += ["--env-file", env_file_path]

        cmd += ["up", "-d"]
        if force_recreate:
            cmd.append("--force-recreate")
        return cmd

    async def deploy(
        self,
        working_directory: str | Path,
        project_name: str,
        file_paths: list[str],
        *,
        host: str = "",
        env_file_path: str = "",
        force_recreate: bool = False,
    ) -> None:
        """Bring the stack up. An empty project name lets compose pick one."""
        cmd = self.build_deploy_command(
            working_directory,
            project_name,
            file_paths,
            host=host,
            env_file_path=env_file_path,
            force_recreate=force_recreate,
        )
        result = await run_command(
            cmd,
            cwd=working_directory,
            timeout=self.settings.deploy_timeout_seconds,
            kill_timeout=self.settings.kill_timeout_seconds,
        )

        for line in result.stderr.strip().split("\n"):
            if line.strip():
                logger.info(f"compose: {line.strip()}")
