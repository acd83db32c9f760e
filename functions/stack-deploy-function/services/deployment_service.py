"""Deployment service for compose stacks stored in Git repositories."""

import asyncio
import logging
import subprocess
import time
import uuid
from collections.abc import Callable
from pathlib import Path

from config import Settings
from models.errors import DeploymentFailure, InvalidRepositoryAddress
from models.requests import BasicAuth, DeploymentRequest, DeploymentResponse
from services.auth import get_auth
from services.compose_deployer import ComposeDeployer
from services.destination import DestinationDirectoryManager
from services.git_client import GitClient
from services.naming import resolve_repository_name

logger = logging.getLogger(__name__)


class DeploymentService:
    """Clones a repository and deploys the compose stack it contains.

    The pipeline is strictly sequential: resolve the repository name, prepare
    the destination, clone, then deploy. The first failing step ends the run.
    Fetch and deploy failures are collapsed into ``DeploymentFailure``; the
    cause is only logged. Directory backup errors propagate unchanged.
    """

    def __init__(
        self,
        settings: Settings,
        git_client: GitClient | None = None,
        directory_manager: DestinationDirectoryManager | None = None,
        deployer_factory: Callable[[Settings], ComposeDeployer] | None = None,
    ) -> None:
        """Initialize the deployment service."""
        logger.info("Initializing DeploymentService")
        self.settings = settings
        self.git_client = git_client or GitClient(settings)
        self.directory_manager = directory_manager or DestinationDirectoryManager(settings)
        self.deployer_factory = deployer_factory or ComposeDeployer.create

    async def deploy(self, request: DeploymentRequest) -> DeploymentResponse:
        """Deploy the compose stack described by ``request``.

        Raises:
            InvalidRepositoryAddress: If no name can be derived from the URL
            OSError: If an existing destination cannot be backed up
            DeploymentFailure: If the destination cannot be created, or the
                clone or the deployment fails
        """
        deployment_start_time = time.time()
        correlation_id = f"deploy-{uuid.uuid4().hex[:8]}-{int(deployment_start_time)}"

        logger.info(
            f"[{correlation_id}] Deploying Compose stack from Git repository",
            extra={
                "correlation_id": correlation_id,
                "repository": request.repository_url,
                "compose_paths": request.compose_relative_file_paths,
                "destination": request.destination,
            },
        )

        if request.has_credentials:
            logger.info(
                f"[{correlation_id}] Using Git authentication",
                extra={
                    "correlation_id": correlation_id,
                    "user": request.username,
                    "password": "<redacted>",
                },
            )

        # Step 1: Resolve the local repository name
        try:
            repository_name = resolve_repository_name(request.repository_url)
        except InvalidRepositoryAddress:
            logger.error(
                f"[{correlation_id}] Invalid Git repository URL",
                extra={"correlation_id": correlation_id, "repository": request.repository_url},
            )
            raise

        clone_path = Path(request.destination) / repository_name

        try:
            # Step 2: Prepare the destination; any backup is removed when the block exits
            with self.directory_manager.prepare(request.destination, correlation_id):
                # Step 3: Clone the repository
                step_start = time.time()
                auth = get_auth(
                    request.username,
                    request.password,
                    default_username=self.settings.default_git_username,
                )
                await self._clone_repository(request.repository_url, clone_path, auth, correlation_id)
                logger.info(
                    f"[{correlation_id}] Clone completed in {time.time() - step_start:.2f}s"
                )

                # Step 4: Resolve compose files against the clone
                compose_file_paths = self.resolve_compose_file_paths(
                    clone_path, request.compose_relative_file_paths
                )

                # Step 5: Deploy the stack
                step_start = time.time()
                await self._deploy_stack(
                    clone_path, request.project_name, compose_file_paths, correlation_id
                )
                logger.info(
                    f"[{correlation_id}] Compose deployment completed in "
                    f"{time.time() - step_start:.2f}s"
                )
        except OSError as e:
            logger.error(
                f"[{correlation_id}] Failed to prepare destination directory: {e}",
                extra={
                    "correlation_id": correlation_id,
                    "directory": request.destination,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            raise
        except asyncio.CancelledError:
            logger.warning(
                f"[{correlation_id}] Deployment cancelled after "
                f"{time.time() - deployment_start_time:.2f}s",
                extra={"correlation_id": correlation_id},
            )
            raise

        total_time = time.time() - deployment_start_time
        logger.info(
            f"[{correlation_id}] Compose stack deployment complete in {total_time:.2f}s",
            extra={
                "correlation_id": correlation_id,
                "clone_path": str(clone_path),
                "project_name": request.project_name,
                "total_duration_seconds": total_time,
            },
        )

        return DeploymentResponse(
            success=True,
            message=f"Successfully deployed {repository_name} from {request.repository_url}",
            repository_name=repository_name,
            clone_path=str(clone_path),
            compose_file_paths=compose_file_paths,
        )

    @staticmethod
    def resolve_compose_file_paths(clone_path: Path, relative_paths: list[str]) -> list[str]:
        """Join each compose file onto the clone path, keeping the given order."""
        return [str(clone_path / path.lstrip("/")) for path in relative_paths]

    async def _clone_repository(
        self,
        repository_url: str,
        clone_path: Path,
        auth: BasicAuth | None,
        correlation_id: str,
    ) -> None:
        """Shallow-clone the repository into ``clone_path``."""
        logger.info(
            f"[{correlation_id}] Cloning git repository",
            extra={
                "correlation_id": correlation_id,
                "path": str(clone_path),
                "clone_options": {
                    "url": repository_url,
                    "auth": repr(auth),
                    "depth": self.settings.clone_depth,
                },
            },
        )

        try:
            await self.git_client.clone(
                repository_url, clone_path, auth=auth, depth=self.settings.clone_depth
            )
        except subprocess.CalledProcessError as e:
            logger.error(
                f"[{correlation_id}] Failed to clone Git repository (exit code {e.returncode})",
                extra={
                    "correlation_id": correlation_id,
                    "repository": repository_url,
                    "stderr": e.stderr,
                },
            )
            raise DeploymentFailure from e
        except Exception as e:
            logger.exception(
                f"[{correlation_id}] Failed to clone Git repository: {e!s}",
                extra={
                    "correlation_id": correlation_id,
                    "repository": repository_url,
                    "error_type": type(e).__name__,
                },
            )
            raise DeploymentFailure from e

    async def _deploy_stack(
        self,
        clone_path: Path,
        project_name: str,
        compose_file_paths: list[str],
        correlation_id: str,
    ) -> None:
        """Create a compose deployer and bring the stack up."""
        logger.info(
            f"[{correlation_id}] Creating Compose deployer",
            extra={"correlation_id": correlation_id, "bin_path": self.settings.compose_binary_path},
        )
        try:
            deployer = self.deployer_factory(self.settings)
        except Exception as e:
            logger.error(
                f"[{correlation_id}] Failed to create Compose deployer: {e!s}",
                extra={"correlation_id": correlation_id, "error": str(e)},
            )
            raise DeploymentFailure from e

        logger.info(
            f"[{correlation_id}] Deploying Compose stack",
            extra={
                "correlation_id": correlation_id,
                "compose_file_paths": compose_file_paths,
                "working_directory": str(clone_path),
                "project_name": project_name,
            },
        )

        try:
            await deployer.deploy(clone_path, project_name, compose_file_paths)
        except subprocess.CalledProcessError as e:
            logger.error(
                f"[{correlation_id}] Failed to deploy Compose stack (exit code {e.returncode})",
                extra={
                    "correlation_id": correlation_id,
                    "command": " ".join(e.cmd) if e.cmd else "unknown",
                    "stdout": e.stdout,
                    "stderr": e.stderr,
                },
            )
            raise DeploymentFailure from e
        except Exception as e:
            logger.exception(
                f"[{correlation_id}] Failed to deploy Compose stack: {e!s}",
                extra={"correlation_id": correlation_id, "error_type": type(e).__name__},
            )
            raise DeploymentFailure from e
