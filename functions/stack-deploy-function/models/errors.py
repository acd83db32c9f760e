"""Error kinds returned by the stack deployment pipeline."""

from enum import Enum


class DeploymentErrorKind(str, Enum):
    """Closed set of outcomes a failed deployment can report."""

    INVALID_REPOSITORY_ADDRESS = "invalid_repository_address"
    DIRECTORY_PREPARATION = "directory_preparation"
    DEPLOYMENT_FAILURE = "deployment_failure"
    CLEANUP_WARNING = "cleanup_warning"


class StackDeploymentError(Exception):
    """Base class for errors raised by the deployment pipeline."""

    kind: DeploymentErrorKind = DeploymentErrorKind.DEPLOYMENT_FAILURE


class InvalidRepositoryAddress(StackDeploymentError, ValueError):
    """The repository URL has no path separator to derive a name from."""

    kind = DeploymentErrorKind.INVALID_REPOSITORY_ADDRESS

    def __init__(self, repository_url: str) -> None:
        self.repository_url = repository_url
        super().__init__(f"Invalid Git repository URL: {repository_url}")


class DeploymentFailure(StackDeploymentError):
    """Coarse failure for anything that went wrong while fetching or deploying.

    The underlying error is logged and chained as ``__cause__``; callers should
    only rely on the type.
    """

    kind = DeploymentErrorKind.DEPLOYMENT_FAILURE

    def __init__(self, message: str = "compose stack deployment failure") -> None:
        super().__init__(message)


def classify_error(exc: BaseException) -> DeploymentErrorKind:
    """Map an exception raised by the pipeline to its error kind."""
    if isinstance(exc, StackDeploymentError):
        return exc.kind
    if isinstance(exc, OSError):
        return DeploymentErrorKind.DIRECTORY_PREPARATION
    return DeploymentErrorKind.DEPLOYMENT_FAILURE
