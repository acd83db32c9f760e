"""Request and response models for compose stack deployments."""

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from models.errors import DeploymentErrorKind


class DeploymentRequest(BaseModel):
    """Request model for deploying a compose stack from a Git repository."""

    model_config = ConfigDict(frozen=True)

    repository_url: str = Field(..., description="Git repository holding the compose files")
    username: str = Field(default="", description="Git username, optional for token auth")
    password: SecretStr = Field(default=SecretStr(""), description="Git password or token")
    destination: str = Field(..., description="Directory the repository is cloned under")
    compose_relative_file_paths: list[str] = Field(
        ...,
        min_length=1,
        description="Compose files relative to the repository root, applied in order",
    )
    project_name: str = Field(default="", description="Compose project name")

    @field_validator("repository_url")
    @classmethod
    def validate_repository_url(cls, v: str) -> str:
        """Validate repository URL is not empty."""
        if not v or not v.strip():
            msg = "Repository URL cannot be empty"
            raise ValueError(msg)
        return v.strip()

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        """Validate destination is not empty."""
        if not v or not v.strip():
            msg = "Destination cannot be empty"
            raise ValueError(msg)
        return v.strip()

    @field_validator("compose_relative_file_paths")
    @classmethod
    def validate_compose_paths(cls, v: list[str]) -> list[str]:
        """Validate compose paths are non-empty and stay inside the clone."""
        cleaned = []
        for path in v:
            if not path or not path.strip():
                msg = "Compose file paths cannot be empty"
                raise ValueError(msg)
            if ".." in path.strip().replace("\\", "/").split("/"):
                msg = "Compose file paths cannot leave the repository"
                raise ValueError(msg)
            cleaned.append(path.strip())
        return cleaned

    @property
    def has_credentials(self) -> bool:
        """Whether both a username and a password were supplied."""
        return bool(self.username) and bool(self.password.get_secret_value())


class BasicAuth(BaseModel):
    """HTTP basic credentials for the Git transport."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr


class DeploymentResponse(BaseModel):
    """Response model for deployment operations."""

    success: bool
    message: str
    error_kind: DeploymentErrorKind | None = None
    repository_name: str | None = None
    clone_path: str | None = None
    compose_file_paths: list[str] = Field(default_factory=list)
