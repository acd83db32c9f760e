"""Configuration settings for the stack deploy function."""

from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = ConfigDict(
        env_prefix="",
        case_sensitive=False,
    )

    # Git client settings
    git_binary_path: str = "git"
    clone_depth: int = 1
    default_git_username: str = "token"  # Used for token-based auth when no username is given
    clone_timeout_seconds: int = 300

    # Compose deployer settings
    compose_binary_path: str = "docker"
    deploy_timeout_seconds: int = 600

    # Destination directory settings
    backup_suffix: str = "-old"
    destination_mode: int = 0o755

    @field_validator("destination_mode", mode="before")
    @classmethod
    def parse_octal_mode(cls, v: object) -> object:
        """Read string modes such as ``"0755"`` or ``"0o755"`` as octal."""
        if isinstance(v, str):
            try:
                return int(v.strip(), 8)
            except ValueError:
                msg = f"destination_mode must be an octal permission string, got {v!r}"
                raise ValueError(msg) from None
        return v

    # Seconds between SIGTERM and SIGKILL when a command is cancelled
    kill_timeout_seconds: float = 5.0

    log_level: str = "INFO"


# Global settings instance
settings = Settings()
