"""Shallow Git clones through the git binary."""

import base64
import logging
from pathlib import Path

from config import Settings
from models.requests import BasicAuth
from services.process import run_command

logger = logging.getLogger(__name__)


class GitClient:
    """Thin wrapper around ``git clone``."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def build_clone_command(self, url: str, path: str | Path, depth: int) -> list[str]:
        """Build the ``git clone`` argv. Credentials are never part of it."""
        cmd = [self.settings.git_binary_path, "clone"]
        if depth > 0:
            cmd += ["--depth", str(depth)]
        cmd += ["--", url, str(path)]
        return cmd

    @staticmethod
    def build_auth_env(auth: BasicAuth | None) -> dict[str, str]:
        """Environment that makes git send basic credentials as an HTTP header.

        Using ``GIT_CONFIG_*`` keeps the secret out of the command line and the
        remote URL, so it cannot show up in process listings or error output.
        """
        env = {"GIT_TERMINAL_PROMPT": "0"}
        if auth is None:
            return env

        token = base64.b64encode(
            f"{auth.username}:{auth.password.get_secret_value()}".encode()
        ).decode("ascii")
        env.update(
            {
                "GIT_CONFIG_COUNT": "1",
                "GIT_CONFIG_KEY_0": "http.extraHeader",
                "GIT_CONFIG_VALUE_0": f"Authorization: Basic {token}",
            }
        )
        return env

    async def clone(
        self,
        url: str,
        path: str | Path,
        auth: BasicAuth | None = None,
        depth: int | None = None,
    ) -> None:
        """Clone ``url`` into ``path``.

        Cancelling the awaiting task aborts the clone.
        """
        if depth is None:
            depth = self.settings.clone_depth

        cmd = self.build_clone_command(url, path, depth)
        result = await run_command(
            cmd,
            env=self.build_auth_env(auth),
            timeout=self.settings.clone_timeout_seconds,
            kill_timeout=self.settings.kill_timeout_seconds,
        )
        logger.debug(f"git clone output: {result.stderr.strip()}")
