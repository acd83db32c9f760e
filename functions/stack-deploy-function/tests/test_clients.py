"""Tests for the git client and compose deployer wrappers."""

import base64
from unittest.mock import AsyncMock, patch

import pytest

from config import Settings
from models.requests import BasicAuth
from services.compose_deployer import ComposeDeployer
from services.git_client import GitClient


@pytest.fixture
def settings():
    """Create settings with short timeouts."""
    return Settings(clone_timeout_seconds=10, deploy_timeout_seconds=20, kill_timeout_seconds=1.0)


class TestGitClient:
    """Tests for GitClient."""

    def test_shallow_clone_command(self, settings):
        """Test the clone command is shallow and ends with url and path."""
        client = GitClient(settings)

        cmd = client.build_clone_command("https://example.com/org/myrepo.git", "/data/myrepo", 1)

        assert cmd == [
            "git",
            "clone",
            "--depth",
            "1",
            "--",
            "https://example.com/org/myrepo.git",
            "/data/myrepo",
        ]

    def test_full_clone_when_depth_is_zero(self, settings):
        """Test depth 0 clones the full history."""
        cmd = GitClient(settings).build_clone_command("https://e.com/o/r.git", "/d/r", 0)

        assert "--depth" not in cmd

    def test_auth_env_without_credentials(self):
        """Test prompts are disabled and no header is configured."""
        env = GitClient.build_auth_env(None)

        assert env == {"GIT_TERMINAL_PROMPT": "0"}

    def test_auth_env_sends_basic_header(self):
        """Test credentials are passed as an HTTP header through git config env."""
        env = GitClient.build_auth_env(BasicAuth(username="token", password="p4ss"))

        expected = base64.b64encode(b"token:p4ss").decode()
        assert env["GIT_CONFIG_COUNT"] == "1"
        assert env["GIT_CONFIG_KEY_0"] == "http.extraHeader"
        assert env["GIT_CONFIG_VALUE_0"] == f"Authorization: Basic {expected}"

    @pytest.mark.asyncio
    async def test_clone_keeps_credentials_out_of_argv(self, settings):
        """Test the password never reaches the command line."""
        client = GitClient(settings)
        auth = BasicAuth(username="u", password="p4ss")

        with patch("services.git_client.run_command", new_callable=AsyncMock) as mock_run:
            await client.clone("https://example.com/org/myrepo.git", "/data/myrepo", auth=auth)

        cmd = mock_run.call_args.args[0]
        kwargs = mock_run.call_args.kwargs
        assert all("p4ss" not in part for part in cmd)
        assert "--depth" in cmd
        assert kwargs["timeout"] == 10
        assert kwargs["kill_timeout"] == 1.0
        assert "GIT_CONFIG_VALUE_0" in kwargs["env"]


class TestComposeDeployer:
    """Tests for ComposeDeployer."""

    def test_create_requires_binary(self):
        """Test creating a deployer fails when the binary is missing."""
        settings = Settings(compose_binary_path="/nonexistent/docker")

        with pytest.raises(FileNotFoundError, match="Compose binary not found"):
            ComposeDeployer.create(settings)

    def test_create_resolves_binary(self, settings):
        """Test the binary is resolved on PATH."""
        with patch("services.compose_deployer.shutil.which", return_value="/usr/bin/docker"):
            deployer = ComposeDeployer.create(settings)

        assert deployer.bin_path == "/usr/bin/docker"

    def test_deploy_command_keeps_file_order(self, settings):
        """Test compose files are passed in the given order."""
        deployer = ComposeDeployer("/usr/bin/docker", settings)

        cmd = deployer.build_deploy_command(
            "/data/myrepo",
            "web",
            ["/data/myrepo/docker-compose.yml", "/data/myrepo/docker-compose.override.yml"],
        )

        assert cmd == [
            "/usr/bin/docker",
            "compose",
            "--project-directory",
            "/data/myrepo",
            "-f",
            "/data/myrepo/docker-compose.yml",
            "-f",
            "/data/myrepo/docker-compose.override.yml",
            "-p",
            "web",
            "up",
            "-d",
        ]

    def test_deploy_command_optional_arguments(self, settings):
        """Test host, env file and force recreate options."""
        deployer = ComposeDeployer("docker", settings)

        cmd = deployer.build_deploy_command(
            "/w",
            "",
            ["/w/a.yml"],
            host="tcp://10.0.0.2:2375",
            env_file_path="/w/.env",
            force_recreate=True,
        )

        assert cmd[:3] == ["docker", "-H", "tcp://10.0.0.2:2375"]
        assert "-p" not in cmd
        assert cmd[cmd.index("--env-file") + 1] == "/w/.env"
        assert cmd[-1] == "--force-recreate"

    @pytest.mark.asyncio
    async def test_deploy_runs_in_working_directory(self, settings):
        """Test the stack is deployed from the working directory."""
        deployer = ComposeDeployer("docker", settings)

        with patch("services.compose_deployer.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value.stderr = "Container web-1  Started\n"
            await deployer.deploy("/data/myrepo", "", ["/data/myrepo/docker-compose.yml"])

        assert mock_run.call_args.kwargs["cwd"] == "/data/myrepo"
        assert mock_run.call_args.kwargs["timeout"] == 20
