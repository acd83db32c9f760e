"""Tests for repository name resolution and Git credentials."""

import pytest
from pydantic import SecretStr

from models.errors import InvalidRepositoryAddress
from services.auth import get_auth
from services.naming import resolve_repository_name


class TestResolveRepositoryName:
    """Tests for resolve_repository_name."""

    def test_https_url_with_git_suffix(self):
        """Test the .git suffix is stripped from the last segment."""
        assert resolve_repository_name("https://example.com/org/myrepo.git") == "myrepo"

    def test_names_follow_last_separator(self):
        """Test names are taken from the last path segment."""
        test_cases = [
            ("https://github.com/org/stack", "stack"),
            ("git@github.com:org/infra.git", "infra"),
            ("/srv/git/local-repo.git", "local-repo"),
            ("https://example.com/a/b/c/deep.git", "deep"),
        ]

        for url, expected in test_cases:
            assert resolve_repository_name(url) == expected

    def test_only_trailing_suffix_is_stripped(self):
        """Test .git inside the name is kept."""
        assert resolve_repository_name("https://example.com/org/my.git.repo") == "my.git.repo"

    @pytest.mark.parametrize("url", ["myrepo.git", "example.com", "git@github.com:repo"])
    def test_url_without_separator_is_rejected(self, url):
        """Test URLs without a separator raise InvalidRepositoryAddress."""
        with pytest.raises(InvalidRepositoryAddress):
            resolve_repository_name(url)


class TestGetAuth:
    """Tests for get_auth credential derivation."""

    def test_no_password_means_no_credentials(self):
        """Test an empty password yields no credentials."""
        assert get_auth("", "") is None
        assert get_auth("user", "") is None

    def test_empty_username_defaults_to_token(self):
        """Test token auth gets the default username."""
        auth = get_auth("", "p")

        assert auth is not None
        assert auth.username == "token"
        assert auth.password.get_secret_value() == "p"

    def test_username_and_password_are_kept(self):
        """Test explicit credentials are passed through unchanged."""
        auth = get_auth("u", "p")

        assert auth.username == "u"
        assert auth.password.get_secret_value() == "p"

    def test_accepts_secret_password(self):
        """Test SecretStr passwords from requests are unwrapped."""
        assert get_auth("u", SecretStr("")) is None
        assert get_auth("u", SecretStr("p")).password.get_secret_value() == "p"

    def test_custom_default_username(self):
        """Test the default username can be configured."""
        auth = get_auth("", "p", default_username="x-access-token")

        assert auth.username == "x-access-token"
