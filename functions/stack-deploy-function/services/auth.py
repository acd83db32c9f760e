"""Git credential derivation."""

from pydantic import SecretStr

from models.requests import BasicAuth

DEFAULT_USERNAME = "token"


def get_auth(
    username: str, password: str | SecretStr, default_username: str = DEFAULT_USERNAME
) -> BasicAuth | None:
    """Build basic credentials, or ``None`` when no password was supplied.

    Token-based hosts accept any username, so an empty one falls back to
    ``default_username``.
    """
    if isinstance(password, SecretStr):
        password = password.get_secret_value()
    if not password:
        return None

    return BasicAuth(username=username or default_username, password=SecretStr(password))
