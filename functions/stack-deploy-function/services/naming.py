"""Derive local directory names from Git repository URLs."""

from models.errors import InvalidRepositoryAddress

GIT_SUFFIX = ".git"


def resolve_repository_name(repository_url: str) -> str:
    """Return the last path segment of a repository URL without its ``.git`` suffix.

    Raises:
        InvalidRepositoryAddress: If the URL contains no ``/``
    """
    i = repository_url.rfind("/")
    if i == -1:
        raise InvalidRepositoryAddress(repository_url)

    name = repository_url[i + 1 :]
    if name.endswith(GIT_SUFFIX):
        name = name[: -len(GIT_SUFFIX)]
    return name
