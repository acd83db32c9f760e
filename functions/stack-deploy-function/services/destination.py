"""Destination directory lifecycle: create, back up, clean up."""

import logging
import os
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from config import Settings
from models.errors import DeploymentErrorKind, DeploymentFailure

logger = logging.getLogger(__name__)


def move_directory(source: Path, target: Path) -> None:
    """Rename ``source`` to ``target``. Never copies.

    Raises:
        FileExistsError: If ``target`` already exists
        OSError: If the rename fails (e.g. across devices)
    """
    if target.exists():
        msg = f"Target path already exists: {target}"
        raise FileExistsError(msg)
    os.rename(source, target)


class DestinationDirectoryManager:
    """Prepares a destination directory for a fresh checkout.

    An existing destination is renamed to ``<destination><backup_suffix>`` and
    the backup is deleted once the caller's block exits, however it exits.
    Callers must serialize runs per destination; nothing here locks.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def backup_path(self, destination: str | Path) -> Path:
        """Sibling path the destination is moved to while a run is in progress."""
        return Path(f"{destination}{self.settings.backup_suffix}")

    @contextmanager
    def prepare(self, destination: str | Path, correlation_id: str = "") -> Iterator[Path | None]:
        """Prepare ``destination`` and yield the backup path, if one was made.

        Raises:
            OSError: If inspecting or backing up an existing destination fails;
                the original error is propagated unchanged
            DeploymentFailure: If the destination directory cannot be created
        """
        path = Path(destination)
        logger.info(
            f"[{correlation_id}] Checking the file system...",
            extra={"correlation_id": correlation_id, "directory": str(path)},
        )

        backup = None
        if self._exists(path):
            backup = self._backup(path, correlation_id)

        try:
            self._create(path, correlation_id)
            yield backup
        finally:
            if backup is not None:
                self.remove_backup(backup, correlation_id)

    def remove_backup(self, backup: Path, correlation_id: str = "") -> None:
        """Delete a backup directory. Failures are logged, never raised."""
        try:
            shutil.rmtree(backup)
            logger.debug(f"[{correlation_id}] Removed backup directory {backup}")
        except OSError as e:
            logger.warning(
                f"[{correlation_id}] Unable to remove backup directory: {e}",
                extra={
                    "correlation_id": correlation_id,
                    "directory": str(backup),
                    "error_kind": DeploymentErrorKind.CLEANUP_WARNING.value,
                    "error": str(e),
                },
            )

    def _exists(self, path: Path) -> bool:
        """Like ``Path.exists`` but only "not found" counts as absent."""
        try:
            os.stat(path)
        except FileNotFoundError:
            return False
        return True

    def _backup(self, path: Path, correlation_id: str) -> Path:
        backup = self.backup_path(path)
        logger.info(
            f"[{correlation_id}] Backing up folder in the file system...",
            extra={"correlation_id": correlation_id, "directory": str(path), "backup": str(backup)},
        )

        # Leftover from an interrupted run
        if self._exists(backup):
            logger.warning(
                f"[{correlation_id}] Removing stale backup directory {backup}",
                extra={"correlation_id": correlation_id, "directory": str(backup)},
            )
            if backup.is_dir() and not backup.is_symlink():
                shutil.rmtree(backup)
            else:
                backup.unlink()

        move_directory(path, backup)
        return backup

    def _create(self, path: Path, correlation_id: str) -> None:
        logger.info(
            f"[{correlation_id}] Creating target destination directory on disk",
            extra={"correlation_id": correlation_id, "directory": str(path)},
        )
        try:
            path.mkdir(mode=self.settings.destination_mode, parents=True, exist_ok=True)
        except OSError as e:
            logger.error(
                f"[{correlation_id}] Failed to create destination directory: {e}",
                extra={"correlation_id": correlation_id, "directory": str(path), "error": str(e)},
            )
            raise DeploymentFailure from e
