"""
Installs the Geode loader payload into the game directory.
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional

from geodify.backend.handlers.filesystem_handler import FileSystemHandler, ProgressCallback
from geodify.backend.models.configuration import ReleaseInfo

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "geode.zip"


class InstallError(Exception):
    """Download, extraction or copy of the payload failed."""


class GeodeInstallService:
    """Download, extract and copy a Geode release into Geometry Dash."""

    def __init__(self, filesystem: Optional[FileSystemHandler] = None):
        self.filesystem = filesystem or FileSystemHandler()

    def install(self, release: ReleaseInfo, game_path: Path,
                progress_callback: Optional[ProgressCallback] = None) -> None:
        """
        Install release into game_path.

        Everything is staged in a temporary directory that is removed afterwards.

        Raises:
            InstallError: on any failed step
        """
        game_path = Path(game_path)
        if not game_path.is_dir():
            raise InstallError(f"Game path is not set or doesn't exist: {game_path}")

        logger.info(f"Installing Geode {release.tag} into {game_path}")
        with tempfile.TemporaryDirectory(prefix="geodify-") as temp_dir:
            archive = Path(temp_dir) / ARCHIVE_NAME
            extracted = Path(temp_dir) / "geode"

            if not self.filesystem.download_file(release.download_url, archive, progress_callback):
                raise InstallError(f"Download failed: {release.download_url}")
            if not self.filesystem.extract_archive(archive, extracted):
                raise InstallError("Failed to extract archive.")
            if not self.filesystem.copy_directory(extracted, game_path):
                raise InstallError(f"Failed to copy files to {game_path}")

        logger.info("Geode payload installed")
