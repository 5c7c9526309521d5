"""
FileSystemHandler module for managing file system operations.
This module handles downloads, archive extraction and directory copies.
"""

import shutil
import logging
import zipfile
from pathlib import Path
from typing import Callable, Optional

import requests

# Initialize logger for the module
logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class FileSystemHandler:
    def __init__(self, timeout: int = 300):
        self.logger = logging.getLogger(__name__)
        self.timeout = timeout

    def download_file(self, url: str, destination_path: Path,
                      progress_callback: Optional[ProgressCallback] = None) -> bool:
        """Downloads a file from a URL to a destination path."""
        self.logger.info(f"Downloading {url} to {destination_path}...")
        try:
            destination_path.parent.mkdir(parents=True, exist_ok=True)

            with requests.get(url, stream=True, timeout=self.timeout, verify=True) as r:
                r.raise_for_status()  # Raise HTTPError for bad responses (4xx or 5xx)
                total_size = int(r.headers.get('content-length', 0) or 0)
                downloaded = 0
                with open(destination_path, 'wb') as f:
                    for chunk in r.iter_content(chunk_size=8192):
                        if not chunk:
                            continue
                        f.write(chunk)
                        downloaded += len(chunk)
                        if progress_callback:
                            progress_callback(downloaded, total_size)

            self.logger.info("Download complete.")
            return True

        except (requests.exceptions.RequestException, OSError) as e:
            self.logger.warning(f"Download failed: {e}")
            # Clean up potentially incomplete file
            if destination_path.exists():
                try:
                    destination_path.unlink()
                except OSError:
                    pass
            return False

    @staticmethod
    def extract_archive(archive_path: Path, destination: Path) -> bool:
        """Extract a zip archive into destination."""
        try:
            destination.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive_path, 'r') as zf:
                zf.extractall(destination)
            logger.info(f"Extracted {archive_path} to {destination}")
            return True
        except (zipfile.BadZipFile, OSError) as e:
            logger.warning(f"Failed to extract {archive_path}: {e}")
            return False

    @staticmethod
    def copy_directory(source: Path, destination: Path, dirs_exist_ok=True) -> bool:
        """Recursively copy the contents of source into destination."""
        try:
            if not source.is_dir():
                logger.warning(f"Source for copy is not a directory: {source}")
                return False
            shutil.copytree(source, destination, dirs_exist_ok=dirs_exist_ok)
            logger.info(f"Copied {source} to {destination}")
            return True
        except (shutil.Error, OSError) as e:
            logger.warning(f"Failed to copy {source} to {destination}: {e}")
            return False
