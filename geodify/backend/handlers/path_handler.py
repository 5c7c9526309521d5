#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Path Handler Module
Locates the Steam installation, its libraries, the game directory and the
Steam configuration files Geodify edits
"""

import os
import shutil
import logging
import subprocess
from pathlib import Path
from typing import Optional, List, Tuple

import psutil
import vdf

from geodify.shared.paths import get_xdg_data_home

# Initialize logger
logger = logging.getLogger(__name__)

GAME_DIR_NAME = "Geometry Dash"
GAME_MARKER_FILES = ["libcocos2d.dll", "GeometryDash.exe"]
FLATPAK_STEAM_ID = "com.valvesoftware.Steam"


class PathHandler:
    """
    Handles Steam and game path discovery
    """

    @staticmethod
    def is_steam_root(path: Path) -> bool:
        return (Path(path) / "config" / "config.vdf").is_file()

    @staticmethod
    def steam_root_candidates() -> List[Path]:
        """Static locations a Steam root is commonly found at, most likely first."""
        home = Path.home()
        return [
            get_xdg_data_home() / "Steam",
            home / ".steam/steam",
            home / ".steam/root",
            home / "Steam",
            home / ".var/app/com.valvesoftware.Steam/data/Steam",
            home / "snap/steam/common/.steam/steam",
        ]

    @staticmethod
    def _steam_root_from_process() -> Optional[Path]:
        """Ask a running Steam client where its data lives."""
        for proc in psutil.process_iter(['name']):
            try:
                if proc.info['name'] != 'steam':
                    continue
                data_path = proc.environ().get('STEAM_DATA_PATH')
                if data_path and PathHandler.is_steam_root(Path(data_path)):
                    logger.debug(f"Steam root from running process env: {data_path}")
                    return Path(data_path)
                exe = proc.exe()
                if exe:
                    bin_dir = Path(exe).resolve().parent
                    for candidate in (bin_dir, bin_dir.parent):
                        if PathHandler.is_steam_root(candidate):
                            logger.debug(f"Steam root from running process exe: {candidate}")
                            return candidate
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return None

    @staticmethod
    def _steam_root_from_command() -> Optional[Path]:
        steam_cmd = shutil.which('steam')
        if not steam_cmd:
            return None
        bin_dir = Path(steam_cmd).resolve().parent
        for candidate in (bin_dir, bin_dir.parent):
            if PathHandler.is_steam_root(candidate):
                logger.debug(f"Steam root from steam on PATH: {candidate}")
                return candidate
        return None

    @staticmethod
    def _steam_root_from_flatpak() -> Optional[Path]:
        if not shutil.which('flatpak'):
            return None
        try:
            result = subprocess.run(
                ['flatpak', 'info', FLATPAK_STEAM_ID],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=5
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Error querying Flatpak Steam: {e}")
            return None
        if result.returncode != 0:
            return None
        flatpak_root = Path.home() / ".var/app/com.valvesoftware.Steam/data/Steam"
        if PathHandler.is_steam_root(flatpak_root):
            logger.debug(f"Steam root from Flatpak: {flatpak_root}")
            return flatpak_root
        return None

    @staticmethod
    def find_steam_root(override: Optional[str] = None) -> Optional[Path]:
        """
        Find the Steam client's root directory.

        Args:
            override: a configured path, used as-is when it looks like a Steam root

        Returns:
            Path to the root (the directory holding config/config.vdf), or None
        """
        logger.debug("Searching for Steam root...")
        if override:
            override_path = Path(override).expanduser()
            if PathHandler.is_steam_root(override_path):
                logger.info(f"Using configured Steam root: {override_path}")
                return override_path
            logger.warning(f"Configured Steam path is not a Steam root: {override_path}")

        probes = (
            PathHandler._steam_root_from_process,
            PathHandler._steam_root_from_command,
            PathHandler._steam_root_from_flatpak,
        )
        for probe in probes:
            try:
                root = probe()
            except Exception as e:
                logger.debug(f"Steam root probe {probe.__name__} failed: {e}")
                continue
            if root:
                logger.info(f"Found Steam root: {root}")
                return root

        for candidate in PathHandler.steam_root_candidates():
            if PathHandler.is_steam_root(candidate):
                logger.info(f"Found Steam root (static candidate): {candidate}")
                return candidate

        logger.warning("Steam root not found")
        return None

    @staticmethod
    def get_all_steam_library_paths(steam_root: Optional[Path]) -> List[Path]:
        """The Steam root plus every existing library listed in libraryfolders.vdf."""
        if not steam_root:
            return []
        steam_root = Path(steam_root)
        libraries = [steam_root]
        vdf_path = steam_root / "steamapps" / "libraryfolders.vdf"
        if not vdf_path.is_file():
            return libraries

        try:
            with open(vdf_path, 'r', encoding='utf-8', errors='replace') as f:
                data = vdf.load(f)
        except (OSError, SyntaxError) as e:
            logger.error(f"Failed to parse {vdf_path}: {e}")
            return libraries

        folders = {}
        for key, value in data.items():
            if key.lower() == 'libraryfolders' and isinstance(value, dict):
                folders = value
                break

        for entry in folders.values():
            if not isinstance(entry, dict) or not entry.get('path'):
                continue
            lib_path = Path(entry['path'])
            if lib_path.is_dir() and lib_path not in libraries:
                libraries.append(lib_path)
                logger.debug(f"Found Steam library: {lib_path}")
        return libraries

    @staticmethod
    def is_valid_game_path(path) -> Tuple[bool, str]:
        """
        Check that a directory holds a Geometry Dash installation.

        Returns:
            (valid, reason): reason explains why the path was rejected
        """
        if not path:
            return False, "No path specified."
        path = Path(path)
        if not path.is_dir():
            return False, "Path is not a directory."
        if not any((path / marker).is_file() for marker in GAME_MARKER_FILES):
            return False, "Path doesn't appear to contain Geometry Dash."
        return True, ""

    @staticmethod
    def normalize_game_path_input(raw: str) -> str:
        """Clean up a path typed or dragged into the terminal."""
        text = raw.strip().strip("'\"")
        if text.endswith("/GeometryDash.exe"):
            text = text[:-len("/GeometryDash.exe")]
        text = text.rstrip('/') or text
        return os.path.expanduser(text)

    @staticmethod
    def find_game_installation(library_paths: List[Path]) -> Optional[Path]:
        """Search every Steam library, then a few common non-Steam locations."""
        logger.debug("Searching for Geometry Dash across all Steam libraries...")
        for lib_root in library_paths:
            candidate = Path(lib_root) / "steamapps" / "common" / GAME_DIR_NAME
            logger.debug(f"Testing {candidate}")
            if PathHandler.is_valid_game_path(candidate)[0]:
                if "/snap/steam/" in str(candidate):
                    logger.warning("Steam via Snap is not officially supported. Consider Flatpak.")
                logger.info(f"Found Geometry Dash: {candidate}")
                return candidate

        home = Path.home()
        extra_candidates = [
            home / "Games" / GAME_DIR_NAME,
            home / "games" / GAME_DIR_NAME,
            get_xdg_data_home() / "games" / GAME_DIR_NAME,
        ]
        for candidate in extra_candidates:
            if PathHandler.is_valid_game_path(candidate)[0]:
                logger.info(f"Found Geometry Dash (extra path): {candidate}")
                return candidate

        logger.warning("Geometry Dash installation not found")
        return None

    @staticmethod
    def find_steam_config_vdf(steam_root: Path) -> Optional[Path]:
        config_vdf = Path(steam_root) / "config" / "config.vdf"
        return config_vdf if config_vdf.is_file() else None

    @staticmethod
    def find_localconfig_files(steam_root: Path) -> List[Tuple[str, Path]]:
        """
        Find localconfig.vdf for every Steam user on this machine.

        Returns:
            List of (user id, path) pairs, sorted by user id
        """
        userdata = Path(steam_root) / "userdata"
        if not userdata.is_dir():
            return []
        found = []
        for user_dir in sorted(userdata.iterdir()):
            localconfig = user_dir / "config" / "localconfig.vdf"
            if user_dir.is_dir() and localconfig.is_file():
                found.append((user_dir.name, localconfig))
        return found
