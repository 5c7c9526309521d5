"""
Proton Detection Service

Discovers installed compatibility tools (Valve Proton, GE-Proton and other
custom builds) and picks the one Geometry Dash should run with.
"""

import os
import re
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from geodify.backend.handlers.vdf_patcher import read_internal_name, read_display_name
from geodify.backend.models.configuration import ProtonVersion
from geodify.shared.paths import get_xdg_data_home

logger = logging.getLogger(__name__)

DESCRIPTOR_NAME = "compatibilitytool.vdf"
COMPAT_TOOLS_DIR = "compatibilitytools.d"

# Preference order for the automatic pick, matched as name prefixes
PROTON_TIERS = [
    "GE-Proton",
    "proton-cachyos",
    "Proton-CachyOS",
    "proton_cachyos",
    "Proton-tkg",
    "proton-tkg",
    "Proton-Sarek",
    "proton-sarek",
    "Proton-EM",
    "proton-em",
    "Kron4ek-Proton",
    "kron4ek-proton",
    "SteamTinkerLaunch",
    "proton_experimental",
    "proton_",
]

EXPERIMENTAL_FOLDERS = ("Proton - Experimental", "Proton - Beta", "Proton Hotfix")


def natural_sort_key(name: str) -> Tuple:
    """Key that orders GE-Proton9-27 before GE-Proton10-3."""
    parts = re.split(r'(\d+)', name)
    return tuple(int(p) if i % 2 else p for i, p in enumerate(parts))


def internal_name_from_folder(folder_name: str) -> Optional[str]:
    """Internal name of a Valve Proton folder that ships no descriptor."""
    if folder_name in EXPERIMENTAL_FOLDERS:
        return "proton_experimental"
    match = re.search(r'\d+', folder_name)
    if match:
        return f"proton_{match.group(0)}"
    return None


class ProtonDetectionService:
    """Collects installed Proton versions into one list of ProtonVersion records."""

    def __init__(self):
        self.versions: List[ProtonVersion] = []

    @staticmethod
    def well_known_compat_dirs() -> List[Path]:
        home = Path.home()
        return [
            get_xdg_data_home() / "Steam" / COMPAT_TOOLS_DIR,
            home / ".steam/root" / COMPAT_TOOLS_DIR,
            home / ".steam/steam" / COMPAT_TOOLS_DIR,
            home / ".var/app/com.valvesoftware.Steam/data/Steam" / COMPAT_TOOLS_DIR,
            home / "snap/steam/common/.local/share/Steam" / COMPAT_TOOLS_DIR,
            home / ".snap/data/steam/common/.local/share/Steam" / COMPAT_TOOLS_DIR,
            Path("/usr/share/steam") / COMPAT_TOOLS_DIR,
            Path("/usr/local/share/steam") / COMPAT_TOOLS_DIR,
        ]

    def _add(self, internal_name: str, display_name: str, source: str) -> None:
        if not internal_name:
            return
        if any(v.internal_name == internal_name for v in self.versions):
            return
        self.versions.append(ProtonVersion(internal_name, display_name, source))
        logger.debug(f"Found Proton: [{internal_name}] \"{display_name}\" (from {source})")

    def _scan_compat_dir(self, compat_dir: Path) -> None:
        if not compat_dir.is_dir():
            return
        for folder in sorted(compat_dir.iterdir()):
            if not folder.is_dir():
                continue
            descriptor = folder / DESCRIPTOR_NAME
            internal = read_internal_name(descriptor)
            if not internal:
                continue
            display = read_display_name(descriptor) or folder.name
            self._add(internal, display, str(compat_dir.parent))

    def _scan_steamapps_common(self, steamapps: Path) -> None:
        common = steamapps / "common"
        if not common.is_dir():
            return
        for folder in sorted(common.glob("Proton*")):
            if not folder.is_dir():
                continue
            descriptor = folder / DESCRIPTOR_NAME
            internal = read_internal_name(descriptor) or internal_name_from_folder(folder.name)
            if not internal:
                continue
            display = read_display_name(descriptor) or folder.name
            self._add(internal, display, f"Steam ({steamapps})")

    def collect_all_proton_versions(self, steam_root: Optional[Path],
                                    library_paths: List[Path]) -> List[ProtonVersion]:
        """
        Scan every compatibilitytools.d and every steamapps/common/Proton* folder.

        Directories reached through different symlinks are scanned once.
        Versions are de-duplicated by internal name, first one found wins.
        """
        logger.info("Collecting all installed Proton versions...")
        self.versions = []

        compat_dirs = []
        if steam_root:
            compat_dirs.append(Path(steam_root) / COMPAT_TOOLS_DIR)
            compat_dirs.extend(Path(lib) / COMPAT_TOOLS_DIR for lib in library_paths)
        compat_dirs.extend(self.well_known_compat_dirs())

        seen = set()
        for compat_dir in compat_dirs:
            real_dir = os.path.realpath(compat_dir)
            if real_dir in seen:
                continue
            seen.add(real_dir)
            try:
                self._scan_compat_dir(compat_dir)
            except OSError as e:
                logger.debug(f"Could not scan {compat_dir}: {e}")

        if steam_root:
            for lib in library_paths:
                try:
                    self._scan_steamapps_common(Path(lib) / "steamapps")
                except OSError as e:
                    logger.debug(f"Could not scan {lib}/steamapps/common: {e}")

        logger.info(f"Total Proton versions found: {len(self.versions)}")
        return list(self.versions)

    @staticmethod
    def best_proton(versions: List[ProtonVersion]) -> Optional[ProtonVersion]:
        """Highest natural version within the first tier that has any match."""
        for tier in PROTON_TIERS:
            matches = [v for v in versions if v.internal_name.startswith(tier)]
            if matches:
                best = max(matches, key=lambda v: natural_sort_key(v.internal_name))
                logger.debug(f"Best Proton: {best.internal_name} (tier {tier})")
                return best
        return None

    @staticmethod
    def resolve_custom_proton(folder) -> Tuple[str, Optional[str], bool]:
        """
        Internal name for a Proton folder the user pointed at.

        Returns:
            (internal_name, display_name, from_descriptor): when the folder has no
            readable descriptor the folder name is used and from_descriptor is False
        """
        folder = Path(folder)
        descriptor = folder / DESCRIPTOR_NAME
        internal = read_internal_name(descriptor)
        if internal:
            return internal, read_display_name(descriptor), True
        logger.warning(f"No {DESCRIPTOR_NAME} in {folder}, using folder name as Proton ID")
        return folder.name, None, False
