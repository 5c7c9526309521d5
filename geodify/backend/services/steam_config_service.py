"""
Steam Configuration Service

Writes the compatibility tool mapping into config.vdf and the launch options
into every user's localconfig.vdf. A file that cannot be patched is reported
and skipped, the remaining files are still processed.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from geodify.backend.handlers.path_handler import PathHandler
from geodify.backend.handlers.vdf_patcher import (
    BACKUP_SUFFIX, PatchResult, VDFPatchError, set_compat_tool, set_launch_options
)
from geodify.backend.models.configuration import GD_APP_ID

logger = logging.getLogger(__name__)


@dataclass
class SteamConfigResult:
    """Outcome of configuring Steam for one install."""
    steam_root: Optional[Path] = None
    compat_tool: Optional[PatchResult] = None
    compat_tool_skipped: bool = False
    launch_options: List[Tuple[str, PatchResult]] = field(default_factory=list)
    localconfig_found: bool = False
    failures: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.steam_root is not None and not self.failures


class SteamConfigService:
    """Applies the Geometry Dash patches to the Steam client's files."""

    def __init__(self, app_id: str = GD_APP_ID, backup_suffix: str = BACKUP_SUFFIX):
        self.app_id = str(app_id)
        self.backup_suffix = backup_suffix

    def configure(self, steam_root: Optional[Path], proton_name: Optional[str],
                  launch_options: str) -> SteamConfigResult:
        """
        Patch config.vdf (when proton_name is set) and every localconfig.vdf.

        Never raises VDFPatchError, failures are collected in the result.
        """
        result = SteamConfigResult(steam_root=Path(steam_root) if steam_root else None)
        if result.steam_root is None:
            logger.warning("Could not find Steam root. Skipping automatic Steam configuration.")
            return result

        config_vdf = PathHandler.find_steam_config_vdf(result.steam_root)
        if not proton_name:
            logger.warning("No Proton selected, skipping Proton config")
            result.compat_tool_skipped = True
        elif config_vdf is None:
            logger.warning(f"No config.vdf under {result.steam_root}, skipping Proton config")
            result.compat_tool_skipped = True
        else:
            try:
                result.compat_tool = set_compat_tool(
                    config_vdf, self.app_id, proton_name, self.backup_suffix
                )
                logger.info(f"config.vdf updated with compat tool {proton_name}")
            except VDFPatchError as e:
                logger.warning(f"Failed to update {config_vdf}: {e}")
                result.failures.append((config_vdf, str(e)))

        for uid, localconfig in PathHandler.find_localconfig_files(result.steam_root):
            result.localconfig_found = True
            try:
                patch = set_launch_options(
                    localconfig, self.app_id, launch_options, self.backup_suffix
                )
                result.launch_options.append((uid, patch))
                logger.info(f"localconfig.vdf updated for user {uid}")
            except VDFPatchError as e:
                logger.warning(f"Failed to update localconfig.vdf for user {uid}: {e}")
                result.failures.append((localconfig, str(e)))

        if not result.localconfig_found:
            logger.warning("No localconfig.vdf found, launch options must be set manually")
        return result
