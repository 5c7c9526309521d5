#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Geodify CLI Frontend - Main Entry Point

Command-line interface for Geodify. Without a subcommand it runs the
interactive installer; the subcommands expose the Steam config editor.
"""

import os
import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from geodify import __version__ as geodify_version
from geodify.backend.core.launch_options import build_launch_options
from geodify.backend.handlers.config_handler import ConfigHandler
from geodify.backend.handlers.logging_handler import LoggingHandler
from geodify.backend.handlers.menu_handler import MenuHandler
from geodify.backend.handlers.path_handler import PathHandler
from geodify.backend.handlers.vdf_patcher import (
    VDFPatchError, read_display_name, read_internal_name, set_compat_tool, set_launch_options
)
from geodify.backend.models.configuration import (
    InstallContext, SystemInfo, CHANNEL_NIGHTLY, CHANNEL_STABLE,
    GPU_NVIDIA, GPU_OTHER, DISPLAY_WAYLAND, DISPLAY_X11
)
from geodify.backend.services.geode_install_service import GeodeInstallService, InstallError
from geodify.backend.services.platform_detection_service import PlatformDetectionService
from geodify.backend.services.proton_detection_service import ProtonDetectionService
from geodify.backend.services.release_service import ReleaseService, ReleaseResolutionError
from geodify.backend.services.steam_config_service import SteamConfigResult, SteamConfigService
from geodify.backend.services.steam_process_service import SteamProcessService, SteamProcessError
from geodify.shared.colors import COLOR_INFO, COLOR_ERROR, COLOR_RESET, COLOR_SUCCESS, COLOR_WARNING
from geodify.shared.ui_utils import print_geodify_banner, print_warning, VerbosePrinter

from .menus.setup_wizard import SetupWizardMenu

logger = logging.getLogger(__name__)

LOGGER_NAME = "geodify"


class GeodifyCLI:
    """Main application class for Geodify CLI Frontend"""

    def __init__(self, menu: Optional[MenuHandler] = None):
        self._debug_mode = False
        self.verbose = False
        self.args = None
        self.parser = None

        self._configure_logging_early()

        self.config_handler = ConfigHandler()
        self.menu = menu or MenuHandler()
        self.say = VerbosePrinter(False)

    def _configure_logging_early(self):
        """Keep the root logger quiet until arguments are parsed"""
        logging.getLogger().setLevel(logging.WARNING)

    def _configure_logging_final(self, rotate: bool):
        """Attach file/console handlers and set the level from the parsed arguments"""
        logging_handler = LoggingHandler()
        if rotate:
            logging_handler.rotate_log_for_logger()
            logging_handler.cleanup_old_logs()
        app_logger = logging_handler.setup_logger(LOGGER_NAME)

        if self.args.debug:
            app_logger.setLevel(logging.DEBUG)
            logging_handler.set_console_level(app_logger, logging.DEBUG)
            print("Debug logging enabled for console and file")
        elif self.args.verbose:
            app_logger.setLevel(logging.INFO)
        else:
            app_logger.setLevel(logging.WARNING)

    def run(self, argv=None) -> int:
        self.parser, self.args = self._parse_args(argv)
        self._debug_mode = self.args.debug
        self.verbose = self.args.verbose or self.args.debug
        self.say = VerbosePrinter(self.verbose)

        command = getattr(self.args, 'command', None)
        self._configure_logging_final(rotate=command is None)
        logger.debug(f"Parsed args: {self.args}")

        if command:
            return self._run_command(command, self.args)
        return self._run_interactive()

    def _parse_args(self, argv=None):
        parser = argparse.ArgumentParser(
            prog="geodify",
            description="Geodify: Geode installer for Geometry Dash on Linux"
        )
        parser.add_argument("-V", "--version", action="store_true", help="Show Geodify version and exit")
        parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging (implies verbose)")
        parser.add_argument("-v", "--verbose", action="store_true", help="Show every step")

        # Installer options
        parser.add_argument("--channel", choices=[CHANNEL_NIGHTLY, CHANNEL_STABLE], help="Geode build to install")
        parser.add_argument("--game-path", help="Geometry Dash folder (skips detection)")
        parser.add_argument("--proton", help="Compatibility tool internal name, or path to a Proton folder")
        parser.add_argument("--gpu", choices=[GPU_NVIDIA, GPU_OTHER], help="Override GPU detection")
        parser.add_argument("--display-server", choices=[DISPLAY_WAYLAND, DISPLAY_X11],
                            help="Override display server detection")
        parser.add_argument("-y", "--yes", action="store_true",
                            help="Accept detected values and skip all prompts")

        subparsers = parser.add_subparsers(dest="command", help="Steam config editing commands")

        p = subparsers.add_parser("internal-name", help="Print the internal name from a compatibilitytool.vdf")
        p.add_argument("path")

        p = subparsers.add_parser("display-name", help="Print the display name from a compatibilitytool.vdf")
        p.add_argument("path")

        p = subparsers.add_parser("launch-opts", help="Set an app's launch options in localconfig.vdf")
        p.add_argument("path")
        p.add_argument("app_id")
        p.add_argument("launch_options", nargs=argparse.REMAINDER,
                       help="Launch options string, may start with a dash (e.g. -novid)")

        p = subparsers.add_parser("compat-tool", help="Map an app to a compatibility tool in config.vdf")
        p.add_argument("path")
        p.add_argument("app_id")
        p.add_argument("tool_name")

        args = parser.parse_args(argv)
        if args.command == "launch-opts" and not args.launch_options:
            parser.error("launch-opts: missing launch options")
        if args.version:
            print(f"Geodify version {geodify_version}")
            sys.exit(0)
        return parser, args

    # --- Subcommands ---

    def _run_command(self, command, args) -> int:
        """Run a specific command"""
        if command == "internal-name":
            name = read_internal_name(args.path)
            if name:
                print(name)
            return 0
        elif command == "display-name":
            name = read_display_name(args.path)
            if name:
                print(name)
            return 0

        suffix = self.config_handler.get("backup_suffix")
        try:
            if command == "launch-opts":
                set_launch_options(args.path, args.app_id, " ".join(args.launch_options), suffix)
            elif command == "compat-tool":
                set_compat_tool(args.path, args.app_id, args.tool_name, suffix)
            else:
                print(f"Unknown command: {command}", file=sys.stderr)
                return 1
        except VDFPatchError as e:
            logger.warning(f"{command} failed for {args.path}: {e}")
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print("OK")
        return 0

    # --- Interactive workflow ---

    def _detect_system(self) -> SystemInfo:
        print("Detecting system configuration...")
        platform = PlatformDetectionService.get_instance()
        info = SystemInfo(
            gpu_type=self.config_handler.get("gpu_type") or platform.detect_gpu_type(),
            display_server=self.config_handler.get("display_server") or platform.detect_display_server(),
        )
        self.say(f"GPU: {info.gpu_type}")
        self.say(f"Display server: {info.display_server}")

        info.steam_root = PathHandler.find_steam_root(self.config_handler.get("steam_path"))
        self.say(f"Steam root: {info.steam_root or '(not found)'}")
        info.library_paths = PathHandler.get_all_steam_library_paths(info.steam_root)

        remembered = self.config_handler.get("game_path")
        if remembered and PathHandler.is_valid_game_path(remembered)[0]:
            info.game_path = Path(remembered)
        else:
            info.game_path = PathHandler.find_game_installation(info.library_paths)
        self.say(f"GD path: {info.game_path or '(not found)'}")

        detector = ProtonDetectionService()
        info.proton_versions = detector.collect_all_proton_versions(info.steam_root, info.library_paths)
        for version in info.proton_versions:
            self.say(f"Found Proton: [{version.internal_name}] \"{version.display_name}\" (from {version.source})")
        info.best_proton = detector.best_proton(info.proton_versions)
        self.say(f"Proton (auto-best): {info.best_proton.internal_name if info.best_proton else '(not found)'}")

        logger.info(f"System info: {info.to_dict()}")
        print("Done.")
        return info

    def _initial_context(self, info: SystemInfo) -> InstallContext:
        args = self.args
        remembered_proton = self.config_handler.get("proton_name")
        installed = {v.internal_name for v in info.proton_versions}

        context = InstallContext.from_system_info(
            info,
            verbose=self.verbose or self.config_handler.get("verbose", False),
            channel=args.channel or self.config_handler.get("channel", CHANNEL_NIGHTLY),
            gpu_type=args.gpu,
            display_server=args.display_server,
            app_id=self.config_handler.get("app_id"),
        )
        if remembered_proton in installed:
            context.proton_name = remembered_proton

        if args.game_path:
            context.game_path = Path(PathHandler.normalize_game_path_input(args.game_path))
        if args.proton:
            if os.path.isdir(os.path.expanduser(args.proton)):
                folder = Path(os.path.expanduser(args.proton))
                context.proton_name, _, _ = ProtonDetectionService.resolve_custom_proton(folder)
                context.custom_proton_path = folder
            else:
                context.proton_name = args.proton

        context.launch_options = build_launch_options(context.gpu_type, context.display_server)
        return context

    def _check_steam_closed(self, assume_yes: bool):
        if not SteamProcessService.is_steam_running():
            return
        print()
        print(f"{COLOR_WARNING}Steam is currently running.{COLOR_RESET}")
        print("Steam must be closed before config files can be safely edited.")
        if assume_yes or self.menu.confirm("Close Steam now?"):
            print("Waiting for Steam to exit...")
            try:
                SteamProcessService.stop_steam(timeout=10)
                print("Steam closed.")
            except SteamProcessError as e:
                logger.warning(str(e))
                print_warning("Steam did not exit cleanly. Config changes may be overwritten.")
        else:
            print_warning("Proceeding with Steam open. Config changes may be overwritten on Steam exit.")

    def _install_payload(self, release, game_path):
        """Install with a tqdm progress bar over the download"""
        bar = None

        def progress(downloaded, total):
            nonlocal bar
            if bar is None:
                bar = tqdm(total=total or None, unit='B', unit_scale=True, unit_divisor=1024,
                           desc=f"Geode {release.tag}", leave=False)
            bar.update(downloaded - bar.n)

        try:
            GeodeInstallService().install(release, game_path, progress)
        finally:
            if bar is not None:
                bar.close()

    def _configure_steam(self, context: InstallContext, info: SystemInfo):
        service = SteamConfigService(context.app_id, self.config_handler.get("backup_suffix"))
        if context.proton_name:
            print(f"  Setting Proton to {COLOR_INFO}{context.proton_name}{COLOR_RESET}...")
        result = service.configure(info.steam_root, context.proton_name, context.launch_options)

        if result.steam_root is None:
            print_warning("Could not find Steam root. Skipping automatic Steam configuration.")
            print("  Set launch options manually in Steam > GD Properties > General:")
            print(f"  {COLOR_INFO}{context.launch_options}{COLOR_RESET}")
            return result

        if result.compat_tool is not None:
            self.say(f"config.vdf updated (backup: {result.compat_tool.backup_path or 'not needed'})")
        elif result.compat_tool_skipped:
            if context.proton_name:
                print_warning("No config.vdf found, skipping Proton config.")
                print("  Set Proton manually in Steam > GD Properties > Compatibility.")
            else:
                print_warning("No Proton selected, skipping Proton config.")
                print("  Install GE-Proton via ProtonPlus or ProtonUp-Qt, or enable Proton Experimental in Steam.")

        for uid, patch in result.launch_options:
            action = "Added" if patch.created_block else "Wrote"
            print(f"  {action} launch options (Steam user {COLOR_INFO}{uid}{COLOR_RESET})")
            self.say(f"localconfig.vdf updated for user {uid} (backup: {patch.backup_path or 'not needed'})")

        for path, reason in result.failures:
            print_warning(f"Failed to update {path}: {reason}")
            if path.name == "config.vdf":
                print("  Set Proton manually in Steam > GD Properties > Compatibility.")

        if not result.localconfig_found:
            print_warning("No localconfig.vdf found. Set launch options manually:")
            print(f"  {COLOR_INFO}{context.launch_options}{COLOR_RESET}")
        return result

    def _print_report(self, context: InstallContext, tag: str, steam_result: SteamConfigResult):
        print()
        print(f"{COLOR_SUCCESS}Geode installed successfully{COLOR_RESET} at {COLOR_WARNING}{context.game_path}{COLOR_RESET}.")
        if context.proton_name:
            print(f"Proton: {COLOR_INFO}{context.proton_name}{COLOR_RESET}")
        print(f"Geode: {COLOR_INFO}{tag}{COLOR_RESET}")
        print()
        if steam_result.ok and steam_result.localconfig_found:
            print("Launch options have been written to your Steam config.")
            print("If Geode doesn't load, verify manually in Steam:")
        else:
            print_warning("Steam was not fully configured. Set the launch options manually in Steam:")
        print("  Right-click GD > Properties > General > Launch Options:")
        print(f"  {COLOR_INFO}{context.launch_options}{COLOR_RESET}")
        print()

    def _run_interactive(self) -> int:
        """Run the installer workflow"""
        try:
            print_geodify_banner()
            info = self._detect_system()
            context = self._initial_context(info)

            if not self.args.yes:
                context = SetupWizardMenu(self.menu).run(info, context)
            self.say.enabled = context.verbose
            if context.verbose and not self._debug_mode:
                logging.getLogger(LOGGER_NAME).setLevel(logging.INFO)

            SetupWizardMenu.print_summary(context)
            if not self.args.yes and not self.menu.confirm("Proceed with installation?"):
                print("Aborted.")
                return 0

            if not context.game_path or not PathHandler.is_valid_game_path(context.game_path)[0]:
                print(f"{COLOR_ERROR}Error:{COLOR_RESET} Geometry Dash path is not set or invalid: {context.game_path}")
                return 1
            self.config_handler.remember_choices(context)

            print()
            print("Resolving Geode version...")
            release = ReleaseService(self.config_handler.get("request_timeout", 30)).resolve(context.channel)
            print(f"Tag: {COLOR_INFO}{release.tag}{COLOR_RESET}")
            self.say(f"URL: {release.download_url}")

            self._check_steam_closed(self.args.yes)

            print()
            print(f"Downloading Geode {COLOR_INFO}{release.tag}{COLOR_RESET}...")
            self._install_payload(release, context.game_path)
            print(f"{COLOR_SUCCESS}Done.{COLOR_RESET}")

            print()
            print("Configuring Steam...")
            steam_result = self._configure_steam(context, info)

            self._print_report(context, release.tag, steam_result)
            return 0

        except KeyboardInterrupt:
            print(f"\n{COLOR_INFO}Exiting Geodify...{COLOR_RESET}")
            return 0
        except (ReleaseResolutionError, InstallError) as e:
            logger.warning(f"Install aborted: {e}")
            print(f"\n{COLOR_ERROR}Error:{COLOR_RESET} {e}")
            return 1


def main(argv=None) -> int:
    return GeodifyCLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
