"""
Setup Wizard for the Geodify CLI Frontend
Walks through output mode, channel, GPU, display server, game path and Proton,
showing the detected value as the default of every step.
"""

import os
import logging
from typing import Optional

from geodify.backend.handlers.menu_handler import MenuHandler
from geodify.backend.handlers.path_handler import PathHandler
from geodify.backend.models.configuration import (
    InstallContext, SystemInfo, CHANNEL_NIGHTLY, CHANNEL_STABLE,
    GPU_NVIDIA, GPU_OTHER, DISPLAY_WAYLAND, DISPLAY_X11
)
from geodify.backend.core.launch_options import build_launch_options, launch_option_notes
from geodify.backend.services.proton_detection_service import ProtonDetectionService
from geodify.shared.colors import (
    COLOR_INFO, COLOR_PROMPT, COLOR_RESET, COLOR_SELECTION, COLOR_WARNING, COLOR_DISABLED
)
from geodify.shared.ui_utils import print_section_header

logger = logging.getLogger(__name__)


def _gpu_label(gpu_type: str) -> str:
    return "Nvidia" if gpu_type == GPU_NVIDIA else "AMD / Intel / Other"


class SetupWizardMenu:
    """
    Interactive setup wizard.

    Each step edits the InstallContext in place; run() returns it with the
    launch options computed from the final GPU and display server.
    """

    def __init__(self, menu: Optional[MenuHandler] = None):
        self.menu = menu or MenuHandler()
        self.logger = logger

    def run(self, system_info: SystemInfo, context: InstallContext) -> InstallContext:
        print(f"{COLOR_PROMPT}=== Setup Wizard ==={COLOR_RESET}")
        print(f"{COLOR_DISABLED}Each step shows the auto-detected value as the default. Press Enter to accept.{COLOR_RESET}")

        self._ask_output_mode(context)
        self._ask_channel(context)
        self._ask_gpu(context)
        self._ask_display_server(context)
        self._ask_game_path(context, system_info)
        self._ask_proton(context, system_info)

        context.launch_options = build_launch_options(context.gpu_type, context.display_server)
        self.logger.debug(f"Wizard result: {context.to_dict()}")
        return context

    def _ask_output_mode(self, context: InstallContext):
        print_section_header("Output mode")
        current = "Verbose" if context.verbose else "Quiet"
        picked = self.menu.pick_option(
            f"How much output? (current: {current})",
            ["Quiet   - only show important messages", "Verbose - show every step"],
            default=1 if context.verbose else 0,
        )
        context.verbose = picked == 1

    def _ask_channel(self, context: InstallContext):
        print_section_header("Geode channel")
        picked = self.menu.pick_option(
            "Which build of Geode?",
            ["Nightly - latest development build", "Stable  - latest official release"],
            default=1 if context.channel == CHANNEL_STABLE else 0,
        )
        context.channel = CHANNEL_NIGHTLY if picked == 0 else CHANNEL_STABLE

    def _ask_gpu(self, context: InstallContext):
        print_section_header("GPU type")
        label = _gpu_label(context.gpu_type)
        picked = self.menu.pick_option(
            f"GPU type (detected: {label})",
            [f"Use detected value  [{label}]",
             "Nvidia  - enables NVAPI, NGX updater, Reflex",
             "AMD / Intel / Other"],
            default=0,
        )
        if picked == 1:
            context.gpu_type = GPU_NVIDIA
        elif picked == 2:
            context.gpu_type = GPU_OTHER

    def _ask_display_server(self, context: InstallContext):
        print_section_header("Display server")
        detected = context.display_server
        picked = self.menu.pick_option(
            f"Display server (detected: {detected})",
            [f"Use detected value  [{detected}]",
             "Wayland - adds SDL_VIDEODRIVER=wayland",
             "X11     - no extra variable added"],
            default=0,
        )
        if picked == 1:
            context.display_server = DISPLAY_WAYLAND
        elif picked == 2:
            context.display_server = DISPLAY_X11

    def _ask_game_path_manually(self) -> Optional[str]:
        return self.menu.get_path(
            "Path to the Geometry Dash folder",
            validator=PathHandler.is_valid_game_path,
            normalizer=PathHandler.normalize_game_path_input,
        )

    def _ask_game_path(self, context: InstallContext, system_info: SystemInfo):
        print_section_header("Geometry Dash location")
        if context.game_path:
            picked = self.menu.pick_option(
                f"Game path (detected: {context.game_path})",
                [f"Use detected path  [{context.game_path}]", "Enter manually"],
                default=0,
            )
            if picked == 0:
                return
        else:
            print(f"  {COLOR_WARNING}Could not auto-detect Geometry Dash.{COLOR_RESET}")
            print(f"  Common path: {COLOR_DISABLED}~/.local/share/Steam/steamapps/common/Geometry Dash{COLOR_RESET}")

        entered = self._ask_game_path_manually()
        context.game_path = entered
        context.__post_init__()

    def _ask_custom_proton(self, context: InstallContext):
        folder = self.menu.get_path(
            "Path to Proton version folder",
            validator=lambda p: (True, "") if p and os.path.isdir(p) else (False, "Not a directory."),
            normalizer=lambda raw: os.path.expanduser(raw.strip().rstrip('/')),
        )
        if folder is None:
            context.proton_name = None
            return
        internal, display, from_descriptor = ProtonDetectionService.resolve_custom_proton(folder)
        if from_descriptor:
            print(f"  Found: {COLOR_INFO}{display or internal}{COLOR_RESET}  (internal: {internal})")
        else:
            print(f"  {COLOR_WARNING}Warning:{COLOR_RESET} No compatibilitytool.vdf found, using folder name as Proton ID.")
        context.proton_name = internal
        context.custom_proton_path = folder
        context.__post_init__()

    def _ask_proton(self, context: InstallContext, system_info: SystemInfo):
        print_section_header("Proton version")
        versions = system_info.proton_versions

        if not versions:
            print(f"  {COLOR_WARNING}No Proton versions found automatically.{COLOR_RESET}")
            picked = self.menu.pick_option(
                "Proton version",
                ["Skip - set manually in Steam later", "Enter a custom Proton path now"],
                default=0,
            )
            if picked == 1:
                self._ask_custom_proton(context)
            else:
                context.proton_name = None
            return

        best = system_info.best_proton
        auto_label = "Auto-select best"
        if best:
            auto_label = f"Auto-select best  [{best.display_name} / {best.internal_name}]"
        options = [auto_label] + [v.label() for v in versions] + ["Enter a custom Proton path manually"]

        # Pre-select the remembered choice when it is still installed
        default = 0
        for i, version in enumerate(versions, start=1):
            if context.proton_name and version.internal_name == context.proton_name and version is not best:
                default = i
                break

        print(f"  Found {COLOR_SELECTION}{len(versions)}{COLOR_RESET} Proton installation(s).")
        picked = self.menu.pick_option("Which Proton version to assign to Geometry Dash?", options, default=default)

        if picked == 0:
            context.proton_name = best.internal_name if best else None
        elif picked == len(versions) + 1:
            context.proton_name = None
            self._ask_custom_proton(context)
        else:
            context.proton_name = versions[picked - 1].internal_name

    @staticmethod
    def print_summary(context: InstallContext):
        def row(label, value):
            print(f"{COLOR_PROMPT}│{COLOR_RESET}  {label:<14} {COLOR_WARNING}{value}{COLOR_RESET}")

        print()
        print(f"{COLOR_PROMPT}┌─ Configuration summary {'─' * 48}┐{COLOR_RESET}")
        row("Channel:", context.channel)
        row("Game path:", context.game_path or "(not found)")
        row("Proton:", context.proton_name or "(none, set in Steam)")
        row("GPU:", context.gpu_type)
        row("Display:", context.display_server)
        row("Verbose:", "yes" if context.verbose else "no")
        print(f"{COLOR_PROMPT}│{COLOR_RESET}")
        print(f"{COLOR_PROMPT}│{COLOR_RESET}  Launch options:")
        print(f"{COLOR_PROMPT}│{COLOR_RESET}  {COLOR_INFO}{context.launch_options}{COLOR_RESET}")
        print(f"{COLOR_PROMPT}└{'─' * 72}┘{COLOR_RESET}")
        print()
        for note in launch_option_notes(context.launch_options):
            print(f"{COLOR_WARNING}Note:{COLOR_RESET} {note}")
