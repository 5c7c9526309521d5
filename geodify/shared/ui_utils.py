"""
Small helpers for consistent CLI output.
"""

from geodify.shared.colors import (
    COLOR_DISABLED, COLOR_INFO, COLOR_PROMPT, COLOR_RESET, COLOR_WARNING
)

BANNER = r"""
   ____                _ _  __
  / ___| ___  ___   __| (_)/ _|_   _
 | |  _ / _ \/ _ \ / _` | | |_| | | |
 | |_| |  __/ (_) | (_| | |  _| |_| |
  \____|\___|\___/ \__,_|_|_|  \__, |
                               |___/
"""


def print_geodify_banner():
    print(f"{COLOR_INFO}{BANNER}{COLOR_RESET}")
    print(f"{COLOR_DISABLED}Geode installer for Geometry Dash on Linux{COLOR_RESET}")
    print()


def print_section_header(title: str):
    print()
    print(f"{COLOR_PROMPT}▸ {title}{COLOR_RESET}")


def print_warning(message: str):
    print(f"{COLOR_WARNING}Warning:{COLOR_RESET} {message}")


class VerbosePrinter:
    """Prints '[verbose]' lines only when verbose output was requested."""

    def __init__(self, enabled: bool = False):
        self.enabled = enabled

    def __call__(self, message: str):
        if message and self.enabled:
            print(f"{COLOR_DISABLED}[verbose]{COLOR_RESET} {message}")
